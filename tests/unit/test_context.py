"""
Unit tests for the windowed conversation context.
"""

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from src.orchestrator.context import ConversationContext, ConversationTurn, TurnRole


def _history(count):
    turns = []
    for i in range(count):
        if i % 2 == 0:
            turns.append(ConversationTurn(TurnRole.USER, f"question {i}"))
        else:
            turns.append(ConversationTurn(TurnRole.ASSISTANT, f"answer {i}", "Coordinator"))
    return turns


class TestFromHistory:

    def test_keeps_last_five_turns_then_user_turn(self):
        history = _history(8)
        context = ConversationContext.from_history(history, "new question")

        assert len(context) == 6
        assert [t.content for t in context.turns[:5]] == [t.content for t in history[3:]]
        assert context.turns[-1] == ConversationTurn(TurnRole.USER, "new question")
        assert context.carried_over == 5

    def test_short_history_is_carried_entirely(self):
        history = _history(2)
        context = ConversationContext.from_history(history, "hello")

        assert len(context) == 3
        assert context.carried_over == 2

    def test_empty_history(self):
        context = ConversationContext.from_history([], "hello")
        assert [t.content for t in context] == ["hello"]
        assert context.carried_over == 0

    def test_custom_window(self):
        context = ConversationContext.from_history(_history(8), "hi", window=2)
        assert len(context) == 3

    def test_zero_window_drops_history(self):
        context = ConversationContext.from_history(_history(4), "hi", window=0)
        assert len(context) == 1

    def test_history_is_not_mutated(self):
        history = _history(3)
        context = ConversationContext.from_history(history, "hi")
        context.add_assistant_message("reply", "Coordinator")
        assert len(history) == 3


class TestContextGrowth:

    def test_new_turns_exclude_carried_history(self):
        context = ConversationContext.from_history(_history(6), "How many bugs?")
        context.add_assistant_message("Checking DevOps.", "Coordinator")
        context.add_assistant_message("Found 2 active bugs", "DevOps")

        new_contents = [t.content for t in context.new_turns]
        assert new_contents == ["How many bugs?", "Checking DevOps.", "Found 2 active bugs"]

    def test_to_messages_prepends_instructions(self):
        context = ConversationContext.from_history([], "hello")
        context.add_assistant_message("hi there", "Coordinator")

        messages = context.to_messages("You are a coordinator.")

        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert isinstance(messages[2], AIMessage)
        assert messages[2].name == "Coordinator"

    def test_to_dict(self):
        turn = ConversationTurn(TurnRole.ASSISTANT, "Done", "ServiceNow")
        assert turn.to_dict() == {"role": "assistant", "content": "Done", "authorName": "ServiceNow"}


class TestKeepLast:

    def test_drops_oldest_turns(self):
        context = ConversationContext(_history(8))

        dropped = context.keep_last(5)

        assert dropped == 3
        assert [t.content for t in context] == ["answer 3", "question 4", "answer 5", "question 6", "answer 7"]

    def test_short_context_untouched(self):
        context = ConversationContext(_history(2))

        assert context.keep_last(5) == 0
        assert len(context) == 2
