"""Conversation context carried through a single orchestration run.

A context is an ordered list of role-tagged turns. It is built from at most
the last ``window`` turns of the caller's history followed by the new user
turn, then grows as each responder appends its cleaned output.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from src.utils.config.constants import RECENT_MESSAGES_COUNT


class TurnRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """One immutable message in a conversation."""
    role: TurnRole
    content: str
    author_name: Optional[str] = None

    def to_message(self) -> BaseMessage:
        """Convert to the LangChain message type for the turn's role."""
        if self.role == TurnRole.USER:
            return HumanMessage(content=self.content)
        if self.role == TurnRole.ASSISTANT:
            return AIMessage(content=self.content, name=self.author_name)
        return SystemMessage(content=self.content)

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "content": self.content,
            "authorName": self.author_name,
        }


class ConversationContext:
    """Ordered, append-only turn sequence owned by one run or one session."""

    def __init__(self, turns: Optional[Iterable[ConversationTurn]] = None):
        self._turns: List[ConversationTurn] = list(turns or [])
        # Number of leading turns copied from prior history
        self.carried_over = 0

    @classmethod
    def from_history(cls, history: Iterable[ConversationTurn], user_input: str,
                     window: int = RECENT_MESSAGES_COUNT) -> "ConversationContext":
        """Start a run: last ``window`` history turns in order, then the user turn."""
        prior = list(history)
        recent = prior[-window:] if window > 0 else []
        context = cls(recent)
        context.carried_over = len(recent)
        context.add_user_message(user_input)
        return context

    @property
    def turns(self) -> Tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    @property
    def new_turns(self) -> Tuple[ConversationTurn, ...]:
        """Turns added after the carried-over history."""
        return tuple(self._turns[self.carried_over:])

    def append(self, turn: ConversationTurn) -> None:
        self._turns.append(turn)

    def add_user_message(self, content: str) -> ConversationTurn:
        turn = ConversationTurn(TurnRole.USER, content)
        self.append(turn)
        return turn

    def add_assistant_message(self, content: str, author_name: Optional[str] = None) -> ConversationTurn:
        turn = ConversationTurn(TurnRole.ASSISTANT, content, author_name)
        self.append(turn)
        return turn

    def extend(self, turns: Iterable[ConversationTurn]) -> None:
        for turn in turns:
            self.append(turn)

    def keep_last(self, count: int) -> int:
        """Drop all but the newest ``count`` turns; returns how many were dropped."""
        dropped = max(len(self._turns) - max(count, 0), 0)
        if dropped:
            del self._turns[:dropped]
            self.carried_over = max(self.carried_over - dropped, 0)
        return dropped

    def to_messages(self, instructions: Optional[str] = None) -> List[BaseMessage]:
        """Render as LangChain messages, optionally led by a system instruction."""
        messages: List[BaseMessage] = []
        if instructions:
            messages.append(SystemMessage(content=instructions))
        messages.extend(turn.to_message() for turn in self._turns)
        return messages

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[ConversationTurn]:
        return iter(self.turns)

    def __getitem__(self, index):
        return self._turns[index]
