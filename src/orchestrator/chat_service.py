"""Chat service: the seam between the HTTP layer and the orchestrator.

Validates the prompt, resolves the session, runs a freshly built
orchestrator against the session history and writes the run's new turns
back to the session.
"""

import uuid
from typing import AsyncIterator, Callable, Optional, Tuple

from src.utils.config import config
from src.utils.config.constants import COORDINATOR_AGENT_NAME
from src.utils.input_validation import validate_orchestrator_input
from src.utils.logging.framework import SmartLogger, log_operation

from .context import ConversationTurn, TurnRole
from .orchestrator import MultiAgentOrchestrator, build_orchestrator
from .routing import strip_routing_tokens
from .session_store import InMemorySessionStore
from .types import ChatResponsePayload

logger = SmartLogger("chat_api")


class ChatService:
    """Per-request orchestration over a shared session store.

    Sessions keep only the newest ``history_limit`` turns, the most any run
    carries over.
    """

    def __init__(self, session_store: InMemorySessionStore,
                 orchestrator_factory: Callable[[], MultiAgentOrchestrator] = build_orchestrator,
                 history_limit: Optional[int] = None):
        self.session_store = session_store
        self.orchestrator_factory = orchestrator_factory
        self.history_limit = history_limit if history_limit is not None else config.history_window

    @staticmethod
    def resolve_session_id(session_id: Optional[str]) -> str:
        if session_id and session_id.strip():
            return session_id.strip()
        return str(uuid.uuid4())

    async def chat(self, prompt: str, session_id: Optional[str] = None,
                   user_id: Optional[str] = None) -> ChatResponsePayload:
        """Answer one prompt.

        Raises:
            ValidationError: If the prompt is empty or rejected by the sanitizer
        """
        validated = validate_orchestrator_input(prompt)
        session_id = self.resolve_session_id(session_id)

        with log_operation("chat_api", "chat_request", session_id=session_id, user_id=user_id):
            history = self.session_store.get_or_create(session_id)
            orchestrator = self.orchestrator_factory()

            result = await orchestrator.process(validated, history)

            if result.context is not None:
                history.extend(result.context.new_turns)
                history.keep_last(self.history_limit)

            logger.info("chat_request_complete",
                        session_id=session_id,
                        routing=result.routing.value,
                        succeeded=result.succeeded,
                        history_length=len(history))

        response = result.to_response()
        response["sessionId"] = session_id
        return response

    async def stream_chat(self, prompt: str,
                          session_id: Optional[str] = None) -> Tuple[str, AsyncIterator[str]]:
        """Start a coordinator-only stream.

        Returns the resolved session id and the chunk iterator. The session is
        updated only when the iterator is consumed to the end.

        Raises:
            ValidationError: If the prompt is empty or rejected by the sanitizer
        """
        validated = validate_orchestrator_input(prompt)
        session_id = self.resolve_session_id(session_id)
        history = self.session_store.get_or_create(session_id)
        orchestrator = self.orchestrator_factory()

        async def relay() -> AsyncIterator[str]:
            chunks = []
            async for chunk in orchestrator.process_stream(validated, history):
                chunks.append(chunk)
                yield chunk

            history.append(ConversationTurn(TurnRole.USER, validated))
            text = strip_routing_tokens("".join(chunks))
            if text:
                history.append(ConversationTurn(TurnRole.ASSISTANT, text, COORDINATOR_AGENT_NAME))
            history.keep_last(self.history_limit)
            logger.info("chat_stream_recorded",
                        session_id=session_id,
                        history_length=len(history))

        return session_id, relay()
