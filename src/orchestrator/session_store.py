"""In-memory session store for chat history.

Sessions are created on first access and evicted after sitting idle longer
than the configured TTL. Eviction runs from a background asyncio task that
the chat server starts and stops with its own lifecycle.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from src.utils.config import config
from src.utils.logging.framework import SmartLogger

from .context import ConversationContext

logger = SmartLogger("chat_api")


@dataclass
class _SessionEntry:
    history: ConversationContext = field(default_factory=ConversationContext)
    last_access: float = 0.0


class InMemorySessionStore:
    """Process-local get-or-create store of conversation histories."""

    def __init__(self, ttl_seconds: Optional[float] = None,
                 cleanup_interval_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.session_ttl_seconds
        self.cleanup_interval_seconds = (cleanup_interval_seconds if cleanup_interval_seconds is not None
                                         else config.cleanup_interval_seconds)
        self._clock = clock
        self._sessions: Dict[str, _SessionEntry] = {}
        self._cleanup_task: Optional[asyncio.Task] = None

    def get_or_create(self, session_id: str) -> ConversationContext:
        entry = self._sessions.get(session_id)
        if entry is None:
            entry = _SessionEntry()
            self._sessions[session_id] = entry
            logger.info("session_created", session_id=session_id, active_sessions=len(self._sessions))
        entry.last_access = self._clock()
        return entry.history

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def remove(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def cleanup_expired(self) -> int:
        """Drop sessions idle for longer than the TTL; returns how many were dropped."""
        cutoff = self._clock() - self.ttl_seconds
        expired = [sid for sid, entry in self._sessions.items() if entry.last_access < cutoff]
        for session_id in expired:
            del self._sessions[session_id]

        if expired:
            logger.info("sessions_expired",
                        expired_count=len(expired),
                        active_sessions=len(self._sessions))
        return len(expired)

    async def _cleanup_loop(self):
        while True:
            await asyncio.sleep(self.cleanup_interval_seconds)
            try:
                self.cleanup_expired()
            except Exception as e:
                logger.error("session_cleanup_error", error=str(e), error_type=type(e).__name__)

    def start_cleanup(self) -> None:
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("session_cleanup_started",
                        ttl_seconds=self.ttl_seconds,
                        interval_seconds=self.cleanup_interval_seconds)

    async def stop_cleanup(self) -> None:
        if self._cleanup_task is None:
            return
        self._cleanup_task.cancel()
        try:
            await self._cleanup_task
        except asyncio.CancelledError:
            pass
        self._cleanup_task = None
        logger.info("session_cleanup_stopped")
