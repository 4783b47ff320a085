"""Startup for the chat server: validate config, wire the service, serve until interrupted."""

import asyncio

from src.utils.config import config
from src.utils.logging.framework import SmartLogger

from .chat_service import ChatService
from .orchestrator import build_orchestrator, validate_specialist_config
from .server import ChatServer
from .session_store import InMemorySessionStore

logger = SmartLogger("orchestrator")


def create_chat_server(host: str, port: int) -> ChatServer:
    """Build the server after checking both specialists can be constructed.

    Raises:
        ConfigError: If a specialist's real-mode settings are incomplete
    """
    validate_specialist_config(config)

    session_store = InMemorySessionStore(
        ttl_seconds=config.session_ttl_seconds,
        cleanup_interval_seconds=config.cleanup_interval_seconds,
    )
    chat_service = ChatService(session_store, orchestrator_factory=build_orchestrator)
    return ChatServer(chat_service, host, port)


async def main(host: str = None, port: int = None):
    """Main function to run the chat server."""
    host = host or config.server_host
    port = port or config.server_port

    server = create_chat_server(host, port)
    runner = await server.start()

    logger.info("orchestrator_started",
                host=host,
                port=port,
                endpoint=f"http://{host}:{port}/chat",
                devops_mock=config.devops_use_mock,
                servicenow_mock=config.servicenow_use_mock)

    try:
        # Keep the server running
        await asyncio.Event().wait()
    finally:
        logger.info("orchestrator_shutdown")
        await server.stop(runner)
