"""HTTP surface for the IT operations assistant.

Routes:
    POST /chat         JSON ``{prompt, sessionId?, userId?}`` -> caller-facing JSON
    POST /chat/stream  same body -> chunked text/plain coordinator stream
    GET  /health       liveness and active session count
"""

import json
from typing import Any, Dict, Optional, Tuple

from aiohttp import web

from src.utils.config.constants import DEFAULT_HOST, DEFAULT_CHAT_PORT
from src.utils.input_validation import ValidationError
from src.utils.logging.framework import SmartLogger

from .chat_service import ChatService
from .session_store import InMemorySessionStore

logger = SmartLogger("chat_api")

INTERNAL_ERROR_MESSAGE = "Internal server error."


class ChatServer:
    """aiohttp application wrapping a ChatService.

    The session store's cleanup task runs for the lifetime of the app.
    """

    def __init__(self, chat_service: ChatService, host: str = DEFAULT_HOST, port: int = DEFAULT_CHAT_PORT):
        self.chat_service = chat_service
        self.host = host
        self.port = port
        self.app = web.Application()
        self._setup_routes()
        self.app.on_startup.append(self._on_startup)
        self.app.on_cleanup.append(self._on_cleanup)

    @property
    def session_store(self) -> InMemorySessionStore:
        return self.chat_service.session_store

    def _setup_routes(self):
        self.app.router.add_post("/chat", self._handle_chat)
        self.app.router.add_post("/chat/stream", self._handle_chat_stream)
        self.app.router.add_get("/health", self._handle_health)

    async def _on_startup(self, app: web.Application):
        self.session_store.start_cleanup()

    async def _on_cleanup(self, app: web.Application):
        await self.session_store.stop_cleanup()

    @staticmethod
    async def _read_body(request: web.Request) -> Tuple[Optional[Dict[str, Any]], Optional[web.Response]]:
        try:
            data = await request.json()
        except json.JSONDecodeError:
            return None, web.json_response({"error": "Malformed JSON body"}, status=400)

        if not isinstance(data, dict):
            return None, web.json_response({"error": "Request body must be a JSON object"}, status=400)
        return data, None

    async def _handle_chat(self, request: web.Request) -> web.Response:
        data, error_response = await self._read_body(request)
        if error_response is not None:
            return error_response

        try:
            response = await self.chat_service.chat(
                data.get("prompt"),
                session_id=data.get("sessionId"),
                user_id=data.get("userId"),
            )
        except ValidationError as e:
            logger.warning("chat_request_rejected", error=str(e))
            return web.json_response({"error": str(e)}, status=400)
        except Exception as e:
            logger.error("chat_request_error", error=str(e), error_type=type(e).__name__)
            return web.json_response({"error": INTERNAL_ERROR_MESSAGE}, status=500)

        return web.json_response(response)

    async def _handle_chat_stream(self, request: web.Request) -> web.StreamResponse:
        data, error_response = await self._read_body(request)
        if error_response is not None:
            return error_response

        try:
            session_id, chunks = await self.chat_service.stream_chat(
                data.get("prompt"), session_id=data.get("sessionId"))
        except ValidationError as e:
            logger.warning("chat_stream_rejected", error=str(e))
            return web.json_response({"error": str(e)}, status=400)
        except Exception as e:
            logger.error("chat_stream_setup_error", error=str(e), error_type=type(e).__name__)
            return web.json_response({"error": INTERNAL_ERROR_MESSAGE}, status=500)

        response = web.StreamResponse(headers={
            "Content-Type": "text/plain; charset=utf-8",
            "X-Session-Id": session_id,
        })
        await response.prepare(request)

        try:
            async for chunk in chunks:
                await response.write(chunk.encode("utf-8"))
        except ConnectionResetError:
            logger.info("chat_stream_client_disconnected", session_id=session_id)
            return response
        except Exception as e:
            # Headers are already sent; end the body with a readable notice
            logger.error("chat_stream_error", session_id=session_id, error=str(e), error_type=type(e).__name__)
            await response.write(f"\n{INTERNAL_ERROR_MESSAGE}".encode("utf-8"))

        await response.write_eof()
        return response

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "healthy",
            "activeSessions": len(self.session_store),
        })

    async def start(self):
        """Start the chat server.

        Returns:
            AppRunner instance for lifecycle management
        """
        runner = web.AppRunner(self.app)
        await runner.setup()

        site = web.TCPSite(runner, self.host, self.port)
        await site.start()

        logger.info("chat_server_started", host=self.host, port=self.port)
        return runner

    async def stop(self, runner):
        """Stop the chat server gracefully."""
        await runner.cleanup()
        logger.info("chat_server_stopped", host=self.host, port=self.port)
