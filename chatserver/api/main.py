"""Main FastAPI application with the chat WebSocket endpoint."""

import argparse
import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, Request, Response, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles

from chatserver import __version__
from chatserver.config import ServerConfig
from chatserver.core.commands import NickPolicy
from chatserver.core.exceptions import SessionClosedError
from chatserver.core.session_manager import SessionManager
from chatserver.core.transport import GOING_AWAY
from chatserver.api.websocket_channel import WebSocketChannel

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("chatserver.access")

DUMP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def decode_frame(frame: str) -> Any:
    """
    Decode an inbound text frame.

    Frames that look like JSON objects or arrays are decoded, everything else
    is chat text.
    """
    if frame[:1] in ("{", "["):
        try:
            return json.loads(frame)
        except json.JSONDecodeError:
            pass
    return frame


def title_case_header(name: str) -> str:
    return "-".join(part[:1].upper() + part[1:] for part in name.split("-"))


def create_app(config: Optional[ServerConfig] = None,
               session_manager: Optional[SessionManager] = None) -> FastAPI:
    """
    Build the application around a session manager.

    Args:
        config: Server settings, read from the environment when omitted
        session_manager: Engine to serve, created from ``config`` when omitted
    """
    config = config or ServerConfig.from_env()
    session_manager = session_manager or SessionManager(nick_policy=NickPolicy(config.nick_pattern))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await session_manager.shutdown()

    app = FastAPI(title="Chat Server", version=__version__, debug=config.debug, lifespan=lifespan)
    app.state.config = config
    app.state.session_manager = session_manager

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Response-Time"] = f"{elapsed_ms:.0f}ms"
        response.headers["X-Powered-By"] = config.powered_by
        access_logger.info(f"{elapsed_ms:.0f}ms\t{request.method}\t{request.url.path}")
        return response

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "shutting down" if session_manager.closed else "healthy",
            "connected_clients": len(session_manager.registry)
        }

    @app.api_route("/dump-request", methods=DUMP_METHODS)
    async def dump_request(request: Request):
        """Echo the request line, headers and body back as plain text."""
        target = request.url.path
        if request.url.query:
            target += "?" + request.url.query
        http_version = request.scope.get("http_version", "1.1")

        lines = [f"{request.method} {target} HTTP/{http_version}"]
        for name, value in request.headers.items():
            lines.append(f"{title_case_header(name)}: {value}")

        body = await request.body()
        return PlainTextResponse(
            "\n".join(lines) + "\n" + body.decode("utf-8", errors="replace"),
            headers={"Connection": "close"}
        )

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        icon = config.static_dir / "favicon.ico"
        if icon.is_file():
            return FileResponse(icon)
        return Response(status_code=204)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """WebSocket endpoint carrying one chat client."""
        await websocket.accept()
        channel = WebSocketChannel(websocket, max_queue=config.outbound_queue_size)
        channel.start()

        try:
            client_id = await session_manager.connect(channel)
        except SessionClosedError:
            await channel.close(code=GOING_AWAY)
            return
        channel.label = client_id

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))

                # binary frames go through as bytes and are rejected as malformed
                if frame.get("text") is not None:
                    payload = decode_frame(frame["text"])
                else:
                    payload = frame.get("bytes")
                await session_manager.handle_message(client_id, payload)

        except WebSocketDisconnect:
            logger.debug(f"WebSocket for client {client_id} closed")
        except Exception as e:
            logger.error(f"WebSocket error for client {client_id}: {str(e)}")
        finally:
            await session_manager.disconnect(client_id)
            await channel.close()

    app.mount("/", StaticFiles(directory=config.static_dir, html=True), name="static")
    return app


class ChatServer(uvicorn.Server):
    """Uvicorn server that says goodbye to chat clients before dropping them."""

    def __init__(self, config: uvicorn.Config, session_manager: SessionManager):
        super().__init__(config)
        self.session_manager = session_manager

    async def shutdown(self, sockets=None):
        await self.session_manager.shutdown()
        await super().shutdown(sockets=sockets)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Real-time chat server")
    parser.add_argument("--host", help="Bind address (default: $HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, help="Bind port (default: $PORT or 3000)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    config = ServerConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.debug:
        config.log_level = "DEBUG"

    # Configure logging
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    session_manager = SessionManager(nick_policy=NickPolicy(config.nick_pattern))
    app = create_app(config, session_manager)

    server = ChatServer(
        uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            access_log=False,
        ),
        session_manager,
    )
    logger.info(f"Chat server starting at http://{config.host}:{config.port}/")
    server.run()


if __name__ == "__main__":
    main()
