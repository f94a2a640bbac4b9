from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import structlog
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route, WebSocketRoute

from relay.messaging.router import MessageRouter
from relay.server.settings import RelayServerSettings
from relay.server.websocket import websocket_endpoint
from relay.session.keepalive import KeepaliveMonitor
from relay.session.manager import SessionManager
from relay.session.registry import SessionRegistry
from shared.build_info import APP_VERSION, GIT_COMMIT
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request
    from starlette.websockets import WebSocket


async def root(_request: Request) -> PlainTextResponse:
    return PlainTextResponse("")


async def health(_request: Request) -> JSONResponse:
    return JSONResponse({"status": "ok", "version": APP_VERSION, "commit": GIT_COMMIT})


async def status(request: Request) -> JSONResponse:
    registry: SessionRegistry = request.app.state.registry
    return JSONResponse(
        {
            "status": "ok",
            "version": APP_VERSION,
            "commit": GIT_COMMIT,
            "games": registry.session_count,
            "connections": registry.connection_count,
        },
    )


def create_app(
    settings: RelayServerSettings | None = None,
    registry: SessionRegistry | None = None,
    message_router: MessageRouter | None = None,
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = RelayServerSettings()

    if registry is None:
        registry = SessionRegistry()

    if message_router is None:
        message_router = MessageRouter(SessionManager(registry), max_message_size=settings.max_message_bytes)

    keepalive = KeepaliveMonitor(registry, interval=settings.keepalive_interval_seconds)

    async def ws_endpoint(websocket: WebSocket) -> None:
        await websocket_endpoint(websocket, message_router, settings)

    # Route matches http scopes only and WebSocketRoute websocket scopes only,
    # so both can live at "/".
    routes = [
        Route("/", root, methods=["GET"]),
        Route("/health", health, methods=["GET"]),
        Route("/status", status, methods=["GET"]),
        WebSocketRoute("/", ws_endpoint),
    ]

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        keepalive.start()
        yield
        await keepalive.stop()

    app = Starlette(routes=routes, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )
    app.state.settings = settings
    app.state.registry = registry
    app.state.keepalive = keepalive

    logger.info("relay server ready", keepalive_interval=settings.keepalive_interval_seconds)
    return app


def get_app() -> Starlette:  # pragma: no cover
    """ASGI application factory for production use (uvicorn --factory relay.server.app:get_app)."""
    settings = RelayServerSettings()
    setup_logging(log_dir=settings.log_dir)
    return create_app(settings=settings)
