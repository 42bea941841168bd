"""FastAPI application: the connection listener.

Routes::

    WS   /remote           <- one JSON action per text frame
    GET  /health           -> {"status": "ok", ...}
    GET  /static/...       -> client UI files (if the directory exists)

Every WebSocket connection gets its own :class:`~deskremote.session.Session`
with a fresh set of backends. Sessions share nothing but read-only
configuration and the process-wide helpers owned by the backend factory.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI, WebSocket
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from deskremote.backends.factory import BackendFactory
from deskremote.config.settings import Settings
from deskremote.dispatch import Dispatcher
from deskremote.session import Session

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str = "ok"
    endpoint: str = "/remote"
    input_backend: str = "pynput"
    relay_running: bool = False
    compositor: bool = False
    volume_backend: str = "keys"
    open_targets: list[str] = Field(default_factory=list)


def create_app(
    settings: Settings | None = None,
    factory: BackendFactory | None = None,
    dispatcher: Dispatcher | None = None,
) -> FastAPI:
    """Create the remote-control application.

    Args:
        settings: Server configuration. Defaults to ``Settings()``.
        factory: Optional pre-built backend factory (for testing).
        dispatcher: Optional pre-built dispatcher (for testing).
    """
    settings = settings or Settings()
    server = settings.server

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        f: BackendFactory = app.state.factory
        await f.start()
        logger.info(
            "Serving ws://%s:%d%s (input=%s)",
            server.host, server.port, server.endpoint_path, settings.input.backend,
        )
        yield
        await f.stop()
        logger.info("Server stopped")

    app = FastAPI(
        title="deskremote",
        description="Remote-control relay: WebSocket commands to local input events",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.factory = factory or BackendFactory(settings)
    app.state.dispatcher = dispatcher or Dispatcher(
        open_targets=settings.launcher.targets,
        timeout=settings.dispatch.timeout,
    )

    @app.get("/health")
    async def health_check() -> HealthResponse:
        f: BackendFactory = app.state.factory
        d: Dispatcher = app.state.dispatcher
        return HealthResponse(
            status="ok",
            endpoint=server.endpoint_path,
            input_backend=settings.input.backend,
            relay_running=f.relay.is_running if f.relay else False,
            compositor=f.compositor is not None,
            volume_backend=settings.volume.backend,
            open_targets=sorted(d.open_targets),
        )

    @app.websocket(server.endpoint_path)
    async def remote(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("New connection from %s", websocket.client)
        session = Session(websocket, app.state.factory.create(), app.state.dispatcher)
        await session.run()

    static_dir = Path(server.static_dir)
    if static_dir.is_dir():
        app.mount(server.static_prefix, StaticFiles(directory=static_dir), name="static")
        logger.info("Serving %s under %s", static_dir, server.static_prefix)
    else:
        logger.warning("Static directory %s not found, client UI not served", static_dir)

    return app


def main(settings: Settings | None = None) -> None:
    """Run the server with uvicorn."""
    settings = settings or Settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
