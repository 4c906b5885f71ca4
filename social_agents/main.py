"""FastAPI entry-point exposing orchestrator controls."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from social_agents.api.routes import router as agents_router
from social_agents.api.routes import status_router
from social_agents.api.tools import router as tools_router
from social_agents.api.tools import validation_error_handler
from social_agents.config import Config
from social_agents.errors import ValidationError
from social_agents.orchestration.orchestrator import Orchestrator
from social_agents.runtime import build_orchestrator
from social_agents.transport.mcp_server import McpServer


def create_app(orchestrator: Optional[Orchestrator] = None, config: Optional[Config] = None) -> FastAPI:
    config = config or Config.from_env()
    orchestrator = orchestrator or build_orchestrator(config)
    mcp_server = McpServer(orchestrator, config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start every agent on startup and stop them on shutdown."""
        await orchestrator.start()
        try:
            yield
        finally:
            await orchestrator.shutdown()

    app = FastAPI(title=config.name, version=config.version, lifespan=lifespan)
    app.state.orchestrator = orchestrator
    app.state.mcp_server = mcp_server
    app.include_router(status_router)
    app.include_router(agents_router)
    app.include_router(tools_router)
    if config.mcp.transport == "sse":
        app.include_router(mcp_server.sse_router())
    app.add_exception_handler(ValidationError, validation_error_handler)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app
