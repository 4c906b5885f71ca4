"""JSON-RPC protocol surface over the capability registry, with stdio and SSE transports."""
from __future__ import annotations

import asyncio
import json
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Optional, Union

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from social_agents.config import Config
from social_agents.core.models import JsonRpcRequest, error_response
from social_agents.errors import INVALID_REQUEST, PARSE_ERROR, ValidationError
from social_agents.orchestration.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"


def dumps(message: Dict[str, Any]) -> str:
    return json.dumps(message, default=str, ensure_ascii=False)


class McpServer:
    """Bind the orchestrator's registry to its router and carry messages in and out."""

    def __init__(self, orchestrator: Orchestrator, config: Optional[Config] = None) -> None:
        self.orchestrator = orchestrator
        self.config = config or Config()
        self._sessions: Dict[str, asyncio.Queue[Optional[str]]] = {}
        self._register_routes()
        orchestrator.on_shutdown(self.close_all_sessions)

    @property
    def registry(self):
        return self.orchestrator.registry

    def _register_routes(self) -> None:
        router = self.orchestrator.router
        router.register_route("initialize", self._initialize)
        router.register_route("ping", lambda params: {})
        router.register_route("tools/list", lambda params: {"tools": self.registry.describe_tools()})
        router.register_route("tools/call", self._call_tool)
        router.register_route(
            "resources/list", lambda params: {"resources": self.registry.describe_resources()}
        )
        router.register_route("resources/read", self._read_resource)

    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        logger.info("Client initialized: %s", params.get("clientInfo", {}).get("name", "unknown"))
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {}, "resources": {}},
            "serverInfo": {"name": self.config.name, "version": self.config.version},
        }

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        if not name:
            raise ValidationError("'name' is required")
        arguments = params.get("arguments", params.get("params")) or {}
        return await self.registry.invoke_tool(name, arguments)

    async def _read_resource(self, params: Dict[str, Any]) -> Any:
        name = params.get("name") or params.get("uri")
        if not name:
            raise ValidationError("'name' is required")
        return await self.registry.get_resource(name, params.get("params") or {})

    async def handle_raw(self, raw: Union[str, bytes]) -> str:
        """Decode one JSON-RPC message, route it and encode the response."""
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                return dumps(error_response(None, PARSE_ERROR, f"Parse error: {exc.reason}"))
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as exc:
            return dumps(error_response(None, PARSE_ERROR, f"Parse error: {exc.msg}"))
        if not isinstance(message, dict) or not isinstance(message.get("method"), str):
            request_id = message.get("id") if isinstance(message, dict) else None
            return dumps(error_response(request_id, INVALID_REQUEST, "Invalid request"))

        response = await self.orchestrator.router.route_message(JsonRpcRequest.from_dict(message))
        return dumps(response)

    async def run_stdio(self, reader: asyncio.StreamReader, writer: Any) -> None:
        """Serve newline-delimited JSON-RPC until the reader hits EOF."""
        logger.info("Stdio transport started")
        while True:
            line = await reader.readline()
            if not line:
                break
            line = line.strip()
            if not line:
                continue
            response = await self.handle_raw(line)
            writer.write((response + "\n").encode("utf-8"))
            await writer.drain()
        logger.info("Stdio transport closed")

    def open_session(self) -> str:
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = asyncio.Queue()
        logger.info("New SSE session %s", session_id)
        return session_id

    def close_session(self, session_id: str) -> None:
        queue = self._sessions.pop(session_id, None)
        if queue is not None:
            queue.put_nowait(None)

    def close_all_sessions(self) -> None:
        for session_id in list(self._sessions):
            self.close_session(session_id)

    async def post_message(self, session_id: str, raw: Union[str, bytes]) -> None:
        queue = self._sessions.get(session_id)
        if queue is None:
            raise KeyError(session_id)
        queue.put_nowait(await self.handle_raw(raw))

    async def event_stream(self, session_id: str, endpoint: str) -> AsyncIterator[str]:
        queue = self._sessions[session_id]
        yield f"event: endpoint\ndata: {endpoint}?session_id={session_id}\n\n"
        try:
            while True:
                payload = await queue.get()
                if payload is None:
                    break
                yield f"event: message\ndata: {payload}\n\n"
        finally:
            self._sessions.pop(session_id, None)

    def sse_router(self) -> APIRouter:
        """HTTP endpoints implementing the server-sent-events transport."""
        router = APIRouter(tags=["mcp"])

        @router.get("/sse")
        async def sse_endpoint() -> StreamingResponse:
            session_id = self.open_session()
            return StreamingResponse(
                self.event_stream(session_id, "/messages"),
                media_type="text/event-stream",
            )

        @router.post("/messages", status_code=status.HTTP_202_ACCEPTED)
        async def message_endpoint(session_id: str, request: Request) -> Dict[str, str]:
            body = await request.body()
            try:
                await self.post_message(session_id, body)
            except KeyError as exc:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND, detail="Unknown session"
                ) from exc
            return {"status": "accepted"}

        return router
