"""Tests for the JSON-RPC surface and its stdio and SSE transports."""
from __future__ import annotations

import asyncio
import json
from typing import List

import pytest

from social_agents.agents.base import Agent
from social_agents.config import Config
from social_agents.errors import INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, PARSE_ERROR
from social_agents.orchestration.orchestrator import Orchestrator
from social_agents.transport.mcp_server import McpServer


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class _Writer:
    def __init__(self) -> None:
        self.lines: List[str] = []

    def write(self, data: bytes) -> None:
        self.lines.append(data.decode("utf-8"))

    async def drain(self) -> None:
        return None


def _server() -> McpServer:
    def broken(params):
        raise RuntimeError("storage offline")

    orchestrator = Orchestrator()
    orchestrator.register_agent(
        "a",
        Agent(
            "a",
            tools=[{
                "name": "echo",
                "description": "Echo params",
                "inputSchema": {"type": "object"},
                "handler": lambda params: params,
            }],
            resources=[
                {"name": "info", "description": "Static info", "handler": lambda params: {"ok": True}},
                {"name": "broken", "description": "Always fails", "handler": broken},
            ],
        ),
    )
    return McpServer(orchestrator, Config(name="test-server", version="0.1"))


async def _call(server: McpServer, message) -> dict:
    return json.loads(await server.handle_raw(json.dumps(message)))


@pytest.mark.anyio
async def test_initialize_reports_server_info() -> None:
    server = _server()
    response = await _call(server, {"jsonrpc": "2.0", "id": 1, "method": "initialize",
                                    "params": {"clientInfo": {"name": "pytest"}}})

    assert response["result"]["serverInfo"] == {"name": "test-server", "version": "0.1"}
    assert "tools" in response["result"]["capabilities"]


@pytest.mark.anyio
async def test_tools_list_and_call() -> None:
    server = _server()
    await server.orchestrator.start()

    listing = await _call(server, {"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    echo = await _call(server, {"jsonrpc": "2.0", "id": 2, "method": "tools/call",
                                "params": {"name": "echo", "arguments": {"x": 1}}})

    assert listing["result"]["tools"] == [{
        "name": "echo",
        "description": "Echo params",
        "inputSchema": {"type": "object"},
        "agentId": "a",
    }]
    assert echo == {"jsonrpc": "2.0", "id": 2, "result": {"content": {"x": 1}}}
    await server.orchestrator.shutdown()


@pytest.mark.anyio
async def test_unknown_tool_and_missing_name() -> None:
    server = _server()

    unknown = await _call(server, {"jsonrpc": "2.0", "id": 3, "method": "tools/call",
                                   "params": {"name": "nope"}})
    nameless = await _call(server, {"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {}})

    assert unknown["error"]["code"] == METHOD_NOT_FOUND
    assert unknown["id"] == 3
    assert nameless["error"]["code"] == INVALID_PARAMS


@pytest.mark.anyio
async def test_resources_read_success_and_failure() -> None:
    server = _server()
    await server.orchestrator.start()

    info = await _call(server, {"jsonrpc": "2.0", "id": 1, "method": "resources/read",
                                "params": {"name": "info"}})
    broken = await _call(server, {"jsonrpc": "2.0", "id": 2, "method": "resources/read",
                                  "params": {"uri": "broken"}})

    assert info["result"] == {"ok": True}
    assert "storage offline" in broken["error"]["message"]
    await server.orchestrator.shutdown()


@pytest.mark.anyio
async def test_malformed_messages() -> None:
    server = _server()

    parse = json.loads(await server.handle_raw("{not json"))
    invalid = await _call(server, {"jsonrpc": "2.0", "id": 9})
    not_object = await _call(server, [1, 2])

    assert parse["error"]["code"] == PARSE_ERROR
    assert parse["id"] is None
    assert invalid["error"]["code"] == INVALID_REQUEST
    assert invalid["id"] == 9
    assert not_object["error"]["code"] == INVALID_REQUEST


@pytest.mark.anyio
async def test_stdio_answers_each_line_until_eof() -> None:
    server = _server()
    reader = asyncio.StreamReader()
    reader.feed_data(b'{"jsonrpc": "2.0", "id": 1, "method": "ping"}\n')
    reader.feed_data(b"\n")
    reader.feed_data(b'{"jsonrpc": "2.0", "id": 2, "method": "missing"}\n')
    reader.feed_eof()
    writer = _Writer()

    await server.run_stdio(reader, writer)

    responses = [json.loads(line) for line in writer.lines]
    assert [r["id"] for r in responses] == [1, 2]
    assert responses[0]["result"] == {}
    assert responses[1]["error"]["code"] == METHOD_NOT_FOUND


@pytest.mark.anyio
async def test_sse_session_streams_responses() -> None:
    server = _server()
    session_id = server.open_session()
    stream = server.event_stream(session_id, "/messages")

    endpoint = await stream.__anext__()
    await server.post_message(session_id, json.dumps({"jsonrpc": "2.0", "id": 5, "method": "ping"}))
    message = await stream.__anext__()
    server.close_session(session_id)

    assert endpoint == f"event: endpoint\ndata: /messages?session_id={session_id}\n\n"
    assert message.startswith("event: message\ndata: ")
    assert json.loads(message.split("data: ", 1)[1])["id"] == 5
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    with pytest.raises(KeyError):
        await server.post_message(session_id, "{}")


@pytest.mark.anyio
async def test_orchestrator_shutdown_closes_sse_sessions() -> None:
    server = _server()
    await server.orchestrator.start()
    session_id = server.open_session()
    stream = server.event_stream(session_id, "/messages")
    await stream.__anext__()

    await server.orchestrator.shutdown()

    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
    with pytest.raises(KeyError):
        await server.post_message(session_id, "{}")


@pytest.mark.anyio
async def test_stdio_answers_undecodable_line_and_keeps_serving() -> None:
    server = _server()
    reader = asyncio.StreamReader()
    reader.feed_data(b'{"jsonrpc":"2.0","id":1,"method":"ping","params":{"x":"\xff"}}\n')
    reader.feed_data(b'{"jsonrpc": "2.0", "id": 2, "method": "ping"}\n')
    reader.feed_eof()
    writer = _Writer()

    await server.run_stdio(reader, writer)

    responses = [json.loads(line) for line in writer.lines]
    assert len(responses) == 2
    assert responses[0]["id"] is None
    assert responses[0]["error"]["code"] == PARSE_ERROR
    assert responses[1] == {"jsonrpc": "2.0", "id": 2, "result": {}}


@pytest.mark.anyio
async def test_sse_post_with_undecodable_body_gets_parse_error() -> None:
    server = _server()
    session_id = server.open_session()
    stream = server.event_stream(session_id, "/messages")
    await stream.__anext__()

    await server.post_message(session_id, b"\xff\xfe")
    message = await stream.__anext__()
    server.close_session(session_id)

    assert json.loads(message.split("data: ", 1)[1])["error"]["code"] == PARSE_ERROR
