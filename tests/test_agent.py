"""Tests for the agent lifecycle state machine and its queue worker."""
from __future__ import annotations

import asyncio
from typing import List

import pytest

from social_agents.agents.base import Agent
from social_agents.core.event_bus import EventBus
from social_agents.core.models import AgentEvent, AgentState
from social_agents.core.worker import QueueWorker
from social_agents.errors import StartupError, ValidationError


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def _drain(queue: "asyncio.Queue[AgentEvent]") -> List[str]:
    types = []
    while not queue.empty():
        types.append(queue.get_nowait().type)
    return types


class _Recording(Agent):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.events: List[AgentEvent] = []

    async def handle_message(self, event: AgentEvent) -> None:
        await super().handle_message(event)
        self.events.append(event)


def _echo_agent(bus: EventBus) -> Agent:
    return Agent(
        "a",
        tools=[{"name": "echo", "description": "Echo params", "handler": lambda params: params}],
        bus=bus,
    )


@pytest.mark.anyio
async def test_start_twice_emits_single_started_event() -> None:
    bus = EventBus()
    agent = _echo_agent(bus)

    async with bus.deliver("observer") as events:
        await agent.start()
        await agent.start()
        types = _drain(events)

    assert agent.state is AgentState.RUNNING
    assert types.count("started") == 1
    assert "tool-registered" in types
    await agent.stop()


@pytest.mark.anyio
async def test_stop_on_created_agent_is_noop() -> None:
    bus = EventBus()
    agent = _echo_agent(bus)

    async with bus.deliver("observer") as events:
        await agent.stop()
        types = _drain(events)

    assert agent.state is AgentState.CREATED
    assert "stopped" not in types


@pytest.mark.anyio
async def test_full_lifecycle_and_restart() -> None:
    agent = _echo_agent(EventBus())

    await agent.initialize()
    assert agent.state is AgentState.INITIALIZED
    await agent.initialize()
    assert [t.name for t in agent.get_tools()] == ["echo"]

    await agent.start()
    assert agent.running
    await agent.stop()
    assert agent.state is AgentState.STOPPED
    await agent.start()
    assert agent.state is AgentState.RUNNING
    assert [t.name for t in agent.get_tools()] == ["echo"]
    await agent.stop()


def test_register_tool_requires_name_description_handler() -> None:
    agent = Agent("a")
    with pytest.raises(ValidationError):
        agent.register_tool({"name": "x", "handler": lambda p: p})
    with pytest.raises(ValidationError):
        agent.register_resource({"name": "x", "description": "no handler"})
    assert agent.get_tools() == []


def test_registered_descriptors_carry_owner() -> None:
    agent = Agent("owner")
    tool = agent.register_tool({"name": "t", "description": "d", "handler": lambda p: p})
    resource = agent.register_resource({"name": "r", "description": "d", "handler": lambda p: p})
    assert tool.agent_id == "owner"
    assert resource.agent_id == "owner"


@pytest.mark.anyio
async def test_malformed_descriptor_fails_startup() -> None:
    agent = Agent("bad", tools=[{"name": "", "description": "d", "handler": lambda p: p}])

    with pytest.raises(StartupError):
        await agent.start()
    assert agent.state is AgentState.CREATED


@pytest.mark.anyio
async def test_inbox_delivers_events_while_running() -> None:
    agent = _Recording("a")
    await agent.start()

    agent.deliver(AgentEvent(type="ping", source_id="test", data={"n": 1}))
    for _ in range(50):
        if agent.events:
            break
        await asyncio.sleep(0.01)
    await agent.stop()

    assert [e.type for e in agent.events] == ["ping"]


@pytest.mark.anyio
async def test_queue_worker_is_fifo_and_one_at_a_time() -> None:
    seen: List[int] = []
    active = 0
    overlap = False

    async def handle(item: int) -> None:
        nonlocal active, overlap
        active += 1
        overlap = overlap or active > 1
        await asyncio.sleep(0.005)
        seen.append(item)
        active -= 1

    worker: QueueWorker[int] = QueueWorker("test", handle)
    for item in range(5):
        worker.submit(item)
    worker.start()
    for _ in range(100):
        if len(seen) == 5:
            break
        await asyncio.sleep(0.01)
    await worker.stop()

    assert seen == [0, 1, 2, 3, 4]
    assert not overlap


@pytest.mark.anyio
async def test_queue_worker_stop_finishes_in_flight_item_only() -> None:
    started = asyncio.Event()
    release = asyncio.Event()
    seen: List[str] = []

    async def handle(item: str) -> None:
        started.set()
        await release.wait()
        seen.append(item)

    worker: QueueWorker[str] = QueueWorker("test", handle)
    worker.start()
    worker.submit("first")
    worker.submit("second")
    await started.wait()

    stopping = asyncio.create_task(worker.stop())
    await asyncio.sleep(0)
    release.set()
    await stopping

    assert seen == ["first"]
    assert worker.pending == 1
    assert not worker.running


@pytest.mark.anyio
async def test_failing_on_start_stops_inbox_and_raises_startup_error() -> None:
    class FailsOnStart(Agent):
        async def on_start(self) -> None:
            raise RuntimeError("no connection")

    agent = FailsOnStart("flaky")

    with pytest.raises(StartupError, match="no connection"):
        await agent.start()

    assert agent.state is AgentState.INITIALIZED
    assert not agent._inbox.running
    await agent.stop()
    assert not agent._inbox.running


@pytest.mark.anyio
async def test_failed_initialize_registers_nothing_and_can_be_retried() -> None:
    specs = [
        {"name": "good", "description": "ok", "handler": lambda p: p},
        {"name": "bad", "description": "missing handler"},
    ]
    agent = Agent("retry", tools=specs)

    with pytest.raises(StartupError):
        await agent.start()
    assert agent.get_tools() == []

    specs[1]["handler"] = lambda p: p
    await agent.start()

    assert [t.name for t in agent.get_tools()] == ["good", "bad"]
    await agent.stop()


@pytest.mark.anyio
async def test_default_inbox_keeps_no_event_history() -> None:
    agent = Agent("quiet")
    await agent.start()

    for n in range(1000):
        agent.deliver(AgentEvent(type="tick", source_id="test", data={"n": n}))
    for _ in range(200):
        if agent.status()["pending_events"] == 0:
            break
        await asyncio.sleep(0.01)
    await agent.stop()

    assert agent.status()["pending_events"] == 0
