"""Orchestrator responsible for registering, starting and relaying between agents."""
from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from social_agents.agents.base import Agent
from social_agents.core.context import ContextManager
from social_agents.core.event_bus import EventBus
from social_agents.core.models import AgentEvent, AgentState
from social_agents.core.registry import CapabilityRegistry
from social_agents.core.router import MessageRouter
from social_agents.errors import NotFoundError

logger = logging.getLogger(__name__)

RELAY_ID = "orchestrator"


class Orchestrator:
    """Own the agents, the capability registry and the router they are exposed through."""

    def __init__(
        self,
        *,
        bus: Optional[EventBus] = None,
        registry: Optional[CapabilityRegistry] = None,
        router: Optional[MessageRouter] = None,
        context: Optional[ContextManager] = None,
    ) -> None:
        self.bus = bus or EventBus()
        self.registry = registry or CapabilityRegistry()
        self.router = router or MessageRouter()
        self.context = context or ContextManager()
        self._agents: Dict[str, Agent] = {}
        self._started_order: List[str] = []
        self._relay: Optional[asyncio.Task[None]] = None
        self._teardown: List[Callable[[], None]] = []
        self.started = False

    def register_agent(self, agent_id: str, agent: Agent) -> None:
        previous = self._agents.get(agent_id)
        if previous is not None:
            logger.warning("Agent with id '%s' already registered, replacing it", agent_id)
            self.registry.unregister_agent(previous.agent_id)
        agent.bind_bus(self.bus)
        self._agents[agent_id] = agent
        self._sync_capabilities(agent)
        logger.info("Agent '%s' registered", agent_id)

    async def unregister_agent(self, agent_id: str) -> None:
        """Stop the agent if it is running, then drop it and everything it owns."""
        agent = self._agents.get(agent_id)
        if agent is None:
            logger.warning("No agent found with id '%s'", agent_id)
            return
        if agent.running:
            try:
                await agent.stop()
            except Exception as exc:  # noqa: BLE001
                logger.error("Error while stopping agent '%s': %s", agent_id, exc)
        # Ownership, not name: a same-named entry from another agent stays.
        self.registry.unregister_agent(agent.agent_id)
        del self._agents[agent_id]
        if agent_id in self._started_order:
            self._started_order.remove(agent_id)
        logger.info("Agent '%s' unregistered", agent_id)

    def on_shutdown(self, callback: Callable[[], None]) -> None:
        """Register transport teardown run by ``shutdown`` after the agents stop."""
        self._teardown.append(callback)

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        return self._agents.get(agent_id)

    def list_agents(self) -> List[Dict[str, Any]]:
        return [agent.status() for agent in list(self._agents.values())]

    def status(self) -> Dict[str, bool]:
        return {agent_id: agent.running for agent_id, agent in self._agents.items()}

    async def start(self) -> None:
        """Start the relay, then every registered agent in registration order."""
        if self.started:
            logger.warning("Orchestrator already started")
            return
        logger.info("Starting orchestrator with %d agent(s)", len(self._agents))
        self.context.initialize()
        self.bus.register(RELAY_ID)
        self._relay = asyncio.create_task(self._relay_events(), name="orchestrator-relay")

        for agent_id, agent in list(self._agents.items()):
            try:
                await self.start_agent(agent_id)
            except Exception as exc:  # noqa: BLE001
                logger.error("Agent '%s' failed to start: %s", agent.agent_id, exc)
        self.started = True

    async def shutdown(self) -> None:
        """Stop agents in reverse start order, then tear down shared state.

        Each step is best effort: a failing agent is logged and the
        remaining teardown still runs.
        """
        logger.info("Shutting down orchestrator")
        for agent_id in reversed(list(self._started_order)):
            agent = self._agents.get(agent_id)
            if agent is None:
                continue
            try:
                await agent.stop()
            except Exception as exc:  # noqa: BLE001
                logger.error("Error while stopping agent '%s': %s", agent_id, exc)
        self._started_order.clear()

        if self._relay is not None:
            self._relay.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._relay
            self._relay = None
        self.bus.unregister(RELAY_ID)
        for callback in self._teardown:
            try:
                callback()
            except Exception as exc:  # noqa: BLE001
                logger.error("Transport teardown failed: %s", exc)
        self.context.clear()
        self.started = False
        logger.info("Orchestrator stopped")

    async def start_agent(self, agent_id: str) -> Agent:
        agent = self._require(agent_id)
        logger.info("Starting agent '%s'", agent_id)
        await agent.start()
        self._sync_capabilities(agent)
        if agent_id in self._started_order:
            self._started_order.remove(agent_id)
        self._started_order.append(agent_id)
        return agent

    async def stop_agent(self, agent_id: str) -> Agent:
        agent = self._require(agent_id)
        logger.info("Stopping agent '%s'", agent_id)
        await agent.stop()
        return agent

    def notify_agents(
        self, event_type: str, data: Mapping[str, Any], exclude_ids: Iterable[str] = ()
    ) -> List[str]:
        """Deliver an event to every running, non-excluded agent; return who got it."""
        excluded = set(exclude_ids)
        notified = []
        for agent_id, agent in list(self._agents.items()):
            if agent_id in excluded or agent.state is not AgentState.RUNNING:
                continue
            agent.deliver(AgentEvent(type=event_type, source_id=RELAY_ID, data=dict(data)))
            notified.append(agent_id)
            logger.debug("Agent '%s' notified of '%s'", agent_id, event_type)
        return notified

    async def invoke_tool(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return await self.registry.invoke_tool(name, params)

    async def get_resource(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.registry.get_resource(name, params)

    def _require(self, agent_id: str) -> Agent:
        agent = self._agents.get(agent_id)
        if agent is None:
            raise NotFoundError(f"Unknown agent '{agent_id}'")
        return agent

    def _sync_capabilities(self, agent: Agent) -> None:
        for tool in agent.get_tools():
            self.registry.register_tool(tool)
        for resource in agent.get_resources():
            self.registry.register_resource(resource)

    async def _relay_events(self) -> None:
        queue = self.bus.register(RELAY_ID)
        while True:
            event = await queue.get()
            try:
                self._relay_event(event)
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to relay '%s' from '%s': %s", event.type, event.source_id, exc)

    def _find(self, agent_id: str) -> Optional[Agent]:
        agent = self._agents.get(agent_id)
        if agent is None:
            agent = next((a for a in self._agents.values() if a.agent_id == agent_id), None)
        return agent

    def _relay_event(self, event: AgentEvent) -> None:
        agent = self._find(event.source_id)
        if event.type in {"tool-registered", "resource-registered"}:
            if agent is not None:
                self._sync_capabilities(agent)
        elif event.type == "analysis-completed":
            logger.debug("Analysis completed: %s (ID: %s)", event.data.get("type"), event.data.get("taskId"))
            self.notify_agents("analysis-event", event.data, [event.source_id])
        elif event.type == "message" and event.target_id:
            target = self._find(event.target_id)
            if target is not None and target.running:
                target.deliver(event)
            else:
                logger.warning("Dropping message for unavailable agent '%s'", event.target_id)
