"""Base agent definition used by the orchestrator."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from social_agents.core.event_bus import EventBus
from social_agents.core.models import AgentEvent, AgentState, ResourceDescriptor, ToolDescriptor
from social_agents.core.worker import QueueWorker
from social_agents.errors import StartupError, ValidationError

ToolSpec = Union[ToolDescriptor, Mapping[str, Any]]
ResourceSpec = Union[ResourceDescriptor, Mapping[str, Any]]


def _require(kind: str, name: Any, description: Any, handler: Any) -> None:
    if not name or not description or handler is None or not callable(handler):
        raise ValidationError(f"A {kind} must have a name, a description and a handler")


class Agent:
    """Lifecycle state machine plus the tools and resources an agent provides.

    Concrete agents either pass descriptors at construction or register them
    from ``on_initialize``. Domain behaviour goes in the ``on_*`` hooks and
    ``handle_message``; the guarded ``initialize/start/stop`` stay here.
    """

    def __init__(
        self,
        agent_id: str,
        *,
        tools: Iterable[ToolSpec] = (),
        resources: Iterable[ResourceSpec] = (),
        bus: Optional[EventBus] = None,
        config: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._agent_id = agent_id
        self.config: Dict[str, Any] = dict(config or {})
        self.state = AgentState.CREATED
        self._bus = bus or EventBus()
        self._initial_tools = list(tools)
        self._initial_resources = list(resources)
        self._tools: List[ToolDescriptor] = []
        self._resources: List[ResourceDescriptor] = []
        self._inbox: QueueWorker[AgentEvent] = QueueWorker(f"{agent_id}-inbox", self.handle_message)
        self.logger = logging.getLogger(f"{__name__}.{agent_id}")
        self.logger.info("Agent '%s' created", agent_id)

    @property
    def agent_id(self) -> str:
        return self._agent_id

    @property
    def running(self) -> bool:
        return self.state is AgentState.RUNNING

    @property
    def bus(self) -> EventBus:
        return self._bus

    def bind_bus(self, bus: EventBus) -> None:
        """Route this agent's emitted events through ``bus``."""
        self._bus = bus

    async def initialize(self) -> None:
        if self.state is not AgentState.CREATED:
            self.logger.warning("Agent '%s' is already initialized", self.agent_id)
            return
        self.logger.info("Initializing agent '%s'", self.agent_id)
        # Validate every descriptor before committing any.
        tools = [self._tool_descriptor(tool) for tool in self._initial_tools]
        resources = [self._resource_descriptor(resource) for resource in self._initial_resources]
        for tool in tools:
            self._add_tool(tool)
        for resource in resources:
            self._add_resource(resource)
        try:
            await self.on_initialize()
        except Exception:
            self._tools.clear()
            self._resources.clear()
            raise
        self.state = AgentState.INITIALIZED

    async def start(self) -> None:
        if self.running:
            self.logger.warning("Agent '%s' is already running", self.agent_id)
            return
        try:
            if self.state is AgentState.CREATED:
                await self.initialize()
        except Exception as exc:
            self.logger.error("Failed to start agent '%s': %s", self.agent_id, exc)
            raise StartupError(f"Agent '{self.agent_id}' failed to initialize: {exc}") from exc

        self._inbox.start()
        try:
            await self.on_start()
        except Exception as exc:
            await self._inbox.stop()
            self.logger.error("Failed to start agent '%s': %s", self.agent_id, exc)
            raise StartupError(f"Agent '{self.agent_id}' failed to start: {exc}") from exc
        self.state = AgentState.RUNNING
        self.logger.info("Agent '%s' started", self.agent_id)
        self.emit("started")

    async def stop(self) -> None:
        if not self.running:
            self.logger.warning("Agent '%s' is not running", self.agent_id)
            return
        # Cleanup happens before the state flips so no scheduled work outlives stop().
        await self.on_stop()
        await self._inbox.stop()
        self.state = AgentState.STOPPED
        self.logger.info("Agent '%s' stopped", self.agent_id)
        self.emit("stopped")

    def register_tool(self, tool: ToolSpec) -> ToolDescriptor:
        """Validate and record a tool owned by this agent."""
        descriptor = self._tool_descriptor(tool)
        self._add_tool(descriptor)
        return descriptor

    def register_resource(self, resource: ResourceSpec) -> ResourceDescriptor:
        """Validate and record a resource owned by this agent."""
        descriptor = self._resource_descriptor(resource)
        self._add_resource(descriptor)
        return descriptor

    def _tool_descriptor(self, tool: ToolSpec) -> ToolDescriptor:
        if isinstance(tool, ToolDescriptor):
            descriptor = tool
        else:
            descriptor = ToolDescriptor(
                name=tool.get("name", ""),
                description=tool.get("description", ""),
                handler=tool.get("handler"),
                input_schema=tool.get("input_schema") or tool.get("inputSchema"),
            )
        _require("tool", descriptor.name, descriptor.description, descriptor.handler)
        return descriptor

    def _add_tool(self, descriptor: ToolDescriptor) -> None:
        descriptor.agent_id = self.agent_id
        self._tools.append(descriptor)
        self.logger.debug("Tool '%s' registered by agent '%s'", descriptor.name, self.agent_id)
        self.emit("tool-registered", {"name": descriptor.name})

    def _resource_descriptor(self, resource: ResourceSpec) -> ResourceDescriptor:
        if isinstance(resource, ResourceDescriptor):
            descriptor = resource
        else:
            descriptor = ResourceDescriptor(
                name=resource.get("name", ""),
                description=resource.get("description", ""),
                handler=resource.get("handler"),
            )
        _require("resource", descriptor.name, descriptor.description, descriptor.handler)
        return descriptor

    def _add_resource(self, descriptor: ResourceDescriptor) -> None:
        descriptor.agent_id = self.agent_id
        self._resources.append(descriptor)
        self.logger.debug("Resource '%s' registered by agent '%s'", descriptor.name, self.agent_id)
        self.emit("resource-registered", {"name": descriptor.name})

    def get_tools(self) -> List[ToolDescriptor]:
        return list(self._tools)

    def get_resources(self) -> List[ResourceDescriptor]:
        return list(self._resources)

    def emit(self, event_type: str, data: Optional[Dict[str, Any]] = None) -> None:
        """Publish an event on the bus for observers such as the orchestrator."""
        self._bus.publish(AgentEvent(type=event_type, source_id=self.agent_id, data=data or {}))

    def send_message(self, target_id: str, message_type: str, payload: Dict[str, Any]) -> AgentEvent:
        """Address a message to another agent; the orchestrator relays it."""
        event = AgentEvent(
            type="message",
            source_id=self.agent_id,
            target_id=target_id,
            data={"type": message_type, "payload": payload},
        )
        self.logger.debug("Sending '%s' message to agent '%s'", message_type, target_id)
        self._bus.publish(event)
        return event

    def deliver(self, event: AgentEvent) -> int:
        """Queue an event in this agent's inbox and return the backlog size."""
        return self._inbox.submit(event)

    async def handle_message(self, event: AgentEvent) -> None:
        """Process an inbox event. Subclasses extend this for their own types."""
        self.logger.debug(
            "Agent '%s' received '%s' from '%s'", self.agent_id, event.type, event.source_id
        )

    def status(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "state": self.state.name,
            "running": self.running,
            "tools": [tool.name for tool in self._tools],
            "resources": [resource.name for resource in self._resources],
            "pending_events": self._inbox.pending,
        }

    async def on_initialize(self) -> None:
        """Hook executed once, after construction-time capabilities are registered."""
        return None

    async def on_start(self) -> None:
        """Hook executed when the agent starts."""
        return None

    async def on_stop(self) -> None:
        """Hook executed before the agent is marked stopped."""
        return None
