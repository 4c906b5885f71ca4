"""Capability registry mapping tool and resource names to their handlers."""
from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from social_agents.errors import NotFoundError, ResourceError, ValidationError

from .models import ResourceDescriptor, ToolDescriptor

logger = logging.getLogger(__name__)


async def call_handler(handler: Any, params: Mapping[str, Any]) -> Any:
    """Invoke a sync or async handler and await the result when needed."""
    result = handler(dict(params))
    if inspect.isawaitable(result):
        result = await result
    return result


def _check(kind: str, name: Optional[str], handler: Any) -> None:
    if not name:
        raise ValidationError(f"A {kind} must have a name")
    if handler is None or not callable(handler):
        raise ValidationError(f"{kind.capitalize()} '{name}' must have a callable handler")


class CapabilityRegistry:
    """Directory of every tool and resource exposed by registered agents."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDescriptor] = {}
        self._resources: Dict[str, ResourceDescriptor] = {}

    def register_tool(self, tool: ToolDescriptor) -> None:
        _check("tool", tool.name, tool.handler)
        if tool.name in self._tools:
            logger.debug("Tool '%s' replaced", tool.name)
        self._tools[tool.name] = tool
        logger.debug("Tool '%s' registered", tool.name)

    def register_resource(self, resource: ResourceDescriptor) -> None:
        _check("resource", resource.name, resource.handler)
        self._resources[resource.name] = resource
        logger.debug("Resource '%s' registered", resource.name)

    def unregister_tool(self, name: str) -> None:
        if self._tools.pop(name, None) is not None:
            logger.debug("Tool '%s' unregistered", name)

    def unregister_resource(self, name: str) -> None:
        if self._resources.pop(name, None) is not None:
            logger.debug("Resource '%s' unregistered", name)

    def unregister_agent(self, agent_id: str) -> None:
        """Drop every entry owned by ``agent_id``."""
        for name in [n for n, t in self._tools.items() if t.agent_id == agent_id]:
            self.unregister_tool(name)
        for name in [n for n, r in self._resources.items() if r.agent_id == agent_id]:
            self.unregister_resource(name)

    def get_tool(self, name: str) -> Optional[ToolDescriptor]:
        return self._tools.get(name)

    def list_tools(self) -> List[ToolDescriptor]:
        return list(self._tools.values())

    def list_resources(self) -> List[ResourceDescriptor]:
        return list(self._resources.values())

    def describe_tools(self) -> List[Dict[str, Any]]:
        return [tool.to_dict() for tool in self._tools.values()]

    def describe_resources(self) -> List[Dict[str, Any]]:
        return [resource.to_dict() for resource in self._resources.values()]

    async def invoke_tool(
        self, name: str, params: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Run a tool; handler failures come back as an ``isError`` result."""
        tool = self._tools.get(name)
        if tool is None:
            raise NotFoundError(f"Tool '{name}' not found")
        try:
            result = await call_handler(tool.handler, params or {})
        except Exception as exc:  # noqa: BLE001
            logger.error("Tool '%s' failed: %s", name, exc)
            return {"isError": True, "content": {"message": f"Error: {exc}"}}
        return _as_tool_result(result)

    async def get_resource(self, name: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Read a resource; handler failures propagate as ``ResourceError``."""
        resource = self._resources.get(name)
        if resource is None:
            raise NotFoundError(f"Resource '{name}' not found")
        try:
            return await call_handler(resource.handler, params or {})
        except Exception as exc:
            logger.error("Resource '%s' failed: %s", name, exc)
            raise ResourceError(f"Resource '{name}' failed: {exc}") from exc


def _as_tool_result(result: Union[Dict[str, Any], Any]) -> Dict[str, Any]:
    if isinstance(result, dict) and ("content" in result or "isError" in result):
        return result
    return {"content": result}
