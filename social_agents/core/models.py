"""Core data models shared across orchestrator components."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional, Union

RequestId = Union[str, int, None]


class AgentState(Enum):
    """Lifecycle states for an agent managed by the orchestrator."""

    CREATED = auto()
    INITIALIZED = auto()
    RUNNING = auto()
    STOPPED = auto()


@dataclass(slots=True)
class ToolDescriptor:
    """Named, invokable capability exposed by an agent."""

    name: str
    description: str
    handler: Callable[..., Any]
    input_schema: Optional[Dict[str, Any]] = None
    agent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema or {"type": "object"},
            "agentId": self.agent_id,
        }


@dataclass(slots=True)
class ResourceDescriptor:
    """Named, queryable capability exposed by an agent."""

    name: str
    description: str
    handler: Callable[..., Any]
    agent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "agentId": self.agent_id,
        }


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class AgentEvent:
    """Event emitted by an agent or delivered into an agent's inbox."""

    type: str
    source_id: str
    data: Dict[str, Any] = field(default_factory=dict)
    target_id: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class JsonRpcRequest:
    """Request envelope at the router boundary."""

    method: str
    id: RequestId = None
    params: Dict[str, Any] = field(default_factory=dict)
    jsonrpc: str = "2.0"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JsonRpcRequest":
        params = data.get("params")
        return cls(
            method=data.get("method", ""),
            id=data.get("id"),
            params=params if isinstance(params, dict) else {},
            jsonrpc=data.get("jsonrpc", "2.0"),
        )


def success_response(request_id: RequestId, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def error_response(request_id: RequestId, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}}
