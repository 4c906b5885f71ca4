"""Error taxonomy shared by the registry, router and agents."""
from __future__ import annotations

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class SocialAgentsError(Exception):
    """Base error carrying the JSON-RPC code used when it crosses the router."""

    code: int = INTERNAL_ERROR


class ValidationError(SocialAgentsError):
    """A tool or resource descriptor is malformed."""

    code = INVALID_PARAMS


class NotFoundError(SocialAgentsError):
    """An unknown tool, resource, agent or method was requested."""

    code = METHOD_NOT_FOUND


class HandlerError(SocialAgentsError):
    """A capability handler raised while running."""


class ResourceError(HandlerError):
    """A resource handler raised; unlike tools, this propagates to the caller."""


class StartupError(SocialAgentsError):
    """An agent failed to initialize while starting."""
