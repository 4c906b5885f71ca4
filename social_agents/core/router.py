"""JSON-RPC method router returning a response envelope for every request."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Union

from social_agents.errors import INTERNAL_ERROR, METHOD_NOT_FOUND, SocialAgentsError

from .models import JsonRpcRequest, error_response, success_response
from .registry import call_handler

logger = logging.getLogger(__name__)

RouteHandler = Callable[[Dict[str, Any]], Any]


class MessageRouter:
    """Map method names to handlers; never raises from ``route_message``."""

    def __init__(self) -> None:
        self._routes: Dict[str, RouteHandler] = {}

    def register_route(self, method: str, handler: RouteHandler) -> None:
        self._routes[method] = handler
        logger.debug("Route '%s' registered", method)

    def unregister_route(self, method: str) -> None:
        self._routes.pop(method, None)

    def list_routes(self) -> List[str]:
        return list(self._routes)

    def clear(self) -> None:
        self._routes.clear()

    async def route_message(
        self, request: Union[JsonRpcRequest, Mapping[str, Any]]
    ) -> Dict[str, Any]:
        if not isinstance(request, JsonRpcRequest):
            request = JsonRpcRequest.from_dict(dict(request))

        handler = self._routes.get(request.method)
        if handler is None:
            logger.warning("No route found for method '%s'", request.method)
            return error_response(
                request.id, METHOD_NOT_FOUND, f"Method '{request.method}' not found"
            )

        try:
            result = await call_handler(handler, request.params)
        except SocialAgentsError as exc:
            logger.warning("Method '%s' failed: %s", request.method, exc)
            return error_response(request.id, exc.code, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.error("Error while handling method '%s': %s", request.method, exc)
            return error_response(request.id, INTERNAL_ERROR, f"Internal error: {exc}")

        if isinstance(result, dict) and result.get("jsonrpc") == "2.0":
            return {**result, "id": request.id}
        return success_response(request.id, result)
