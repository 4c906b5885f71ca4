"""Shared key/value context used for inter-agent coordination."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ContextManager:
    """Last-writer-wins mapping with explicit delete and no expiry."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self.initialized = False

    def initialize(self) -> None:
        self.initialized = True
        logger.info("Shared context initialized")

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value
        logger.debug("Context '%s' set", key)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._values.get(key, default)

    def delete(self, key: str) -> None:
        if key in self._values:
            del self._values[key]
            logger.debug("Context '%s' deleted", key)

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._values)

    def clear(self) -> None:
        self._values.clear()
        self.initialized = False
