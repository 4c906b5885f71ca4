"""Minimal async client for the Twitter API v2 read endpoints."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from social_agents.config import TwitterConfig

logger = logging.getLogger(__name__)

TWEET_FIELDS = "created_at,author_id,public_metrics,lang"


class TwitterClient:
    def __init__(
        self,
        config: TwitterConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ) -> None:
        self.config = config
        self._transport = transport
        self._timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.config.bearer_token}"}

    async def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=self._headers(),
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()

    async def search_recent(self, query: str, max_results: int = 10) -> Dict[str, Any]:
        """Search tweets from the last seven days."""
        max_results = max(10, min(int(max_results), 100))
        logger.debug("Searching recent tweets for %r (max %d)", query, max_results)
        return await self._get(
            "/tweets/search/recent",
            {"query": query, "max_results": max_results, "tweet.fields": TWEET_FIELDS},
        )

    async def get_tweet(self, tweet_id: str) -> Dict[str, Any]:
        return await self._get(f"/tweets/{tweet_id}", {"tweet.fields": TWEET_FIELDS})
