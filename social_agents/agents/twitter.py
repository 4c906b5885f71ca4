"""Agent exposing Twitter search and lookup as tools."""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from social_agents.agents.base import Agent
from social_agents.config import TwitterConfig
from social_agents.services.twitter import TwitterClient

AGENT_ID = "twitter"


class TwitterAgent(Agent):
    """Wraps ``TwitterClient``; without a bearer token the tools answer with empty data."""

    def __init__(
        self,
        twitter_config: Optional[TwitterConfig] = None,
        *,
        client: Optional[TwitterClient] = None,
        agent_id: str = AGENT_ID,
        **kwargs: Any,
    ) -> None:
        super().__init__(agent_id, **kwargs)
        self.twitter_config = twitter_config or TwitterConfig()
        self._client = client
        if self._client is None and self.twitter_config.enabled:
            self._client = TwitterClient(self.twitter_config)

    async def on_initialize(self) -> None:
        self.register_tool({
            "name": "search_tweets",
            "description": "Search recent tweets",
            "input_schema": {
                "type": "object",
                "properties": {
                    "query": {"type": "string"},
                    "maxResults": {"type": "integer", "minimum": 10, "maximum": 100},
                },
                "required": ["query"],
            },
            "handler": self.search_tweets,
        })
        self.register_tool({
            "name": "get_tweet",
            "description": "Fetch a single tweet by id",
            "input_schema": {
                "type": "object",
                "properties": {"id": {"type": "string"}},
                "required": ["id"],
            },
            "handler": self.get_tweet,
        })

    async def search_tweets(self, params: Dict[str, Any]) -> Dict[str, Any]:
        query = params.get("query")
        if not query:
            return {"isError": True, "content": {"message": "Error: 'query' is required"}}
        if self._client is None:
            self.logger.debug("No Twitter credentials configured, returning no tweets")
            return {"success": True, "content": []}

        try:
            payload = await self._client.search_recent(query, params.get("maxResults", 10))
        except httpx.HTTPError as exc:
            self.logger.error("Tweet search failed: %s", exc)
            return {"isError": True, "content": {"message": f"Error: {exc}"}}
        return {
            "success": True,
            "content": payload.get("data", []),
            "meta": payload.get("meta", {}),
        }

    async def get_tweet(self, params: Dict[str, Any]) -> Dict[str, Any]:
        tweet_id = params.get("id")
        if not tweet_id:
            return {"isError": True, "content": {"message": "Error: 'id' is required"}}
        if self._client is None:
            return {"isError": True, "content": {"message": "Error: Twitter API is not configured"}}

        try:
            payload = await self._client.get_tweet(str(tweet_id))
        except httpx.HTTPError as exc:
            self.logger.error("Tweet lookup failed for %s: %s", tweet_id, exc)
            return {"isError": True, "content": {"message": f"Error: {exc}"}}
        return {"success": True, "content": payload.get("data")}
