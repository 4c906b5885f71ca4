"""Tests for the Twitter client and agent against a mocked HTTP transport."""
from __future__ import annotations

from typing import List

import httpx
import pytest

from social_agents.agents.twitter import TwitterAgent
from social_agents.config import TwitterConfig
from social_agents.services.twitter import TwitterClient


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


CONFIG = TwitterConfig(bearer_token="token", base_url="https://api.example.com/2")


def _client(requests: List[httpx.Request], status_code: int = 200) -> TwitterClient:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path.endswith("/search/recent"):
            return httpx.Response(status_code, json={
                "data": [{"id": "1", "text": "hello"}],
                "meta": {"result_count": 1},
            })
        return httpx.Response(status_code, json={"data": {"id": "42", "text": "single"}})

    return TwitterClient(CONFIG, transport=httpx.MockTransport(handler))


@pytest.mark.anyio
async def test_search_sends_bearer_token_and_clamps_page_size() -> None:
    requests: List[httpx.Request] = []
    client = _client(requests)

    payload = await client.search_recent("python", max_results=500)

    assert payload["meta"] == {"result_count": 1}
    sent = requests[0]
    assert sent.headers["Authorization"] == "Bearer token"
    assert sent.url.path == "/2/tweets/search/recent"
    assert sent.url.params["max_results"] == "100"
    assert sent.url.params["query"] == "python"


@pytest.mark.anyio
async def test_agent_tools_return_tweets() -> None:
    agent = TwitterAgent(CONFIG, client=_client([]))
    await agent.start()

    search = await agent.search_tweets({"query": "python"})
    single = await agent.get_tweet({"id": 42})

    assert search["content"] == [{"id": "1", "text": "hello"}]
    assert single["content"]["id"] == "42"
    assert [t.name for t in agent.get_tools()] == ["search_tweets", "get_tweet"]
    await agent.stop()


@pytest.mark.anyio
async def test_http_errors_become_error_results() -> None:
    agent = TwitterAgent(CONFIG, client=_client([], status_code=503))

    result = await agent.search_tweets({"query": "python"})

    assert result["isError"] is True
    assert "503" in result["content"]["message"]


@pytest.mark.anyio
async def test_agent_without_credentials() -> None:
    agent = TwitterAgent()

    assert await agent.search_tweets({"query": "python"}) == {"success": True, "content": []}
    assert (await agent.get_tweet({"id": "1"}))["isError"] is True
    assert (await agent.search_tweets({}))["isError"] is True
