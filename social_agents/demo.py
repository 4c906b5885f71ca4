"""CLI demonstration of orchestrator-managed agents and the JSON-RPC router."""
from __future__ import annotations

import asyncio
import json

from social_agents.config import Config
from social_agents.runtime import build_orchestrator
from social_agents.transport.mcp_server import McpServer


async def main() -> None:
    config = Config()
    orchestrator = build_orchestrator(config)
    server = McpServer(orchestrator, config)
    await orchestrator.start()
    print(f"Agents: {orchestrator.status()}")

    try:
        result = await orchestrator.invoke_tool(
            "analyze_text",
            {"text": "Je suis très content de ce produit technologique"},
        )
        print(f"Sentiment: {result['content']['sentiment']['label']}")

        raw = json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
        print(f"tools/list -> {await server.handle_raw(raw)}")
    finally:
        await orchestrator.shutdown()
    print("Agents stopped")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
