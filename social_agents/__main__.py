"""Command line entry point: ``python -m social_agents``."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import signal
import sys
from typing import List, Optional

import uvicorn

from social_agents.config import Config
from social_agents.logging_setup import setup_logging
from social_agents.main import create_app
from social_agents.orchestration.orchestrator import Orchestrator
from social_agents.runtime import build_orchestrator
from social_agents.transport.mcp_server import McpServer

logger = logging.getLogger("social_agents.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Social media multi-agent backend",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--transport",
        choices=["http", "stdio", "sse"],
        default="http",
        help="http serves the REST facade, stdio/sse serve the JSON-RPC transport",
    )
    parser.add_argument("--host", default=None, help="Bind address (defaults from the environment)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (defaults from the environment)")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser.parse_args(argv)


async def _open_stdio() -> tuple:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    transport, protocol = await loop.connect_write_pipe(asyncio.streams.FlowControlMixin, sys.stdout)
    writer = asyncio.StreamWriter(transport, protocol, None, loop)
    return reader, writer


async def serve_stdio(orchestrator: Orchestrator, config: Config) -> None:
    server = McpServer(orchestrator, config)
    await orchestrator.start()
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:  # pragma: no cover - Windows
            pass

    try:
        reader, writer = await _open_stdio()
        serving = asyncio.create_task(server.run_stdio(reader, writer))
        stopping = asyncio.create_task(stop.wait())
        done, pending = await asyncio.wait({serving, stopping}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            task.result()
    finally:
        await orchestrator.shutdown()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = Config.from_env()
    if args.log_level:
        config = dataclasses.replace(
            config, logging=dataclasses.replace(config.logging, level=args.log_level.upper())
        )

    if args.transport == "stdio":
        # stdout carries protocol frames.
        setup_logging(config.logging, stream=sys.stderr)
        orchestrator = build_orchestrator(config)
        try:
            asyncio.run(serve_stdio(orchestrator, config))
        except Exception:
            logger.exception("Unhandled error, shutting down")
            return 1
        return 0

    setup_logging(config.logging)
    if args.transport == "sse":
        config = dataclasses.replace(config, mcp=dataclasses.replace(config.mcp, transport="sse"))
        host = args.host or config.mcp.host
        port = args.port or config.mcp.port
    else:
        host = args.host or config.http_host
        port = args.port or config.http_port

    # uvicorn runs the lifespan, which shuts the orchestrator down on SIGINT/SIGTERM.
    app = create_app(config=config)
    logger.info("Serving on http://%s:%s", host, port)
    uvicorn.run(app, host=host, port=port, log_level=config.logging.level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
