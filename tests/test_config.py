"""Tests for environment configuration, logging setup and the shared context."""
from __future__ import annotations

import io
import logging
from logging.handlers import RotatingFileHandler

import pytest

from social_agents.config import Config, LoggingConfig
from social_agents.core.context import ContextManager
from social_agents.logging_setup import setup_logging


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_TRANSPORT", "SSE")
    monkeypatch.setenv("MCP_PORT", "4000")
    monkeypatch.setenv("TWITTER_BEARER_TOKEN", "secret")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = Config.from_env(dotenv=False)

    assert config.mcp.transport == "sse"
    assert config.mcp.port == 4000
    assert config.twitter.enabled
    assert "secret" not in repr(config.twitter)
    assert config.logging.level == "DEBUG"


def test_from_env_rejects_unknown_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_TRANSPORT", "websocket")
    with pytest.raises(ValueError):
        Config.from_env(dotenv=False)


def test_twitter_disabled_without_bearer_token() -> None:
    assert not Config().twitter.enabled


def test_setup_logging_writes_to_stream_and_rotating_file(tmp_path) -> None:
    stream = io.StringIO()
    log_file = tmp_path / "logs" / "agents.log"

    logger = setup_logging(LoggingConfig(level="INFO", filename=str(log_file)), stream=stream)
    logging.getLogger("social_agents.tests").info("hello")

    assert "hello" in stream.getvalue()
    assert any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
    assert log_file.exists()
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def test_context_is_last_writer_wins() -> None:
    context = ContextManager()
    context.initialize()
    context.set("topic", "sport")
    context.set("topic", "santé")
    context.delete("missing")

    assert context.get("topic") == "santé"
    assert context.get("missing", "default") == "default"
    assert context.snapshot() == {"topic": "santé"}

    context.clear()
    assert context.snapshot() == {}
    assert not context.initialized
