"""Configuration management for the agent backend."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class McpConfig:
    """Protocol transport settings."""

    transport: str = "stdio"
    host: str = "localhost"
    port: int = 3000


@dataclass(frozen=True)
class TwitterConfig:
    """Twitter API credentials; reads need only the bearer token."""

    api_key: Optional[str] = None
    api_secret: Optional[str] = field(default=None, repr=False)
    access_token: Optional[str] = field(default=None, repr=False)
    access_token_secret: Optional[str] = field(default=None, repr=False)
    bearer_token: Optional[str] = field(default=None, repr=False)
    base_url: str = "https://api.twitter.com/2"

    @property
    def enabled(self) -> bool:
        return bool(self.bearer_token)


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    filename: Optional[str] = "logs/social-agents.log"


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    name: str = "Social MCP Agent"
    version: str = "1.0.0"
    environment: str = "development"
    http_host: str = "127.0.0.1"
    http_port: int = 8000
    mcp: McpConfig = field(default_factory=McpConfig)
    twitter: TwitterConfig = field(default_factory=TwitterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> Config:
        """Load configuration from environment variables (and ``.env`` if present)."""
        if dotenv:
            load_dotenv(override=False)

        transport = os.getenv("MCP_TRANSPORT", "stdio").lower()
        if transport not in {"stdio", "sse"}:
            raise ValueError(f"Unsupported MCP_TRANSPORT '{transport}' (expected stdio or sse)")

        return cls(
            name=os.getenv("APP_NAME", "Social MCP Agent"),
            version=os.getenv("APP_VERSION", "1.0.0"),
            environment=os.getenv("ENVIRONMENT", "development"),
            http_host=os.getenv("HTTP_HOST", "127.0.0.1"),
            http_port=int(os.getenv("HTTP_PORT", "8000")),
            mcp=McpConfig(
                transport=transport,
                host=os.getenv("MCP_HOST", "localhost"),
                port=int(os.getenv("MCP_PORT", "3000")),
            ),
            twitter=TwitterConfig(
                api_key=os.getenv("TWITTER_API_KEY"),
                api_secret=os.getenv("TWITTER_API_SECRET"),
                access_token=os.getenv("TWITTER_ACCESS_TOKEN"),
                access_token_secret=os.getenv("TWITTER_ACCESS_TOKEN_SECRET"),
                bearer_token=os.getenv("TWITTER_BEARER_TOKEN"),
                base_url=os.getenv("TWITTER_API_BASE_URL", "https://api.twitter.com/2"),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO").upper(),
                filename=os.getenv("LOG_FILE", "logs/social-agents.log") or None,
            ),
        )
