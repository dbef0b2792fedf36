"""Configuration and logging setup for the Sling MCP server and CLI."""

import logging
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import APIConfiguration


class ServerConfig(BaseSettings):
    """Settings read from ``SLING_*`` environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SLING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(default="http://localhost:8080", description="Repository origin")
    location: str = Field(default="", description="Page path or URL giving the default base path")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    log_level: str = Field(default="INFO", description="Logging level for server and CLI")

    def get_api_config(self) -> APIConfiguration:
        """Build the client configuration."""
        return APIConfiguration(
            base_url=self.base_url,
            location=self.location,
            timeout=self.timeout,
        )


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr; stdout is reserved for protocol output."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    has_console = any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in root.handlers
    )
    if not has_console:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
