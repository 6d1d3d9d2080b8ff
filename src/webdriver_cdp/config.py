"""
Runtime settings for webdriver-cdp.

All values come from environment variables so the MCP server can be
configured from a client's launch config without flags.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    """Connection and logging settings."""

    host: str = "localhost"
    port: int = 9222
    command_timeout: float = 30.0
    http_timeout: float = 5.0
    log_level: str = "INFO"

    @property
    def http_url(self) -> str:
        """Base URL of Chrome's remote-debugging HTTP endpoint."""
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from ``WEBDRIVER_CDP_*`` environment variables."""
        return cls(
            host=os.environ.get("WEBDRIVER_CDP_HOST", cls.host),
            port=int(os.environ.get("WEBDRIVER_CDP_PORT", cls.port)),
            command_timeout=float(
                os.environ.get("WEBDRIVER_CDP_COMMAND_TIMEOUT", cls.command_timeout)
            ),
            http_timeout=float(
                os.environ.get("WEBDRIVER_CDP_HTTP_TIMEOUT", cls.http_timeout)
            ),
            log_level=os.environ.get("WEBDRIVER_CDP_LOG_LEVEL", cls.log_level).upper(),
        )
