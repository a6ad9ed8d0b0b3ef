"""Configuration management service with Pydantic Settings.

This module provides centralized configuration for the ETH health checker,
loading and validating environment variables at startup.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ETHERSCAN_URL = "https://{prefix}.etherscan.io/api?module=proxy&action=eth_blockNumber"


def _validate_http_url(v: str | None) -> str | None:
    if v is None:
        return v
    if not v.startswith(("http://", "https://")):
        raise ValueError("URL must be an HTTP(S) endpoint")
    return v


class NodeSettings(BaseSettings):
    """Local Ethereum node settings."""

    model_config = SettingsConfigDict(
        env_prefix="ETH_NODE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str = Field(
        default="http://localhost:8545",
        alias="ETH_NODE_URL",
        description="JSON-RPC endpoint of the monitored node",
    )
    timeout: float = Field(
        default=10.0,
        alias="ETH_NODE_TIMEOUT",
        description="RPC timeout in seconds",
        gt=0,
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate RPC URL format."""
        _validate_http_url(v)
        return v


class ReferenceSettings(BaseSettings):
    """Reference chain height source settings."""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    network: str = Field(
        default="mainnet",
        alias="NETWORK",
        description="Network name, selects the Etherscan API host",
    )
    url: str | None = Field(
        default=None,
        alias="REFERENCE_URL",
        description="Explicit reference endpoint, overrides NETWORK",
    )
    api_key: SecretStr | None = Field(
        default=None,
        alias="ETHERSCAN_API_KEY",
        description="Optional Etherscan API key",
    )
    timeout: float = Field(
        default=10.0,
        alias="REFERENCE_TIMEOUT",
        description="HTTP timeout in seconds",
        gt=0,
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate reference URL format."""
        return _validate_http_url(v)

    @property
    def endpoint(self) -> str:
        """Resolved reference endpoint URL."""
        if self.url:
            return self.url
        network = self.network.strip().lower()
        prefix = "api" if network in ("", "mainnet") else f"api-{network}"
        return ETHERSCAN_URL.format(prefix=prefix)


class EmailSettings(BaseSettings):
    """Email notification settings."""

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str | None = Field(default=None, alias="SMTP_HOST", description="SMTP relay host")
    port: int = Field(default=587, alias="SMTP_PORT", ge=1, le=65535)
    username: str = Field(default="", alias="SMTP_USER", description="SMTP login")
    password: SecretStr | None = Field(default=None, alias="SMTP_PASSWORD")
    use_tls: bool = Field(default=True, alias="SMTP_USE_TLS", description="Use STARTTLS")
    from_address: str = Field(
        default="eth-health@localhost",
        alias="EMAIL_FROM",
        description="Sender address",
    )
    to_address: str | None = Field(
        default=None,
        alias="EMAIL_TO",
        description="Recipient address for alerts",
    )

    @property
    def enabled(self) -> bool:
        """Check if email notifications are enabled."""
        return bool(self.host) and bool(self.to_address)


class SlackSettings(BaseSettings):
    """Slack notification settings."""

    model_config = SettingsConfigDict(
        env_prefix="SLACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    webhook_url: SecretStr | None = Field(
        default=None,
        alias="SLACK_WEBHOOK_URL",
        description="Slack incoming webhook URL",
    )
    channel: str | None = Field(
        default=None,
        alias="SLACK_CHANNEL",
        description="Channel override, e.g. #alerts",
    )

    @property
    def enabled(self) -> bool:
        """Check if Slack notifications are enabled."""
        return self.webhook_url is not None


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files via python-dotenv.

    Example:
        ```python
        from eth_health.config import get_settings

        settings = get_settings()
        print(settings.node.url)
        print(settings.blocks)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested configuration groups
    node: NodeSettings = Field(default_factory=NodeSettings)
    reference: ReferenceSettings = Field(default_factory=ReferenceSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    slack: SlackSettings = Field(default_factory=SlackSettings)

    # Application settings
    blocks: int = Field(
        default=10,
        alias="BLOCKS",
        description="Maximum allowed lag behind the reference, in blocks",
        ge=0,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    verbose: bool = Field(
        default=False,
        alias="VERBOSE",
        description="Shortcut for DEBUG logging and SMTP protocol output",
    )
    dry_run: bool = Field(
        default=False,
        alias="DRY_RUN",
        description="Run checks without sending notifications",
    )

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the verbose flag."""
        return "DEBUG" if self.verbose else self.log_level

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.effective_log_level)
        return level

    def redacted_summary(self) -> dict[str, str | dict[str, str]]:
        """Get a summary of settings with secrets redacted.

        Returns:
            Dictionary of settings with sensitive values masked.
        """
        return {
            "node_url": self.node.url,
            "reference": {
                "endpoint": self.reference.endpoint,
                "api_key": "(set)" if self.reference.api_key else "(not set)",
            },
            "email_enabled": str(self.email.enabled),
            "slack_enabled": str(self.slack.enabled),
            "blocks": str(self.blocks),
            "log_level": self.effective_log_level,
            "dry_run": str(self.dry_run),
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Uses LRU cache to ensure settings are loaded only once and
    reused across the application.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If environment variables have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
