"""Configuration management for the GitLab provider."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator

from glprovider.core.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://gitlab.com"


class GitLabConfig(BaseModel):
    """GitLab connection configuration."""

    token: str | None = None
    base_url: str | None = None
    cacert_file: str | None = None
    insecure: bool = False
    client_cert: str | None = None
    client_key: str | None = None
    early_auth_check: bool = True

    @model_validator(mode="after")
    def apply_environment(self) -> "GitLabConfig":
        """Fill token and base URL from the environment and normalize the URL."""
        if not self.token:
            self.token = os.environ.get("GITLAB_TOKEN") or None
        if not self.base_url:
            self.base_url = os.environ.get("GITLAB_BASE_URL") or DEFAULT_BASE_URL

        # python-gitlab wants the instance root, not the API endpoint
        url = self.base_url.rstrip("/")
        if url.endswith("/api/v4"):
            url = url[: -len("/api/v4")]
        self.base_url = url

        if self.client_cert and not self.client_key:
            raise ValueError("client_key is required when client_cert is set")
        if self.client_key and not self.client_cert:
            raise ValueError("client_cert is required when client_key is set")
        return self

    @property
    def ssl_verify(self) -> bool | str:
        """Value for python-gitlab's ``ssl_verify`` argument."""
        if self.insecure:
            return False
        return self.cacert_file or True


class OperationsConfig(BaseModel):
    """Resource operation tuning."""

    timeout_seconds: float | None = None
    deletion_timeout_seconds: float = 300.0
    deletion_poll_interval_seconds: float = 2.0
    page_size: int = Field(default=100, ge=1, le=100)
    max_retries: int = Field(default=3, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stderr"


class ProviderConfig(BaseModel):
    """Main provider configuration."""

    gitlab: GitLabConfig = Field(default_factory=GitLabConfig)
    operations: OperationsConfig = Field(default_factory=OperationsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "ProviderConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            ProviderConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderConfig":
        """Build configuration from a plain mapping.

        Raises:
            ConfigurationError: If the mapping is invalid
        """
        try:
            return cls(**data)
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary, without the token."""
        return self.model_dump(exclude={"gitlab": {"token"}})
