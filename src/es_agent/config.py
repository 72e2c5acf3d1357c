"""Configuration models for the Elasticsearch tool adapter."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from es_agent.errors import ConfigurationError

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")

ENV_VARS = {
    "url": "ES_URL",
    "api_key": "ES_API_KEY",
    "username": "ES_USERNAME",
    "password": "ES_PASSWORD",
    "ca_cert": "ES_CA_CERT",
    "ssl_skip_verify": "ES_SSL_SKIP_VERIFY",
    "container_mode": "ES_CONTAINER_MODE",
}


class ElasticsearchConfig(BaseModel):
    """Validated, immutable connection settings."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Elasticsearch server URL")
    api_key: str | None = Field(default=None, description="API key for authentication")
    username: str | None = Field(default=None, description="Username for basic authentication")
    password: str | None = Field(default=None, description="Password for basic authentication")
    ca_cert: str | None = Field(default=None, description="Path to a custom CA certificate")
    ssl_skip_verify: bool = False
    container_mode: bool = False

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Elasticsearch URL cannot be empty")
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ValueError("Invalid Elasticsearch URL format")
        return value

    @field_validator("api_key", "username", "password", "ca_cert", mode="before")
    @classmethod
    def _empty_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_credentials(self) -> ElasticsearchConfig:
        if bool(self.username) != bool(self.password):
            raise ValueError(
                "Either ES_API_KEY or both ES_USERNAME and ES_PASSWORD must be provided, "
                "or no auth for local development"
            )
        return self

    @property
    def has_basic_auth(self) -> bool:
        return bool(self.username and self.password)


class ClientConfig(BaseModel):
    """Retry and timeout policy for the store session."""

    max_retries: int = Field(default=5, ge=0)
    request_timeout: float = Field(default=60.0, gt=0.0)
    metadata_timeout: float = Field(default=30.0, gt=0.0)
    http_compress: bool = True


class SearchConfig(BaseModel):
    """Parameters the query synthesizer adds to every search."""

    timeout: str = Field(default="30s", min_length=1)
    pre_tag: str = "<em>"
    post_tag: str = "</em>"


def validate_settings(raw: Mapping[str, Any]) -> ElasticsearchConfig:
    """Validate raw connection settings, raising ``ConfigurationError``."""
    try:
        config = ElasticsearchConfig.model_validate(dict(raw))
    except PydanticValidationError as exc:
        messages = "; ".join(error["msg"] for error in exc.errors())
        raise ConfigurationError(f"Invalid Elasticsearch configuration: {messages}") from exc

    if config.api_key and config.has_basic_auth:
        logger.warning(
            "Both an API key and username/password are configured; using the API key"
        )
    return config


def load_config(env: Mapping[str, str] | None = None) -> ElasticsearchConfig:
    """Build connection settings from environment variables."""
    source = os.environ if env is None else env
    raw: dict[str, Any] = {
        key: source.get(name, "") for key, name in ENV_VARS.items()
    }
    raw["ssl_skip_verify"] = _env_true(raw["ssl_skip_verify"])
    raw["container_mode"] = _env_true(raw["container_mode"])
    return validate_settings(raw)


def _env_true(value: str | None) -> bool:
    return str(value or "").strip().lower() in _TRUTHY
