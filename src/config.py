"""Configuration loading and validation.

This module is responsible for:

- Loading `.env` into the process environment (without overriding existing vars).
- Converting environment variables into strongly-typed Pydantic models.
- Validating required fields and providing actionable error messages.
"""

import os
from typing import TypeVar

import dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

_T = TypeVar("_T", int, float)

DEFAULT_INSERT_URL = "https://insights-collector.newrelic.com"
DEFAULT_QUERY_URL = "https://insights-api.newrelic.com"


def _is_placeholder(value: str) -> bool:
    return value.startswith("your_") and value.endswith("_here")


def _get_required_env(name: str) -> str:
    """Read a required env var or raise a helpful error."""
    value = os.getenv(name, "").strip()
    if not value:
        raise ValueError(f"{name} is required. Please set it in your .env file.")
    if _is_placeholder(value):
        raise ValueError(f"{name} is required. Please replace the placeholder value in your .env file.")
    return value


def _get_optional_env(name: str) -> str | None:
    """Read an optional env var, treating empty strings as unset."""
    value = os.getenv(name, "").strip()
    return value or None


def _get_env_bool(name: str, default: bool) -> bool:
    """Read a boolean env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    normalized = raw.strip().lower()
    if normalized in {"true", "1", "yes", "y", "on"}:
        return True
    if normalized in {"false", "0", "no", "n", "off"}:
        return False
    raise ValueError(f"{name} must be a boolean (true/false). Got: {raw!r}")


def _get_env_number(name: str, default: _T, cast: type[_T]) -> _T:
    """Read an int/float env var with a default."""
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a {cast.__name__}. Got: {raw!r}") from exc


class InsightsConfig(BaseModel):
    """Configuration for talking to the Insights insert and query APIs."""

    model_config = ConfigDict(frozen=True)

    account_id: str = Field(..., description="Insights account id")
    insert_key: str | None = Field(default=None, description="Key used to insert events")
    query_key: str | None = Field(default=None, description="Key used to run NRQL queries")
    insert_url: str = Field(default=DEFAULT_INSERT_URL, description="Base URL of the insert API")
    query_url: str = Field(default=DEFAULT_QUERY_URL, description="Base URL of the query API")
    timeout: float = Field(default=10.0, gt=0, description="Default transport timeout (seconds)")

    # Set when a custom transport adds the credential headers itself.
    transport_auth: bool = Field(default=False, description="Credentials are injected by the transport")

    @field_validator("account_id")
    def validate_account_id(cls, v: str) -> str:
        """Validate account id is set (not empty/placeholder)."""
        v = v.strip()
        if not v or _is_placeholder(v):
            raise ValueError("INSIGHTS_ACCOUNT_ID is required. Please set it in your .env file.")
        return v

    @field_validator("insert_key", "query_key")
    def validate_key(cls, v: str | None) -> str | None:
        """Normalize empty keys to None and reject placeholders."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if _is_placeholder(v):
            raise ValueError("Insights keys must not be placeholder values. Please update your .env file.")
        return v

    @field_validator("insert_url", "query_url")
    def validate_base_url(cls, v: str) -> str:
        """Require an absolute http(s) URL and drop any trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Base URL must start with http:// or https://. Got: {v!r}")
        return v.rstrip("/")


class Config(BaseModel):
    """Top-level application configuration."""

    insights: InsightsConfig = Field(..., description="Insights configuration")


def load_config() -> Config:
    """Load application configuration from environment variables.

    Notes:
    - Calls `dotenv.load_dotenv()` so local `.env` values are visible to the process.
    - Raises `ValueError` with actionable messages when required configuration is
      missing or still contains placeholder values.
    """
    # Load variables from `.env` into the process environment (without overriding
    # already-set env vars).
    dotenv.load_dotenv()

    insights = InsightsConfig(
        account_id=_get_required_env("INSIGHTS_ACCOUNT_ID"),
        insert_key=_get_optional_env("INSIGHTS_INSERT_KEY"),
        query_key=_get_optional_env("INSIGHTS_QUERY_KEY"),
        insert_url=_get_optional_env("INSIGHTS_INSERT_URL") or DEFAULT_INSERT_URL,
        query_url=_get_optional_env("INSIGHTS_QUERY_URL") or DEFAULT_QUERY_URL,
        timeout=_get_env_number("INSIGHTS_TIMEOUT", 10.0, float),
        transport_auth=_get_env_bool("INSIGHTS_TRANSPORT_AUTH", False),
    )
    return Config(insights=insights)
