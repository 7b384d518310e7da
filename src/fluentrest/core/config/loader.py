"""Configuration loader for REST clients."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from fluentrest.core.rest.request import DEFAULT_MAX_RETRIES as _DEFAULT_MAX_RETRIES
from fluentrest.core.rest.request import DEFAULT_RETRY_INTERVAL_S as _DEFAULT_RETRY_INTERVAL_S

_DEFAULT_TIMEOUT_S = 10.0
_DEFAULT_USER_AGENT = "fluentrest/1.0"


class RestClientConfig(BaseModel):
    base_url: str = ""
    username: str = ""
    password: str = ""
    max_retries: int = Field(_DEFAULT_MAX_RETRIES, ge=0)
    retry_interval_s: float = Field(_DEFAULT_RETRY_INTERVAL_S, ge=0)
    timeout_s: float = Field(_DEFAULT_TIMEOUT_S, gt=0)
    user_agent: str = _DEFAULT_USER_AGENT


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def config_from_env() -> RestClientConfig:
    return RestClientConfig(
        base_url=os.getenv("FLUENTREST_BASE_URL", ""),
        username=os.getenv("FLUENTREST_USERNAME", ""),
        password=os.getenv("FLUENTREST_PASSWORD", ""),
        max_retries=max(0, _get_int_env("FLUENTREST_MAX_RETRIES", _DEFAULT_MAX_RETRIES)),
        retry_interval_s=max(0.0, _get_float_env("FLUENTREST_RETRY_INTERVAL_S", _DEFAULT_RETRY_INTERVAL_S)),
        timeout_s=max(0.1, _get_float_env("FLUENTREST_TIMEOUT_S", _DEFAULT_TIMEOUT_S)),
        user_agent=os.getenv("FLUENTREST_USER_AGENT", _DEFAULT_USER_AGENT),
    )


def load_config(path: Optional[str] = None) -> RestClientConfig:
    """Load and validate the ``rest`` section of a YAML file, falling back to the environment."""
    if path is None:
        return config_from_env()
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return RestClientConfig.model_validate(data.get("rest") or {})
