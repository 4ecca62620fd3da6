from __future__ import annotations

import os
from dataclasses import dataclass

from . import client as _client
from .client import EvaClient
from .errors import EvaConfigError


@dataclass(frozen=True)
class EnvConfig:
    base_url: str
    api_token: str
    timeout_seconds: float
    debug: bool


def load_env_config(*, use_dotenv: bool = True) -> EnvConfig:
    """Load EVA connection settings from environment (optional .env)."""
    if use_dotenv:
        _client.load_dotenv()
    return EnvConfig(
        base_url=os.getenv("EVA_API_URL", "").strip(),
        api_token=os.getenv("EVA_API_TOKEN", "").strip(),
        timeout_seconds=_client.env_timeout(),
        debug=_client.env_bool("EVA_DEBUG"),
    )


def create_client_from_env(**kwargs) -> EvaClient:
    """Create an EvaClient from environment variables."""
    cfg = load_env_config()
    if not cfg.base_url or not cfg.api_token:
        raise EvaConfigError("Missing EVA_API_URL or EVA_API_TOKEN in environment.")
    kwargs.setdefault("timeout_seconds", cfg.timeout_seconds)
    kwargs.setdefault("debug", cfg.debug)
    return EvaClient(base_url=cfg.base_url, api_token=cfg.api_token, **kwargs)


__all__ = ["EnvConfig", "load_env_config", "create_client_from_env"]
