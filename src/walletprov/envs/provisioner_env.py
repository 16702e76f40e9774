from __future__ import annotations

import logging
import os
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator


class Settings(BaseModel):
    """Typed provisioner settings built from environment variables."""

    wallet_api_base_url: str
    coin: str = "tbtc"
    access_token: Optional[str] = None
    http_timeout: float = 10.0
    log_level: str = "INFO"

    @field_validator("wallet_api_base_url")
    @classmethod
    def validate_wallet_api_base_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Wallet API base URL cannot be empty")
        parsed = urlparse(v)
        if parsed.scheme not in {"http", "https"}:
            raise ValueError("Wallet API base URL must start with http:// or https://")
        if not parsed.netloc:
            raise ValueError("Wallet API base URL must include a host")
        return v.rstrip("/")

    @field_validator("coin")
    @classmethod
    def validate_coin(cls, v: str) -> str:
        if not v or not v.isalnum():
            raise ValueError("Coin must be a non-empty alphanumeric identifier")
        return v.lower()

    @field_validator("http_timeout")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("HTTP timeout must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level


def get_settings() -> Settings:
    """Return typed settings instance sourced from env vars."""
    wallet_api_base_url = os.environ.get("WALLET_API_BASE_URL")
    if not wallet_api_base_url:
        raise ValueError("WALLET_API_BASE_URL is required")
    return Settings(
        wallet_api_base_url=wallet_api_base_url,
        coin=os.environ.get("WALLET_COIN", "tbtc"),
        access_token=os.environ.get("WALLET_ACCESS_TOKEN") or None,
        http_timeout=float(os.environ.get("WALLET_HTTP_TIMEOUT", "10.0")),
        log_level=os.environ.get("WALLET_LOG_LEVEL", "INFO"),
    )
