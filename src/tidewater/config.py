"""Environment configuration. Values come from the process env or a .env file."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

_TRUTHY = {"1", "true", "yes", "on"}


def _float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    target: str = "any"
    consistent_ip_for_requests: bool = False
    proxy_url: Optional[str] = None
    request_timeout: float = 10
    source_timeout: Optional[float] = 8
    embed_timeout: Optional[float] = 6
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            target=os.getenv("TIDEWATER_TARGET", "any"),
            consistent_ip_for_requests=os.getenv("TIDEWATER_CONSISTENT_IP", "").lower() in _TRUTHY,
            proxy_url=os.getenv("TIDEWATER_PROXY_URL") or None,
            request_timeout=_float("TIDEWATER_REQUEST_TIMEOUT", 10),
            source_timeout=_float("TIDEWATER_SOURCE_TIMEOUT", 8),
            embed_timeout=_float("TIDEWATER_EMBED_TIMEOUT", 6),
            log_level=os.getenv("TIDEWATER_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
