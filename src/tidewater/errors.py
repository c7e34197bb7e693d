"""Error types shared by the engine and provider plugins."""
from __future__ import annotations
from typing import Optional


class NotFoundError(Exception):
    """A provider has nothing for this query. Recoverable, never aborts a run."""

    def __init__(self, reason: Optional[str] = None):
        super().__init__(f"Couldn't find a stream: {reason or 'not found'}")
        self.reason = reason


class ConfigurationError(Exception):
    """Misconfigured engine (unknown id, missing target/fetcher, duplicate id/rank)."""
