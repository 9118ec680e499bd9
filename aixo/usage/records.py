"""Token-usage record contract and token-count extraction."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class UsageRecord:
    provider: str
    model: str
    tokens: int
    timestamp: datetime = field(default_factory=_utc_now)
    metadata: Any = None

    def __post_init__(self) -> None:
        if self.tokens < 0:
            raise ValueError("tokens must be >= 0")


@dataclass(frozen=True)
class UsageTotal:
    provider: str
    model: str
    tokens: int


def extract_token_count(raw_response: Any) -> int:
    """Return the token count reported in a raw provider response.

    Two shapes are probed, in order: nested `usage.total_tokens` (chat
    completion style) and flat `token_count`. Anything else yields 0.
    """
    if not isinstance(raw_response, dict):
        return 0

    usage = raw_response.get("usage")
    if isinstance(usage, dict) and usage.get("total_tokens") is not None:
        return _as_count(usage.get("total_tokens"))
    if raw_response.get("token_count") is not None:
        return _as_count(raw_response.get("token_count"))
    return 0


def _as_count(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0
