"""Append-only usage accounting for text generations.

Used for reporting only; never for admission control. Persistence failures are
logged and swallowed so accounting can never fail a generation call.
"""

from __future__ import annotations

import logging
from typing import Any

from .records import UsageRecord, extract_token_count
from .store import UsageStore


logger = logging.getLogger(__name__)


class UsageRecorder:
    def __init__(self, store: UsageStore | None) -> None:
        self.store = store

    def record_response(
        self,
        provider: str,
        model: str | None,
        raw_response: Any,
        metadata: Any = None,
    ) -> UsageRecord | None:
        """Persist a usage row when `raw_response` reports a positive token count.

        Returns:
            The persisted record, or `None` when nothing was recorded (no store,
            no token count, or a storage failure).
        """
        if self.store is None:
            return None

        tokens = extract_token_count(raw_response)
        if tokens <= 0:
            return None

        record = UsageRecord(
            provider=provider,
            model=model or "unknown",
            tokens=tokens,
            metadata=metadata,
        )
        try:
            self.store.append(record)
        except Exception:
            logger.exception("Failed to persist token usage for provider=%s model=%s", provider, record.model)
            return None
        return record
