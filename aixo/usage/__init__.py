"""Token-usage accounting package.

Module split:
    - `records`: `UsageRecord`/`UsageTotal` contracts and token extraction.
    - `store`: `UsageStore` protocol and the SQLite `token_usage` table.
    - `recorder`: best-effort append used by the dispatcher.
"""

from .recorder import UsageRecorder
from .records import UsageRecord, UsageTotal, extract_token_count
from .store import SqliteUsageStore, UsageStore

__all__ = [
    "SqliteUsageStore",
    "UsageRecord",
    "UsageRecorder",
    "UsageStore",
    "UsageTotal",
    "extract_token_count",
]
