"""Aixo: uniform AI content generation for template authors.

Package layout:
    - `settings`: explicit configuration value (dotted keys, `.env` loading,
      credential lookup).
    - `providers`: one backend adapter per vendor plus the local stub.
    - `core`: provider registry and request dispatcher.
    - `usage`: token-usage records and their SQLite store.
    - `api`: presentation adapters (snippet entry point, dashboards, HTTP, CLI).
"""

from aixo.core.dispatcher import Dispatcher, create_dispatcher
from aixo.settings import Settings

__all__ = ["Dispatcher", "Settings", "create_dispatcher"]
