"""Request option contracts shared by the dispatcher and providers.

Architectural role:
    Defines the task vocabulary and the small coercion helpers that turn loosely
    typed caller options (template properties arrive as strings) into the values
    each provider puts on the wire.

Control-flow interaction:
    `Dispatcher.generate` normalizes `options["task"]` once via `normalize_task`
    before any provider sees the request; providers branch on the normalized value.

Determinism:
    Pure functions over their inputs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping


logger = logging.getLogger(__name__)

TASK_TEXT = "text"
TASK_IMAGE = "image"
TASK_TTS = "tts"

ALL_TASKS = frozenset({TASK_TEXT, TASK_IMAGE, TASK_TTS})

TASK_ALIASES = {
    "text": TASK_TEXT,
    "image": TASK_IMAGE,
    "tts": TASK_TTS,
    "text-to-speech": TASK_TTS,
}


@dataclass(frozen=True)
class ProviderDescriptor:
    """Display/lookup metadata for one registered provider.

    Attributes:
        key: Lowercase registry key, also the `provider` option value.
        display_name: Human-readable label.
        available: Result of the provider's cheap availability check.
    """

    key: str
    display_name: str
    available: bool


def normalize_task(value: Any) -> str:
    """Map a caller task value onto `text`, `image`, or `tts`.

    Matching is case-insensitive. Missing values mean `text`; unknown values are
    logged and also handled as `text`.
    """
    if value is None:
        return TASK_TEXT
    raw = str(value).strip().lower()
    if not raw:
        return TASK_TEXT
    task = TASK_ALIASES.get(raw)
    if task is None:
        logger.warning("Unknown task %r; handling as text", value)
        return TASK_TEXT
    return task


def option_str(options: Mapping[str, Any], key: str, default: str = "") -> str:
    value = options.get(key)
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def option_int(options: Mapping[str, Any], key: str, default: int) -> int:
    value = options.get(key)
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        logger.warning("Option %s=%r is not an integer; using %s", key, value, default)
        return default


def option_float(options: Mapping[str, Any], key: str, default: float) -> float:
    value = options.get(key)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Option %s=%r is not a number; using %s", key, value, default)
        return default
