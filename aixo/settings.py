"""Provider/runtime configuration for Aixo.

Architectural role:
    Centralizes option lookup, vendor endpoints, and credential resolution for
    `aixo.core.dispatcher` and every provider in `aixo.providers`. A single
    `Settings` value is built at startup and passed into the dispatcher and each
    provider at construction time; nothing reads configuration ambiently.

Key format:
    Options use dotted keys (`aixo.default_provider`, `aixo.api_key_openai`, ...).
    `Settings.from_env` maps environment variables of the form `AIXO_<REST>` onto
    `aixo.<rest>` after loading a `.env` file.

Determinism:
    Deterministic for a fixed mapping. Environment variables and key files are
    read only by `Settings.from_env`, once, at construction.

Failure behavior:
    Missing or empty values resolve to the caller-supplied default. Unparseable
    numeric values are logged and replaced by the default.
"""

import logging
import os
from typing import Any, Mapping

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

ENV_PREFIX = "AIXO_"
KEY_PREFIX = "aixo."

DEFAULT_PROVIDER = "openai"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 256
DEFAULT_USAGE_DB = ".aixo/usage.sqlite"
DEFAULT_KEY_DIR = "config"

# Vendor endpoints consumed by `aixo.providers`.
OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
OPENAI_IMAGE_URL = "https://api.openai.com/v1/images/generations"
OPENAI_SPEECH_URL = "https://api.openai.com/v1/audio/speech"
HUGGINGFACE_URL_TEMPLATE = "https://api-inference.huggingface.co/models/{model}"

# Shared system instruction for chat-style text requests.
SYSTEM_MESSAGE = "You are a helpful assistant."

API_KEY_ENV_SUFFIX = "_API_KEY"
KEY_FILE_SUFFIX = ".key"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _credential_fallbacks(environ: Mapping[str, str], key_dir: str) -> dict:
    """Collect `aixo.api_key_<provider>` values from env vars and key files.

    `<PROVIDER>_API_KEY` variables take precedence over `<key_dir>/<provider>.key`.
    """
    found = {}
    if os.path.isdir(key_dir):
        for filename in sorted(os.listdir(key_dir)):
            if not filename.endswith(KEY_FILE_SUFFIX):
                continue
            value = load_key(os.path.join(key_dir, filename), environ)
            if value:
                found[filename[: -len(KEY_FILE_SUFFIX)].lower()] = value

    for name, value in environ.items():
        upper = name.upper()
        if upper.startswith(ENV_PREFIX) or not upper.endswith(API_KEY_ENV_SUFFIX):
            continue
        provider = upper[: -len(API_KEY_ENV_SUFFIX)].lower()
        if provider and value and value.strip():
            found[provider] = value.strip()

    return {f"{KEY_PREFIX}api_key_{provider}": value for provider, value in found.items()}


def load_key(path, environ=None):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/openai.key` -> `OPENAI_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Key file path or `None`.
        environ: Environment mapping; defaults to `os.environ`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing or unreadable file returns `None`.
    """
    if not path:
        return None
    if environ is None:
        environ = os.environ
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + API_KEY_ENV_SUFFIX
    env_value = (environ.get(key_name) or "").strip()
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read().strip() or None
    except OSError:
        logger.exception("Failed to read key file %s", path)
        return None


class Settings:
    """Immutable view over dotted configuration keys.

    Empty strings count as unset so template-style settings stores (which often
    persist blanks) fall back to defaults.
    """

    def __init__(self, values: Mapping[str, Any] | None = None):
        self._values = {str(k).lower(): v for k, v in (values or {}).items()}

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, dotenv: bool = True) -> "Settings":
        """Build settings from `AIXO_*` environment variables.

        Credential fallbacks (`<PROVIDER>_API_KEY` variables, then
        `<key_dir>/<provider>.key` files) are resolved here, once, and only
        fill `aixo.api_key_<provider>` keys that are not already set.

        Args:
            environ: Environment mapping; defaults to `os.environ`.
            dotenv: Whether to load a `.env` file first (only applies when
                `environ` is not supplied).

        Returns:
            New `Settings` instance.
        """
        if environ is None:
            if dotenv:
                load_dotenv()
            environ = os.environ

        values = {}
        for name, value in environ.items():
            if name.upper().startswith(ENV_PREFIX):
                values[KEY_PREFIX + name[len(ENV_PREFIX):].lower()] = value

        key_dir = values.get(KEY_PREFIX + "key_dir")
        if _is_blank(key_dir):
            key_dir = DEFAULT_KEY_DIR
        for key, value in _credential_fallbacks(environ, str(key_dir).strip()).items():
            if _is_blank(values.get(key)):
                values[key] = value
        return cls(values)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with `aixo.<name>` keys replaced."""
        values = dict(self._values)
        for name, value in overrides.items():
            values[KEY_PREFIX + name.lower()] = value
        return Settings(values)

    def get(self, key: str, default: Any = None) -> Any:
        value = self._values.get(key.lower())
        if value is None:
            return default
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return default
        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning("Setting %s=%r is not a number; using %s", key, value, default)
            return default

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(float(value))
        except (TypeError, ValueError):
            logger.warning("Setting %s=%r is not an integer; using %s", key, value, default)
            return default

    # -----------------------------------------------------------------
    # Named accessors for the recognized configuration surface
    # -----------------------------------------------------------------

    @property
    def debug(self) -> bool:
        return self.get_bool("aixo.debug")

    @property
    def default_provider(self) -> str:
        return str(self.get("aixo.default_provider", DEFAULT_PROVIDER)).lower()

    @property
    def default_temperature(self) -> float:
        return self.get_float("aixo.default_temperature", DEFAULT_TEMPERATURE)

    @property
    def max_tokens(self) -> int:
        return self.get_int("aixo.max_tokens", DEFAULT_MAX_TOKENS)

    @property
    def usage_db(self) -> str:
        return str(self.get("aixo.usage_db", DEFAULT_USAGE_DB))

    def default_model(self, provider_key: str | None = None, fallback: str = "") -> str:
        """Resolve a default model, preferring the provider-specific key."""
        if provider_key:
            specific = self.get(f"aixo.default_model_{provider_key.lower()}")
            if specific:
                return str(specific)
        return str(self.get("aixo.default_model", fallback))

    def api_key(self, provider_key: str) -> str | None:
        """Return the `aixo.api_key_<provider>` credential, if set.

        Environment and key-file fallbacks are folded in by `from_env`; this
        lookup never touches the process environment or the filesystem.
        """
        value = self.get(f"aixo.api_key_{provider_key.lower()}")
        return str(value) if value else None

    def timeouts(self, connect: float, read: float) -> tuple[float, float]:
        """Return `(connect, read)` timeouts, honoring setting overrides."""
        return (
            self.get_float("aixo.connect_timeout", connect),
            self.get_float("aixo.timeout", read),
        )
