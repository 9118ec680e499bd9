"""Template-snippet entry point.

Interface responsibilities:
    Turn loosely typed template properties (`prompt`, `task`, `provider`, plus
    task-specific fields) into a fully defaulted options mapping and call the
    dispatcher. Mirrors how a page template embeds a generation call.

Input validation behavior:
    - Missing or blank `prompt` returns an empty string without dispatching.
    - Unknown properties are passed through to the dispatcher untouched.

Response formatting:
    Returns the dispatcher's plain string (text, comma-joined image URLs, or an
    audio URL); failures render as an empty string.
"""

from typing import Any, Mapping

from aixo.core.dispatcher import Dispatcher
from aixo.core.options import TASK_IMAGE, TASK_TEXT, TASK_TTS, normalize_task
from aixo.settings import Settings

SNIPPET_IMAGE_MODEL = "dall-e-2"
SNIPPET_VOICE = "en-US"
SNIPPET_LANGUAGE = "en"


def _prop(properties: Mapping[str, Any], key: str, default: Any) -> Any:
    value = properties.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return value


def build_snippet_options(properties: Mapping[str, Any], settings: Settings) -> dict:
    """Build dispatcher options from snippet properties with settings fallbacks."""
    options = {k: v for k, v in properties.items() if k != "prompt"}

    task = normalize_task(_prop(properties, "task", TASK_TEXT))
    provider_key = str(_prop(properties, "provider", settings.default_provider)).lower()
    options["task"] = task
    options["provider"] = provider_key

    if task == TASK_TEXT:
        # Only the provider-specific setting applies here; otherwise the
        # provider's own default is used.
        model = _prop(properties, "model", settings.get(f"aixo.default_model_{provider_key}"))
        if model:
            options["model"] = model
        options["temperature"] = _prop(properties, "temperature", settings.default_temperature)
        options["max_tokens"] = _prop(properties, "max_tokens", settings.max_tokens)
    elif task == TASK_IMAGE:
        options["n"] = _prop(properties, "n", 1)
        options["size"] = _prop(properties, "size", "1024x1024")
        options["model"] = _prop(properties, "model", settings.get("aixo.default_image_model", SNIPPET_IMAGE_MODEL))
    elif task == TASK_TTS:
        options["voice"] = _prop(properties, "voice", settings.get("aixo.default_voice", SNIPPET_VOICE))
        options["language"] = _prop(properties, "language", settings.get("aixo.default_language", SNIPPET_LANGUAGE))

    return options


def run_snippet(dispatcher: Dispatcher, properties: Mapping[str, Any]) -> str:
    prompt = properties.get("prompt")
    if prompt is None or not str(prompt).strip():
        return ""
    options = build_snippet_options(properties, dispatcher.settings)
    return dispatcher.process(str(prompt), options)
