"""OpenAI-hosted provider for text, image, and speech generation.

Processing flow:
    1. Resolve the API key from `Settings` (missing key -> config error).
    2. Branch on the normalized task (`text`, `image`, `tts`).
    3. Build the vendor payload from options with settings/hard-coded fallbacks.
    4. Submit one JSON POST via `Provider._post_json`.
    5. Extract the completion text, image URLs, or audio URL.

Parameter handling:
    - text: `temperature`/`max_tokens` are attached only for models on
      `SAMPLING_MODELS`; other models get the bare chat payload.
    - image: `n` is clamped to at least 1; `model` is sent only when non-empty.
    - tts: `language` is accepted but not forwarded.

Error handling strategy:
    Vendor error payloads raise `ProviderResponseError`. Image errors that
    mention "size" are rewritten into an actionable message about unsupported
    size/model combinations.
"""

import logging

from aixo.core.options import TASK_IMAGE, TASK_TEXT, TASK_TTS, option_float, option_int, option_str
from aixo.providers.base import ProcessResult, Provider, ProviderResponseError, vendor_error_message
from aixo.settings import (
    OPENAI_CHAT_URL,
    OPENAI_IMAGE_URL,
    OPENAI_SPEECH_URL,
    SYSTEM_MESSAGE,
)


logger = logging.getLogger(__name__)

DEFAULT_TEXT_MODEL = "gpt-3.5-turbo"
DEFAULT_IMAGE_MODEL = "dall-e-2"
DEFAULT_TTS_MODEL = "tts-1"
DEFAULT_VOICE = "nova"
DEFAULT_IMAGE_SIZE = "1024x1024"

# Models that accept temperature/max_tokens on the chat endpoint.
SAMPLING_MODELS = ("gpt-3.5-turbo", "gpt-4", "davinci")

IMAGE_SIZE_ERROR = (
    "Image generation error: The provided image size is not supported by the "
    "selected model. Please adjust the size parameter."
)


def supports_sampling(model: str) -> bool:
    return model.lower() in {m.lower() for m in SAMPLING_MODELS}


class OpenAIProvider(Provider):
    key = "openai"
    name = "OpenAI API"
    vendor = "OpenAI"
    connect_timeout = 8.0
    read_timeout = 30.0

    def default_model(self, task: str = TASK_TEXT) -> str:
        if task == TASK_IMAGE:
            return str(self.settings.get("aixo.default_image_model", DEFAULT_IMAGE_MODEL))
        if task == TASK_TTS:
            return str(self.settings.get("aixo.default_tts_model", DEFAULT_TTS_MODEL))
        return self.settings.default_model(self.key, DEFAULT_TEXT_MODEL)

    def _process(self, prompt: str, task: str, options: dict) -> ProcessResult:
        api_key = self._require_api_key()
        if task == TASK_IMAGE:
            return self._process_image(prompt, options, api_key)
        if task == TASK_TTS:
            return self._process_tts(prompt, options, api_key)
        return self._process_text(prompt, options, api_key)

    def _process_text(self, prompt: str, options: dict, api_key: str) -> ProcessResult:
        model = option_str(options, "model") or self.default_model(TASK_TEXT)

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
        }

        if supports_sampling(model):
            payload["max_tokens"] = option_int(options, "max_tokens", self.settings.max_tokens)
            payload["temperature"] = option_float(options, "temperature", self.settings.default_temperature)
        else:
            logger.info("Model '%s' does not support max_tokens/temperature; omitting them.", model)

        data = self._post_json(OPENAI_CHAT_URL, payload, api_key)
        self._raise_vendor_error(data)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if content is None:
            raise ProviderResponseError("No completion message found in response", data)

        return ProcessResult(text=str(content), raw_response=data, model=model)

    def _process_image(self, prompt: str, options: dict, api_key: str) -> ProcessResult:
        model = option_str(options, "model") or self.default_model(TASK_IMAGE)

        payload = {
            "prompt": prompt,
            "n": max(1, option_int(options, "n", 1)),
            "size": option_str(options, "size", DEFAULT_IMAGE_SIZE),
        }
        if model:
            payload["model"] = model

        data = self._post_json(OPENAI_IMAGE_URL, payload, api_key)

        message = vendor_error_message(data)
        if message is not None:
            if "size" in message.lower():
                raise ProviderResponseError(IMAGE_SIZE_ERROR, data)
            raise ProviderResponseError(f"{self.vendor} error: {message}", data)

        items = data.get("data") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ProviderResponseError("No image data found in response", data)

        urls = [item["url"] for item in items if isinstance(item, dict) and item.get("url")]
        if not urls:
            raise ProviderResponseError("No image URLs found in response", data)

        return ProcessResult(text=", ".join(urls), raw_response=data, model=model)

    def _process_tts(self, prompt: str, options: dict, api_key: str) -> ProcessResult:
        model = option_str(options, "model") or self.default_model(TASK_TTS)
        voice = option_str(options, "voice") or str(self.settings.get("aixo.default_voice", DEFAULT_VOICE))

        payload = {
            "model": model,
            "input": prompt,
            "voice": voice,
        }

        data = self._post_json(OPENAI_SPEECH_URL, payload, api_key)
        self._raise_vendor_error(data)

        audio_url = data.get("audio_url") if isinstance(data, dict) else None
        if not audio_url:
            raise ProviderResponseError("No audio URL found in TTS response", data)

        return ProcessResult(text=str(audio_url), raw_response=data, model=model)

    def _raise_vendor_error(self, data) -> None:
        message = vendor_error_message(data)
        if message is not None:
            raise ProviderResponseError(f"{self.vendor} error: {message}", data)
