from __future__ import annotations

from aixo.providers.huggingface import HuggingFaceProvider
from aixo.settings import Settings

from .conftest import FakeHTTP, FakeResponse


def test_generated_text_from_list_shape(settings: Settings, http: FakeHTTP) -> None:
    http.queue(FakeResponse(200, [{"generated_text": "Once upon a time"}]))

    result = HuggingFaceProvider(settings).process("Once")

    assert result.text == "Once upon a time"
    assert result.model == "gpt2"
    call = http.calls[0]
    assert call["url"] == "https://api-inference.huggingface.co/models/gpt2"
    assert call["json"] == {"inputs": "Once"}
    assert call["headers"]["Authorization"] == "Bearer hf-test"
    assert call["timeout"] == (8.0, 15.0)


def test_generated_text_from_flat_shape_with_configured_model(http: FakeHTTP) -> None:
    http.queue(FakeResponse(200, {"generated_text": "flat", "token_count": 7}))
    settings = Settings({"aixo.api_key_huggingface": "hf", "aixo.default_model_huggingface": "distilgpt2"})

    result = HuggingFaceProvider(settings).process("x")

    assert result.text == "flat"
    assert http.calls[0]["url"].endswith("/models/distilgpt2")


def test_vendor_error_string(settings: Settings, http: FakeHTTP) -> None:
    http.queue(FakeResponse(200, {"error": "Model gpt2 is currently loading"}))

    result = HuggingFaceProvider(settings).process("x")

    assert result.error == "HuggingFace error: Model gpt2 is currently loading"


def test_missing_generated_text(settings: Settings, http: FakeHTTP) -> None:
    http.queue(FakeResponse(200, [{"summary_text": "nope"}]))

    result = HuggingFaceProvider(settings).process("x")

    assert result.error == "No generated text found in HuggingFace response"


def test_http_error_uses_display_name(settings: Settings, http: FakeHTTP) -> None:
    http.queue(FakeResponse(503, text="busy"))

    result = HuggingFaceProvider(settings).process("x")

    assert result.error == "HuggingFace API error (HTTP 503): busy"


def test_supports_text_only(settings: Settings) -> None:
    provider = HuggingFaceProvider(settings)

    assert provider.supports("text")
    assert not provider.supports("image")
    assert not provider.supports("tts")
