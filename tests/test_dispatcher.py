from __future__ import annotations

import logging

import pytest

from aixo.core.dispatcher import Dispatcher, create_dispatcher
from aixo.core.registry import ProviderRegistry
from aixo.providers.base import ProcessResult
from aixo.providers.local import LocalProvider
from aixo.settings import Settings
from aixo.usage.records import UsageRecord
from aixo.usage.store import SqliteUsageStore

from .conftest import FakeHTTP, FakeResponse, RecordingProvider


def _chat_body(total_tokens: int = 42) -> dict:
    return {
        "choices": [{"message": {"content": "Generated"}}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 32, "total_tokens": total_tokens},
    }


@pytest.mark.parametrize("prompt", ["", "   ", "\n\t"])
def test_blank_prompt_never_invokes_provider(settings: Settings, prompt: str) -> None:
    provider = RecordingProvider(settings)
    dispatcher = Dispatcher(settings, registry=ProviderRegistry([provider]))

    assert dispatcher.process(prompt, {"provider": "recording"}) == ""
    assert dispatcher.generate(prompt, {"provider": "recording"}).error == ""
    assert provider.calls == []


def test_unknown_provider_returns_empty_without_usage(
    dispatcher: Dispatcher, usage_store: SqliteUsageStore, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.ERROR, logger="aixo.core.dispatcher"):
        assert dispatcher.process("hello", {"provider": "nope"}) == ""

    assert "not installed" in caplog.text
    assert usage_store.count() == 0


def test_unavailable_provider_makes_no_network_call(http: FakeHTTP, caplog: pytest.LogCaptureFixture) -> None:
    dispatcher = Dispatcher(Settings())

    with caplog.at_level(logging.ERROR, logger="aixo.core.dispatcher"):
        assert dispatcher.process("hello", {"provider": "openai"}) == ""

    assert http.calls == []
    assert "not configured" in caplog.text


def test_unsupported_task_is_refused(settings: Settings, http: FakeHTTP) -> None:
    dispatcher = Dispatcher(settings)

    result = dispatcher.generate("a cat", {"provider": "huggingface", "task": "image"})

    assert result.text == ""
    assert "does not support task 'image'" in result.error
    assert http.calls == []


def test_local_round_trip(settings: Settings) -> None:
    dispatcher = Dispatcher(settings)

    output = dispatcher.process("hello", {"provider": "local"})

    assert "hello" in output
    assert output == dispatcher.process("hello", {"provider": "LOCAL"})


def test_provider_defaults_to_settings_then_openai(settings: Settings, http: FakeHTTP) -> None:
    local_default = Dispatcher(settings.with_overrides(default_provider="local"))
    assert "hi" in local_default.process("hi")

    http.queue(FakeResponse(200, _chat_body()))
    assert Dispatcher(settings).process("hi") == "Generated"
    assert http.calls[0]["url"].startswith("https://api.openai.com/")


def test_text_usage_is_recorded(dispatcher: Dispatcher, usage_store: SqliteUsageStore, http: FakeHTTP) -> None:
    http.queue(FakeResponse(200, _chat_body(42)))

    output = dispatcher.process("hello", {"provider": "openai", "model": "gpt-4", "metadata": {"page": 7}})

    assert output == "Generated"
    assert usage_store.count() == 1
    record = usage_store.latest()
    assert record is not None
    assert record.provider == "openai"
    assert record.model == "gpt-4"
    assert record.tokens == 42
    assert record.metadata == '{"page": 7}'


def test_text_usage_records_resolved_default_model(
    dispatcher: Dispatcher, usage_store: SqliteUsageStore, http: FakeHTTP
) -> None:
    http.queue(FakeResponse(200, _chat_body(5)))

    dispatcher.process("hello")

    assert usage_store.latest().model == "gpt-3.5-turbo"
    payload = http.calls[0]["json"]
    assert payload["model"] == "gpt-3.5-turbo"
    assert payload["temperature"] == 0.7


def test_flat_token_count_is_recorded(dispatcher: Dispatcher, usage_store: SqliteUsageStore, http: FakeHTTP) -> None:
    http.queue(FakeResponse(200, [{"generated_text": "x"}]))
    dispatcher.process("hello", {"provider": "huggingface"})
    assert usage_store.count() == 0

    settings = dispatcher.settings
    provider = RecordingProvider(settings, ProcessResult(text="ok", raw_response={"token_count": 9}, model="m"))
    Dispatcher(settings, ProviderRegistry([provider]), usage_store).process("hi", {"provider": "recording"})

    assert usage_store.latest().tokens == 9


def test_image_task_never_records_usage(dispatcher: Dispatcher, usage_store: SqliteUsageStore, http: FakeHTTP) -> None:
    body = {"data": [{"url": "https://img/1"}, {"url": "https://img/2"}], "usage": {"total_tokens": 42}}
    http.queue(FakeResponse(200, body))

    output = dispatcher.process("a cat", {"provider": "openai", "task": "image", "n": 2})

    assert output == "https://img/1, https://img/2"
    assert usage_store.count() == 0


def test_zero_tokens_are_not_recorded(settings: Settings, usage_store: SqliteUsageStore) -> None:
    provider = RecordingProvider(settings, ProcessResult(text="ok", raw_response={"usage": {"total_tokens": 0}}))
    dispatcher = Dispatcher(settings, ProviderRegistry([provider]), usage_store)

    dispatcher.process("hi", {"provider": "recording"})

    assert usage_store.count() == 0


def test_http_500_yields_empty_output_and_logged_error(
    dispatcher: Dispatcher, http: FakeHTTP, caplog: pytest.LogCaptureFixture
) -> None:
    http.queue(FakeResponse(500, text="server error"))

    with caplog.at_level(logging.ERROR, logger="aixo.core.dispatcher"):
        result = dispatcher.generate("hello", {"provider": "openai"})

    assert result.text == ""
    assert "500" in result.error
    assert "500" in dispatcher.get_provider("openai").get_last_error()
    assert "HTTP 500" in caplog.text


def test_unexpected_provider_exception_is_contained(settings: Settings, caplog: pytest.LogCaptureFixture) -> None:
    class ExplodingProvider(LocalProvider):
        def _process(self, prompt, task, options):
            raise KeyError("surprise")

    dispatcher = Dispatcher(settings, ProviderRegistry([ExplodingProvider(settings)]))

    with caplog.at_level(logging.ERROR, logger="aixo.core.dispatcher"):
        assert dispatcher.process("hello", {"provider": "local"}) == ""

    assert "Exception in provider 'local'" in caplog.text


def test_usage_store_failure_does_not_fail_call(settings: Settings, caplog: pytest.LogCaptureFixture) -> None:
    class BrokenStore:
        def append(self, record: UsageRecord) -> None:
            raise RuntimeError("disk full")

        def latest(self):
            return None

        def totals(self):
            return []

    provider = RecordingProvider(settings, ProcessResult(text="ok", raw_response={"usage": {"total_tokens": 3}}))
    dispatcher = Dispatcher(settings, ProviderRegistry([provider]), BrokenStore())

    with caplog.at_level(logging.ERROR):
        assert dispatcher.process("hi", {"provider": "recording"}) == "ok"

    assert "Failed to persist token usage" in caplog.text


def test_text_defaults_fill_missing_options_only(settings: Settings) -> None:
    provider = RecordingProvider(settings)
    dispatcher = Dispatcher(
        settings.with_overrides(default_temperature="0.3", default_model="gpt-4"),
        ProviderRegistry([provider]),
    )

    dispatcher.process("a", {"provider": "recording"})
    dispatcher.process("b", {"provider": "recording", "model": "custom", "temperature": 0})
    dispatcher.process("c", {"provider": "recording", "task": "Image"})

    first, second, third = (options for _, options in provider.calls)
    assert first["model"] == "gpt-4"
    assert first["temperature"] == 0.3
    assert second["model"] == "custom"
    assert second["temperature"] == 0
    assert third["task"] == "image"
    assert "temperature" not in third


def test_text_model_left_unset_without_any_default(settings: Settings) -> None:
    provider = RecordingProvider(settings)

    Dispatcher(settings, ProviderRegistry([provider])).process("a", {"provider": "recording", "model": " "})

    _, options = provider.calls[0]
    assert "model" not in options


def test_failed_call_with_usage_is_not_recorded(
    dispatcher: Dispatcher, usage_store: SqliteUsageStore, http: FakeHTTP
) -> None:
    http.queue(
        FakeResponse(200, {"error": {"message": "quota exceeded"}, "usage": {"total_tokens": 30}}),
        FakeResponse(200, {"choices": [], "usage": {"total_tokens": 12}}),
    )

    assert dispatcher.process("hello", {"provider": "openai"}) == ""
    assert dispatcher.process("hello", {"provider": "openai"}) == ""

    assert usage_store.count() == 0


def test_caller_options_are_not_mutated(settings: Settings) -> None:
    options = {"provider": "local"}

    Dispatcher(settings).process("hello", options)

    assert options == {"provider": "local"}


def test_debug_mode_logs_request_and_response(settings: Settings, caplog: pytest.LogCaptureFixture) -> None:
    dispatcher = Dispatcher(settings.with_overrides(debug="1"))

    with caplog.at_level(logging.INFO, logger="aixo.core.dispatcher"):
        dispatcher.process("hello", {"provider": "local"})

    assert "Request to provider 'local'" in caplog.text
    assert "Response from 'local'" in caplog.text


def test_create_dispatcher_uses_sqlite_store_from_settings(tmp_path) -> None:
    db_path = tmp_path / "nested" / "usage.sqlite"
    dispatcher = create_dispatcher(Settings({"aixo.usage_db": str(db_path)}))

    assert isinstance(dispatcher.usage_store, SqliteUsageStore)
    assert dispatcher.usage_store.db_path == db_path
    assert set(dispatcher.get_providers()) == {"openai", "huggingface", "local"}
