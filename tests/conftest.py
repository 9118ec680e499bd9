from __future__ import annotations

import json
from pathlib import Path

import pytest
import requests

from aixo.core.dispatcher import Dispatcher
from aixo.core.options import ALL_TASKS
from aixo.providers.base import ProcessResult, Provider
from aixo.settings import Settings
from aixo.usage.store import SqliteUsageStore


class FakeResponse:
    def __init__(self, status_code: int = 200, body: object = None, text: str | None = None) -> None:
        self.status_code = status_code
        self.text = text if text is not None else json.dumps(body)

    def json(self) -> object:
        return json.loads(self.text)


class FakeHTTP:
    """Stands in for `requests.post`; replays queued responses or exceptions."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.responses: list[object] = []

    def queue(self, *items: object) -> None:
        self.responses.extend(items)

    def post(self, url: str, **kwargs: object) -> FakeResponse:
        self.calls.append({"url": url, **kwargs})
        item = self.responses.pop(0) if self.responses else FakeResponse(200, {})
        if isinstance(item, Exception):
            raise item
        return item


class RecordingProvider(Provider):
    key = "recording"
    name = "Recording Provider"
    vendor = "Recording"
    requires_api_key = False
    tasks = ALL_TASKS

    def __init__(self, settings: Settings, response: ProcessResult | None = None, available: bool = True) -> None:
        super().__init__(settings)
        self.response = response or ProcessResult(text="ok", model="rec-1")
        self.available = available
        self.calls: list[tuple[str, dict]] = []

    def is_available(self) -> bool:
        return self.available

    def _process(self, prompt: str, task: str, options: dict) -> ProcessResult:
        self.calls.append((prompt, options))
        return self.response


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch) -> FakeHTTP:
    fake = FakeHTTP()
    monkeypatch.setattr(requests, "post", fake.post)
    return fake


@pytest.fixture
def settings() -> Settings:
    return Settings(
        {
            "aixo.api_key_openai": "sk-test",
            "aixo.api_key_huggingface": "hf-test",
        }
    )


@pytest.fixture
def usage_store(tmp_path: Path) -> SqliteUsageStore:
    return SqliteUsageStore(tmp_path / "usage.sqlite")


@pytest.fixture
def dispatcher(settings: Settings, usage_store: SqliteUsageStore) -> Dispatcher:
    return Dispatcher(settings, usage_store=usage_store)
