"""Provider capability contract and shared HTTP transport.

Architectural role:
    Every backend adapter subclasses `Provider`. The base class owns the pieces
    that must behave identically across vendors:

    - per-call error reset and capture (`process` -> `ProcessResult`),
    - one JSON POST with bearer auth and split connect/read timeouts,
    - classification of transport, HTTP-status, and payload failures.

Model invocation flow:
    `Dispatcher.generate` -> `Provider.process(prompt, options)` ->
    subclass `_process(...)` -> `_post_json(...)` -> parsed payload -> extracted
    text/URL string.

Retry behavior:
    No retry loop is implemented. Each `process` call performs at most one HTTP
    request.

Failure handling model:
    Subclasses raise `ProviderError` subclasses; `process` converts them into
    `ProcessResult.error` so nothing propagates past the provider boundary for
    expected failures. Unexpected exceptions are left to the dispatcher's
    catch-all.

Concurrency:
    Instances are shared and long-lived. `process` returns its result/error pair
    directly; the `get_last_error` mirror is stored in `threading.local` so one
    caller never observes another caller's error.
"""

import threading
from dataclasses import dataclass
from typing import Any

import requests

from aixo.core.options import ALL_TASKS, TASK_TEXT, ProviderDescriptor, normalize_task
from aixo.settings import Settings


@dataclass(slots=True)
class ProcessResult:
    text: str = ""
    raw_response: Any = None
    error: str = ""
    model: str | None = None

    @property
    def ok(self) -> bool:
        return not self.error


class ProviderError(RuntimeError):
    """Expected provider failure; `str(exc)` is the operator diagnostic."""

    def __init__(self, message: str, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class ProviderConfigError(ProviderError):
    pass


class ProviderTransportError(ProviderError):
    pass


class ProviderHTTPError(ProviderError):
    def __init__(self, provider_name: str, status_code: int, response_body: str) -> None:
        super().__init__(f"{provider_name} error (HTTP {status_code}): {response_body}")
        self.status_code = status_code
        self.response_body = response_body


class ProviderResponseError(ProviderError):
    pass


class Provider:
    """Base class for one vendor backend.

    Subclasses set `key`, `name`, `vendor`, and `tasks`, and implement
    `_process`.
    """

    key = ""
    name = ""
    vendor = ""
    tasks = ALL_TASKS
    requires_api_key = True
    connect_timeout = 8.0
    read_timeout = 30.0

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._state = threading.local()

    # -----------------------------------------------------------------
    # Capability interface
    # -----------------------------------------------------------------

    def is_available(self) -> bool:
        """Cheap configuration check; never performs network I/O."""
        if not self.requires_api_key:
            return True
        return bool(self.api_key())

    def supports(self, task: str) -> bool:
        return normalize_task(task) in self.tasks

    def default_model(self, task: str = TASK_TEXT) -> str:
        return self.settings.default_model(self.key)

    def describe(self) -> ProviderDescriptor:
        return ProviderDescriptor(key=self.key, display_name=self.name, available=self.is_available())

    def get_last_error(self) -> str:
        return getattr(self._state, "last_error", "")

    def get_last_raw_response(self) -> Any:
        return getattr(self._state, "last_raw_response", None)

    def process(self, prompt: str, options: dict | None = None) -> ProcessResult:
        """Run one task-appropriate request and return its result/error pair.

        Args:
            prompt: User prompt or text to synthesize.
            options: Request options (`task` plus task-specific fields).

        Returns:
            `ProcessResult` with `text` on success, or empty `text` and a
            non-empty `error` on any expected failure.
        """
        options = dict(options or {})
        self._state.last_error = ""
        self._state.last_raw_response = None

        task = normalize_task(options.get("task"))
        try:
            result = self._process(prompt, task, options)
        except ProviderError as exc:
            result = ProcessResult(raw_response=exc.payload, error=str(exc))

        self._state.last_error = result.error
        self._state.last_raw_response = result.raw_response
        return result

    def _process(self, prompt: str, task: str, options: dict) -> ProcessResult:
        raise NotImplementedError

    # -----------------------------------------------------------------
    # Shared transport helpers
    # -----------------------------------------------------------------

    def api_key(self) -> str | None:
        return self.settings.api_key(self.key)

    def _require_api_key(self) -> str:
        api_key = self.api_key()
        if not api_key:
            raise ProviderConfigError(f"Missing {self.vendor} API key")
        return api_key

    def _post_json(self, url: str, payload: dict, api_key: str) -> Any:
        """POST `payload` as JSON and return the decoded response body.

        Failure scenarios:
            - Timeout -> `ProviderTransportError` ("timed out").
            - Connection/other transport error -> `ProviderTransportError`.
            - Status other than 200 -> `ProviderHTTPError` with raw body.
            - Unparseable or empty body -> `ProviderResponseError`.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        timeout = self.settings.timeouts(self.connect_timeout, self.read_timeout)

        try:
            response = requests.post(url, json=payload, headers=headers, timeout=timeout)
        except requests.exceptions.Timeout as err:
            raise ProviderTransportError(f"Request to {self.name} timed out: {err}") from err
        except requests.exceptions.RequestException as err:
            raise ProviderTransportError(f"Connection error: {err}") from err

        if response.status_code != 200:
            raise ProviderHTTPError(self.name, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as err:
            raise ProviderResponseError(f"Invalid JSON response from {self.vendor}") from err

        if not data:
            raise ProviderResponseError(f"Invalid JSON response from {self.vendor}")
        return data


def vendor_error_message(data: Any) -> str | None:
    """Return the vendor-reported error message in `data`, if any.

    Handles both `{"error": {"message": ...}}` and `{"error": "..."}` shapes.
    """
    if not isinstance(data, dict):
        return None
    error = data.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        return str(error.get("message") or "Unknown error")
    return str(error)
