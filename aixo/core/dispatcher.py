"""Request dispatcher: resolve provider, merge defaults, invoke, account usage.

Architectural role:
    The single entrypoint that presentation adapters (snippet, HTTP API, CLI)
    call to turn `(prompt, options)` into output text. It sits between those
    adapters and the provider adapters in `aixo.providers`.

Control-flow model:
    1. Reject blank prompts silently.
    2. Resolve the provider key (`options.provider` -> settings -> "openai").
    3. Refuse unknown, unconfigured, or task-incompatible providers.
    4. Text task: fill missing `model` (provider default, then settings) and
       `temperature` defaults.
    5. Invoke `provider.process` behind a catch-all guard.
    6. Log provider errors; successful text task: record token usage when
       reported. Failed calls are never counted.

Error handling strategy:
    `process` never raises. Every failure becomes an empty string plus a log
    line, so an embedding template renders nothing instead of breaking. This is
    the only layer that logs provider diagnostics.

Side effects:
    - Emits log records on `aixo.core.dispatcher`.
    - Appends rows through the configured usage store (best-effort).
"""

import logging
from typing import Any

from aixo.core.options import TASK_TEXT, ProviderDescriptor, normalize_task
from aixo.core.registry import ProviderRegistry
from aixo.providers.base import ProcessResult, Provider
from aixo.settings import Settings
from aixo.usage.recorder import UsageRecorder
from aixo.usage.store import SqliteUsageStore, UsageStore


logger = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class Dispatcher:
    """Route generation requests to providers with uniform failure handling."""

    def __init__(
        self,
        settings: Settings,
        registry: ProviderRegistry | None = None,
        usage_store: UsageStore | None = None,
    ) -> None:
        self.settings = settings
        self.registry = registry if registry is not None else ProviderRegistry.from_settings(settings)
        self.usage_store = usage_store
        self.recorder = UsageRecorder(usage_store)

    @property
    def debug(self) -> bool:
        return self.settings.debug

    def get_provider(self, name: str) -> Provider | None:
        return self.registry.get(name)

    def get_providers(self) -> dict[str, Provider]:
        return dict(self.registry.items())

    def describe_providers(self) -> list[ProviderDescriptor]:
        return self.registry.describe()

    def process(self, prompt: str, options: dict | None = None) -> str:
        """Generate output for `prompt`; return an empty string on any failure."""
        return self.generate(prompt, options).text

    def generate(self, prompt: str, options: dict | None = None) -> ProcessResult:
        """Generate output for `prompt` and return the full result/error pair.

        Args:
            prompt: Prompt text; blank prompts are rejected without an error.
            options: Request options; see `aixo.core.options` for the task
                vocabulary. The caller's mapping is not mutated.

        Returns:
            `ProcessResult`. `text` is empty whenever anything failed; `error`
            carries the diagnostic for configuration and provider failures.
        """
        if prompt is None or not str(prompt).strip():
            return ProcessResult()
        prompt = str(prompt)

        options = dict(options or {})
        task = normalize_task(options.get("task"))
        options["task"] = task

        provider_key = str(options.get("provider") or self.settings.default_provider).strip().lower()
        provider = self.registry.get(provider_key)
        if provider is None:
            message = f"Provider '{provider_key}' is not available (not installed)."
            logger.error("[Aixo] %s", message)
            return ProcessResult(error=message)

        if not provider.is_available():
            message = f"Provider '{provider_key}' is not configured or available."
            logger.error("[Aixo] %s", message)
            return ProcessResult(error=message)

        if not provider.supports(task):
            message = f"Provider '{provider_key}' does not support task '{task}'."
            logger.error("[Aixo] %s", message)
            return ProcessResult(error=message)

        if task == TASK_TEXT:
            if _is_missing(options.get("model")):
                model = provider.default_model(task) or self.settings.default_model(provider_key)
                if model:
                    options["model"] = model
                else:
                    options.pop("model", None)
            if _is_missing(options.get("temperature")):
                options["temperature"] = self.settings.default_temperature

        if self.debug:
            logger.info("[Aixo] Request to provider '%s' with prompt: %s", provider_key, prompt)
            logger.info("[Aixo] Options: %r", options)

        try:
            result = provider.process(prompt, options)
        except Exception as exc:
            logger.exception("[Aixo] Exception in provider '%s'", provider_key)
            result = ProcessResult(error=f"Unexpected error in provider '{provider_key}': {exc}")

        if result.error:
            logger.error("[Aixo] Error from provider '%s': %s", provider_key, result.error)
        elif not result.text:
            logger.warning("[Aixo] Provider '%s' returned an empty response", provider_key)
        elif self.debug:
            logger.info("[Aixo] Response from '%s': %s", provider_key, result.text)

        if task == TASK_TEXT and result.ok and result.raw_response is not None:
            self.recorder.record_response(
                provider=provider_key,
                model=result.model or options.get("model"),
                raw_response=result.raw_response,
                metadata=options.get("metadata"),
            )

        return result


def create_dispatcher(settings: Settings | None = None, usage_store: UsageStore | None = None) -> Dispatcher:
    """Build a dispatcher with the default provider table and SQLite usage store.

    Args:
        settings: Explicit settings; defaults to `Settings.from_env()`.
        usage_store: Usage store; defaults to `SqliteUsageStore(settings.usage_db)`.
    """
    if settings is None:
        settings = Settings.from_env()
    if usage_store is None:
        usage_store = SqliteUsageStore(settings.usage_db)
    return Dispatcher(settings, usage_store=usage_store)
