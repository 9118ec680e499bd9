from aixo.core.options import TASK_TEXT
from aixo.providers.base import ProcessResult, Provider

DEFAULT_MODEL = "local"


class LocalProvider(Provider):
    """Placeholder backend: no network, always available, echoes the prompt."""

    key = "local"
    name = "Local AI (Placeholder)"
    vendor = "Local AI"
    requires_api_key = False

    def default_model(self, task: str = TASK_TEXT) -> str:
        return DEFAULT_MODEL

    def _process(self, prompt: str, task: str, options: dict) -> ProcessResult:
        model = str(options.get("model") or DEFAULT_MODEL)
        return ProcessResult(
            text=f'[Local AI placeholder] Response for: "{prompt}"',
            model=model,
        )
