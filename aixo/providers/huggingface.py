"""HuggingFace Inference API provider (text only).

Processing flow:
    `POST https://api-inference.huggingface.co/models/{model}` with
    `{"inputs": prompt}`; the generated text is read from either the list shape
    (`[0].generated_text`) or the flat shape (`generated_text`).

Model resolution:
    `options.model` -> `aixo.default_model_huggingface` -> `gpt2`. The global
    `aixo.default_model` is not consulted.
"""

from aixo.core.options import TASK_TEXT, option_str
from aixo.providers.base import ProcessResult, Provider, ProviderConfigError, ProviderResponseError, vendor_error_message
from aixo.settings import HUGGINGFACE_URL_TEMPLATE

DEFAULT_MODEL = "gpt2"


class HuggingFaceProvider(Provider):
    key = "huggingface"
    name = "HuggingFace API"
    vendor = "HuggingFace"
    tasks = frozenset({TASK_TEXT})
    connect_timeout = 8.0
    read_timeout = 15.0

    def default_model(self, task: str = TASK_TEXT) -> str:
        return str(self.settings.get(f"aixo.default_model_{self.key}", DEFAULT_MODEL))

    def _process(self, prompt: str, task: str, options: dict) -> ProcessResult:
        api_key = self._require_api_key()

        model = option_str(options, "model") or self.default_model(task)
        if not model:
            raise ProviderConfigError("No model specified for HuggingFace")

        url = HUGGINGFACE_URL_TEMPLATE.format(model=model)
        data = self._post_json(url, {"inputs": prompt}, api_key)

        message = vendor_error_message(data)
        if message is not None:
            raise ProviderResponseError(f"{self.vendor} error: {message}", data)

        text = None
        if isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
        elif isinstance(data, dict):
            text = data.get("generated_text")

        if text is None:
            raise ProviderResponseError("No generated text found in HuggingFace response", data)

        return ProcessResult(text=str(text), raw_response=data, model=model)
