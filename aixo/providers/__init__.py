"""Backend provider adapters.

Module split:
    - `base`: capability contract, `ProcessResult`, shared HTTP transport.
    - `openai`: text, image, and speech via the OpenAI API.
    - `huggingface`: text via the HuggingFace Inference API.
    - `local`: offline placeholder that echoes the prompt.
"""

from .base import ProcessResult, Provider, ProviderError
from .huggingface import HuggingFaceProvider
from .local import LocalProvider
from .openai import OpenAIProvider

# Fixed provider table; order is registration order.
PROVIDER_CLASSES = (OpenAIProvider, HuggingFaceProvider, LocalProvider)

__all__ = [
    "HuggingFaceProvider",
    "LocalProvider",
    "OpenAIProvider",
    "PROVIDER_CLASSES",
    "ProcessResult",
    "Provider",
    "ProviderError",
]
