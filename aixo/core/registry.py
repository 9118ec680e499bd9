"""Provider registry keyed by lowercase provider key.

Providers come from the fixed `PROVIDER_CLASSES` table; there is no runtime
class scanning. Registering a second provider under an existing key raises
`DuplicateProviderError` unless the caller opts into replacement.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from aixo.core.options import ProviderDescriptor
from aixo.providers import PROVIDER_CLASSES, Provider
from aixo.settings import Settings


class DuplicateProviderError(ValueError):
    pass


class ProviderRegistry:
    def __init__(self, providers: Iterable[Provider] = ()) -> None:
        self._providers: dict[str, Provider] = {}
        for provider in providers:
            self.register(provider)

    @classmethod
    def from_settings(cls, settings: Settings, provider_classes=PROVIDER_CLASSES) -> "ProviderRegistry":
        """Instantiate one provider per class with the shared settings."""
        return cls(provider_class(settings) for provider_class in provider_classes)

    def register(self, provider: Provider, replace: bool = False) -> None:
        key = provider.key.strip().lower()
        if not key:
            raise ValueError(f"Provider {type(provider).__name__} has an empty key")
        if key in self._providers and not replace:
            raise DuplicateProviderError(f"Provider key '{key}' is already registered")
        self._providers[key] = provider

    def get(self, name: str | None) -> Provider | None:
        if not name:
            return None
        return self._providers.get(name.strip().lower())

    def keys(self) -> list[str]:
        return list(self._providers)

    def items(self) -> list[tuple[str, Provider]]:
        return list(self._providers.items())

    def describe(self) -> list[ProviderDescriptor]:
        return [provider.describe() for provider in self._providers.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.strip().lower() in self._providers

    def __iter__(self) -> Iterator[Provider]:
        return iter(list(self._providers.values()))

    def __len__(self) -> int:
        return len(self._providers)
