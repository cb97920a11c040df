from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..exceptions import UnknownModelError
from .anthropic import ANTHROPIC_ENDPOINT, DEFAULT_ANTHROPIC_VERSION, AnthropicAdapter
from .base import DEFAULT_MAX_TOKENS, ProviderAdapter
from .google import GOOGLE_ENDPOINT_BASE, GoogleAdapter
from .openai import OPENAI_ENDPOINT, OpenAIAdapter


class ProviderRegistry:
    def __init__(self) -> None:
        self._adapters: list[ProviderAdapter] = []

    def register(self, adapter: ProviderAdapter) -> None:
        if any(existing.id == adapter.id for existing in self._adapters):
            raise ValueError(f"Provider {adapter.id!r} is already registered.")
        self._adapters.append(adapter)

    def get(self, provider_id: str) -> ProviderAdapter | None:
        for adapter in self._adapters:
            if adapter.id == provider_id:
                return adapter
        return None

    def resolve(self, model_id: str) -> ProviderAdapter:
        """Return the adapter owning ``model_id``; registration order breaks ties."""
        for adapter in self._adapters:
            if adapter.owns(model_id):
                return adapter
        raise UnknownModelError(f"No provider found for model {model_id!r}.")

    def model_choices(self) -> list[tuple[str, str]]:
        """Return ``(label, model_id)`` pairs in registry order for pickers."""
        return [
            (f"{adapter.display_name} · {model_id}", model_id)
            for adapter in self._adapters
            for model_id in adapter.model_options
        ]

    @classmethod
    def build_default(cls, settings: Mapping[str, Any] | None = None) -> ProviderRegistry:
        options = dict(settings or {})
        max_tokens = int(options.get("max_tokens", DEFAULT_MAX_TOKENS))
        reg = cls()
        # Priority order: OpenAI, Anthropic, Google.
        reg.register(
            OpenAIAdapter(
                endpoint=str(options.get("openai_endpoint", OPENAI_ENDPOINT)),
                max_tokens=max_tokens,
            )
        )
        reg.register(
            AnthropicAdapter(
                endpoint=str(options.get("anthropic_endpoint", ANTHROPIC_ENDPOINT)),
                max_tokens=max_tokens,
                api_version=str(
                    options.get("anthropic_version", DEFAULT_ANTHROPIC_VERSION)
                ),
            )
        )
        reg.register(
            GoogleAdapter(
                endpoint_base=str(
                    options.get("google_endpoint_base", GOOGLE_ENDPOINT_BASE)
                )
            )
        )
        return reg
