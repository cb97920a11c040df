"""Provider adapters and the model-to-provider registry."""

from __future__ import annotations

from .anthropic import AnthropicAdapter
from .base import ProviderAdapter
from .google import GoogleAdapter
from .openai import OpenAIAdapter
from .registry import ProviderRegistry

__all__ = [
    "AnthropicAdapter",
    "GoogleAdapter",
    "OpenAIAdapter",
    "ProviderAdapter",
    "ProviderRegistry",
]
