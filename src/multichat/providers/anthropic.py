"""Anthropic messages adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..attachments import Attachment
from ..exceptions import ProviderError, ResponseParseError
from ..messages import Message
from .base import DEFAULT_MAX_TOKENS, ProviderAdapter

ANTHROPIC_ENDPOINT = "https://api.anthropic.com/v1/messages"
DEFAULT_ANTHROPIC_VERSION = "2023-06-01"


class AnthropicAdapter(ProviderAdapter):
    """Single-turn framing: only the last message of the history is sent."""

    id = "anthropic"
    display_name = "Anthropic"
    prefixes = ("claude",)
    model_options = ("claude-2", "claude-3-5-sonnet-latest")

    def __init__(
        self,
        endpoint: str = ANTHROPIC_ENDPOINT,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        api_version: str = DEFAULT_ANTHROPIC_VERSION,
    ) -> None:
        self._endpoint = endpoint
        self.max_tokens = max_tokens
        self.api_version = api_version

    def _block(self, attachment: Attachment) -> dict[str, Any]:
        if attachment.is_text:
            return {"type": "text", "text": self.text_attachment_block(attachment)}
        return {
            "type": "image" if attachment.is_image else "document",
            "source": {
                "type": "base64",
                "media_type": attachment.mime_type,
                "data": attachment.base64_data,
            },
        }

    def build_request(
        self,
        history: Sequence[Message],
        attachments: Sequence[Attachment],
        model_id: str,
    ) -> dict[str, Any]:
        last = history[-1]
        owned = self.message_attachments(last, attachments, is_last=True)
        content: str | list[dict[str, Any]] = last.content
        if owned:
            content = [{"type": "text", "text": last.content}]
            content.extend(self._block(item) for item in owned)
        return {
            "model": model_id,
            "messages": [
                {
                    "role": "user" if last.role == "user" else "assistant",
                    "content": content,
                }
            ],
            "max_tokens": self.max_tokens,
        }

    def build_headers(self, secret_key: str) -> dict[str, str]:
        return {
            "x-api-key": secret_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }

    def endpoint(self, model_id: str) -> str:
        return self._endpoint

    def extract_text(self, payload: Any) -> str:
        # Error objects can arrive inside an HTTP 200 envelope.
        error = payload.get("error") if isinstance(payload, dict) else None
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise ProviderError(str(message or "Anthropic reported an error"))
        text = self._dig(payload, "content", 0, "text")
        if not isinstance(text, str):
            raise ResponseParseError("Unexpected Anthropic response: text is not a string")
        return text
