"""OpenAI chat-completions adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ..attachments import Attachment
from ..exceptions import ResponseParseError
from ..messages import Message
from .base import DEFAULT_MAX_TOKENS, ProviderAdapter

OPENAI_ENDPOINT = "https://api.openai.com/v1/chat/completions"


class OpenAIAdapter(ProviderAdapter):
    """Sends the whole history; attachments ride on their owning message."""

    id = "openai"
    display_name = "OpenAI"
    prefixes = ("gpt",)
    model_options = ("gpt-4o", "chatgpt-4o-latest")

    def __init__(
        self,
        endpoint: str = OPENAI_ENDPOINT,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._endpoint = endpoint
        self.max_tokens = max_tokens

    def _content(
        self, message: Message, attachments: tuple[Attachment, ...]
    ) -> str | list[dict[str, Any]]:
        if not attachments:
            return message.content
        parts: list[dict[str, Any]] = [{"type": "text", "text": message.content}]
        for attachment in attachments:
            if attachment.is_text:
                parts.append(
                    {"type": "text", "text": self.text_attachment_block(attachment)}
                )
            else:
                parts.append(
                    {
                        "type": "image_url",
                        "image_url": {"url": attachment.data_url, "detail": "high"},
                    }
                )
        return parts

    def build_request(
        self,
        history: Sequence[Message],
        attachments: Sequence[Attachment],
        model_id: str,
    ) -> dict[str, Any]:
        last_index = len(history) - 1
        messages = [
            {
                "role": message.role,
                "content": self._content(
                    message,
                    self.message_attachments(
                        message, attachments, is_last=index == last_index
                    ),
                ),
            }
            for index, message in enumerate(history)
        ]
        return {"model": model_id, "messages": messages, "max_tokens": self.max_tokens}

    def build_headers(self, secret_key: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {secret_key}",
            "Content-Type": "application/json",
        }

    def endpoint(self, model_id: str) -> str:
        return self._endpoint

    def extract_text(self, payload: Any) -> str:
        content = self._dig(payload, "choices", 0, "message", "content")
        if not isinstance(content, str):
            raise ResponseParseError("Unexpected OpenAI response: content is not text")
        return content
