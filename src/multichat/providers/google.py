"""Google Gemini generateContent adapter."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

from ..attachments import Attachment
from ..exceptions import ResponseParseError
from ..messages import Message
from .base import ProviderAdapter

GOOGLE_ENDPOINT_BASE = "https://generativelanguage.googleapis.com/v1/models"


class GoogleAdapter(ProviderAdapter):
    """Single-turn framing with the model id carried in the URL."""

    id = "google"
    display_name = "Google"
    prefixes = ("gemini",)
    model_options = ("gemini-1.5-pro",)

    def __init__(self, endpoint_base: str = GOOGLE_ENDPOINT_BASE) -> None:
        self.endpoint_base = endpoint_base.rstrip("/")

    def _part(self, attachment: Attachment) -> dict[str, Any]:
        if attachment.is_text:
            return {"text": self.text_attachment_block(attachment)}
        return {
            "inlineData": {
                "mimeType": attachment.mime_type,
                "data": attachment.base64_data,
            }
        }

    def build_request(
        self,
        history: Sequence[Message],
        attachments: Sequence[Attachment],
        model_id: str,
    ) -> dict[str, Any]:
        last = history[-1]
        owned = self.message_attachments(last, attachments, is_last=True)
        parts: list[dict[str, Any]] = [{"text": last.content}]
        parts.extend(self._part(item) for item in owned)
        return {
            "contents": [
                {"role": "user" if last.role == "user" else "model", "parts": parts}
            ]
        }

    def build_headers(self, secret_key: str) -> dict[str, str]:
        return {"Content-Type": "application/json", "x-goog-api-key": secret_key}

    def endpoint(self, model_id: str) -> str:
        return f"{self.endpoint_base}/{quote(model_id.strip(), safe='.-_')}:generateContent"

    def extract_text(self, payload: Any) -> str:
        text = self._dig(payload, "candidates", 0, "content", "parts", 0, "text")
        if not isinstance(text, str):
            raise ResponseParseError("Unexpected Google response: text is not a string")
        return text
