"""Provider adapter contract shared by every LLM backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from ..attachments import Attachment
from ..exceptions import ResponseParseError
from ..messages import Message

DEFAULT_MAX_TOKENS = 4096


class ProviderAdapter(ABC):
    """Translate conversation data to and from one provider's wire format.

    Adapters are stateless after construction and shared by every request.
    """

    id: str = ""
    display_name: str = ""
    prefixes: tuple[str, ...] = ()
    model_options: tuple[str, ...] = ()

    def owns(self, model_id: str) -> bool:
        """Return True when ``model_id`` is listed or carries one of our prefixes."""
        normalized = model_id.strip()
        if not normalized:
            return False
        if normalized in self.model_options:
            return True
        return normalized.lower().startswith(self.prefixes)

    @abstractmethod
    def build_request(
        self,
        history: Sequence[Message],
        attachments: Sequence[Attachment],
        model_id: str,
    ) -> dict[str, Any]:
        """Return the JSON request body."""

    @abstractmethod
    def build_headers(self, secret_key: str) -> dict[str, str]:
        """Return the HTTP headers carrying the secret key."""

    @abstractmethod
    def endpoint(self, model_id: str) -> str:
        """Return the URL the request is POSTed to."""

    @abstractmethod
    def extract_text(self, payload: Any) -> str:
        """Pull the assistant text out of a parsed response envelope."""

    @staticmethod
    def message_attachments(
        message: Message,
        pending: Sequence[Attachment],
        *,
        is_last: bool,
    ) -> tuple[Attachment, ...]:
        """Attachments owned by ``message``; pending ones fall to an unattached last message."""
        if message.attachments:
            return message.attachments
        if is_last:
            return tuple(pending)
        return ()

    @staticmethod
    def text_attachment_block(attachment: Attachment) -> str:
        return f"[File: {attachment.name}]\n{attachment.text or ''}"

    def _dig(self, payload: Any, *path: str | int) -> Any:
        """Walk ``path`` through nested dicts/lists or raise ResponseParseError."""
        current = payload
        for step in path:
            try:
                current = current[step]
            except (KeyError, IndexError, TypeError) as exc:
                raise ResponseParseError(
                    f"Unexpected {self.display_name} response: missing {step!r}"
                ) from exc
        return current
