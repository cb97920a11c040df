"""Provider-agnostic conversation messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .attachments import Attachment

ROLES = frozenset({"user", "assistant", "system"})


@dataclass(frozen=True)
class Message:
    """A single entry of the conversation log."""

    role: str
    content: str
    attachments: tuple[Attachment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unsupported message role {self.role!r}.")
        if not isinstance(self.attachments, tuple):
            object.__setattr__(self, "attachments", tuple(self.attachments))

    @classmethod
    def user(cls, content: str, attachments: tuple[Attachment, ...] = ()) -> Message:
        return cls(role="user", content=content, attachments=tuple(attachments))

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(role="assistant", content=content)

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role="system", content=content)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.attachments:
            payload["attachments"] = [item.to_dict() for item in self.attachments]
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Message:
        raw_attachments = payload.get("attachments") or []
        if not isinstance(raw_attachments, list):
            raise ValueError("attachments must be a list.")
        return cls(
            role=str(payload.get("role", "")).strip().lower(),
            content=str(payload.get("content", "")),
            attachments=tuple(
                Attachment.from_dict(item)
                for item in raw_attachments
                if isinstance(item, dict)
            ),
        )
