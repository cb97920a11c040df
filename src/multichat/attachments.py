"""Attachment ingestion: turn user files into inline data URLs or decoded text."""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Iterable
from dataclasses import dataclass, field
import logging
import mimetypes
from pathlib import Path
from typing import Any

from .exceptions import (
    AttachmentError,
    AttachmentTooLargeError,
    FileReadError,
    UnsupportedTypeError,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ATTACHMENT_BYTES = 20 * 1024 * 1024  # 20 MB

ALLOWED_TYPES: dict[str, frozenset[str]] = {
    "image": frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"}),
    "document": frozenset(
        {
            "application/pdf",
            "text/plain",
            "text/markdown",
            "application/x-tex",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        }
    ),
    "media": frozenset({"audio/mpeg", "audio/wav", "video/mp4", "video/webm"}),
}

# Platform mime databases disagree on several of these, so they are pinned.
_EXTENSION_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".txt": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".tex": "application/x-tex",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}


def classify_mime_type(mime_type: str) -> str | None:
    """Return the allow-list class for a mime type, or None when unsupported."""
    normalized = mime_type.strip().lower()
    for kind, types in ALLOWED_TYPES.items():
        if normalized in types:
            return kind
    return None


def is_allowed_type(mime_type: str) -> bool:
    return classify_mime_type(mime_type) is not None


def guess_mime_type(path: str | Path) -> str:
    """Guess a mime type from the file name."""
    suffix = Path(path).suffix.lower()
    pinned = _EXTENSION_TYPES.get(suffix)
    if pinned is not None:
        return pinned
    guessed, _ = mimetypes.guess_type(str(path))
    return guessed or "application/octet-stream"


@dataclass(frozen=True)
class Attachment:
    """A file normalized for transmission.

    Exactly one of ``data_url`` and ``text`` is set: text-like types carry the
    decoded text, everything else an inline ``data:<mime>;base64,...`` URL.
    """

    name: str
    mime_type: str
    size_bytes: int
    data_url: str | None = None
    text: str | None = None

    def __post_init__(self) -> None:
        if (self.data_url is None) == (self.text is None):
            raise ValueError("Attachment needs exactly one of data_url or text.")

    @property
    def is_text(self) -> bool:
        return self.text is not None

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    @property
    def kind(self) -> str:
        return classify_mime_type(self.mime_type) or "document"

    @property
    def base64_data(self) -> str:
        """Return the base64 payload of the data URL (empty for text)."""
        if self.data_url is None:
            return ""
        _, _, encoded = self.data_url.partition(",")
        return encoded

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "type": self.mime_type,
            "size": self.size_bytes,
        }
        if self.text is not None:
            payload["content"] = self.text
        else:
            payload["dataUrl"] = self.data_url
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Attachment:
        text = payload.get("content")
        data_url = payload.get("dataUrl")
        try:
            size_bytes = int(payload.get("size", 0))
        except (TypeError, ValueError):
            size_bytes = 0
        return cls(
            name=str(payload.get("name", "")),
            mime_type=str(payload.get("type", "application/octet-stream")),
            size_bytes=size_bytes,
            data_url=data_url if isinstance(data_url, str) and text is None else None,
            text=text if isinstance(text, str) else None,
        )


@dataclass
class AttachmentBatch:
    """Result of processing a multi-file selection."""

    attachments: list[Attachment] = field(default_factory=list)
    errors: list[tuple[str, AttachmentError]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_messages(self) -> list[str]:
        return [f"{name}: {exc}" for name, exc in self.errors]


class AttachmentProcessor:
    """Read files and build :class:`Attachment` records under type and size limits."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES) -> None:
        self.max_bytes = max(1, max_bytes)

    def _check_type(self, mime_type: str) -> str:
        normalized = mime_type.strip().lower()
        if not is_allowed_type(normalized):
            raise UnsupportedTypeError(f"File type {mime_type or 'unknown'} not supported")
        return normalized

    def _check_size(self, size: int) -> None:
        if size > self.max_bytes:
            max_mb = self.max_bytes / (1024 * 1024)
            raise AttachmentTooLargeError(f"File too large (max {max_mb:.1f}MB)")

    async def process(self, path: str | Path, mime_type: str | None = None) -> Attachment:
        """Read a file from disk and normalize it."""
        target = Path(path).expanduser()
        resolved_type = self._check_type(mime_type or guess_mime_type(target))

        try:
            size = target.stat().st_size
        except OSError as exc:
            raise FileReadError(f"File reading failed: {exc}") from exc
        self._check_size(size)

        try:
            data = await asyncio.to_thread(target.read_bytes)
        except OSError as exc:
            raise FileReadError(f"File reading failed: {exc}") from exc
        return await self.process_bytes(target.name, data, resolved_type)

    async def process_bytes(self, name: str, data: bytes, mime_type: str) -> Attachment:
        """Normalize in-memory content, e.g. pasted data."""
        resolved_type = self._check_type(mime_type)
        self._check_size(len(data))

        if resolved_type.startswith("text/"):
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise FileReadError(f"File is not valid UTF-8 text: {exc}") from exc
            return Attachment(
                name=name, mime_type=resolved_type, size_bytes=len(data), text=text
            )

        encoded = base64.b64encode(data).decode("ascii")
        return Attachment(
            name=name,
            mime_type=resolved_type,
            size_bytes=len(data),
            data_url=f"data:{resolved_type};base64,{encoded}",
        )

    async def process_batch(self, paths: Iterable[str | Path]) -> AttachmentBatch:
        """Process every file independently; one failure never drops its siblings.

        Results keep selection order.
        """
        targets = [Path(p).expanduser() for p in paths]
        results = await asyncio.gather(
            *(self.process(target) for target in targets), return_exceptions=True
        )

        batch = AttachmentBatch()
        for target, result in zip(targets, results):
            if isinstance(result, Attachment):
                batch.attachments.append(result)
                continue
            if isinstance(result, AttachmentError):
                batch.errors.append((target.name, result))
                LOGGER.warning(
                    "attachment.rejected",
                    extra={
                        "event": "attachment.rejected",
                        "file": target.name,
                        "error_type": type(result).__name__,
                        "reason": str(result),
                    },
                )
                continue
            raise result

        LOGGER.info(
            "attachment.batch.processed",
            extra={
                "event": "attachment.batch.processed",
                "accepted": len(batch.attachments),
                "rejected": len(batch.errors),
            },
        )
        return batch
