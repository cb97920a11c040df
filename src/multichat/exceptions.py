"""Domain exception hierarchy for the multichat application."""

from __future__ import annotations


class MultichatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class ConfigValidationError(MultichatError):
    """Raised when configuration cannot be validated safely."""


class AttachmentError(MultichatError):
    """Base class for a single file that could not become an attachment."""


class UnsupportedTypeError(AttachmentError):
    """Raised when a file's mime type is not on the allow-list."""


class FileReadError(AttachmentError):
    """Raised when a file cannot be read or decoded."""


class AttachmentTooLargeError(AttachmentError):
    """Raised when a file exceeds the configured size cap."""


class UnknownModelError(MultichatError):
    """Raised when no provider owns the requested model id."""


class NetworkError(MultichatError):
    """Raised when the provider endpoint cannot be reached."""


class ResponseParseError(MultichatError):
    """Raised when a provider response is not the expected envelope."""


class ProviderError(MultichatError):
    """Raised when a provider reports a failure."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ChatBusyError(MultichatError):
    """Raised when a request is submitted while another is in flight."""
