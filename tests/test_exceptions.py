"""Tests for the domain exception hierarchy."""

from __future__ import annotations

import unittest

from multichat.exceptions import (
    AttachmentError,
    AttachmentTooLargeError,
    ChatBusyError,
    ConfigValidationError,
    FileReadError,
    MultichatError,
    NetworkError,
    ProviderError,
    ResponseParseError,
    UnknownModelError,
    UnsupportedTypeError,
)
from multichat.persistence import PersistenceError, PersistenceFormatError


class ExceptionHierarchyTests(unittest.TestCase):
    """Ensure callers can catch errors at the right granularity."""

    def test_all_domain_errors_share_base(self) -> None:
        for error_type in (
            ConfigValidationError,
            AttachmentError,
            UnknownModelError,
            NetworkError,
            ResponseParseError,
            ProviderError,
            ChatBusyError,
            PersistenceError,
        ):
            self.assertTrue(issubclass(error_type, MultichatError), error_type)
        self.assertTrue(issubclass(MultichatError, RuntimeError))

    def test_attachment_errors_group_together(self) -> None:
        for error_type in (UnsupportedTypeError, FileReadError, AttachmentTooLargeError):
            self.assertTrue(issubclass(error_type, AttachmentError))
        self.assertTrue(issubclass(PersistenceFormatError, PersistenceError))

    def test_provider_error_carries_status(self) -> None:
        error = ProviderError("rate limited", status_code=429)
        self.assertEqual(str(error), "rate limited")
        self.assertEqual(error.status_code, 429)
        self.assertIsNone(ProviderError("embedded").status_code)


if __name__ == "__main__":
    unittest.main()
