"""Tests for attachment ingestion, type allow-list, and size limits."""

from __future__ import annotations

import base64
import tempfile
from pathlib import Path
import unittest

from multichat.attachments import (
    DEFAULT_MAX_ATTACHMENT_BYTES,
    Attachment,
    AttachmentProcessor,
    classify_mime_type,
    guess_mime_type,
)
from multichat.exceptions import (
    AttachmentTooLargeError,
    FileReadError,
    UnsupportedTypeError,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class MimeTypeTests(unittest.TestCase):
    """Validate extension lookup and allow-list classification."""

    def test_pinned_extensions(self) -> None:
        self.assertEqual(guess_mime_type("photo.JPG"), "image/jpeg")
        self.assertEqual(guess_mime_type("notes.md"), "text/markdown")
        self.assertEqual(guess_mime_type("paper.tex"), "application/x-tex")
        self.assertEqual(guess_mime_type("clip.webm"), "video/webm")

    def test_unknown_extension_falls_back_to_octet_stream(self) -> None:
        self.assertEqual(guess_mime_type("blob.zzzunknown"), "application/octet-stream")

    def test_classification(self) -> None:
        self.assertEqual(classify_mime_type("image/png"), "image")
        self.assertEqual(classify_mime_type("application/pdf"), "document")
        self.assertEqual(classify_mime_type("audio/wav"), "media")
        self.assertIsNone(classify_mime_type("application/zip"))


class AttachmentRecordTests(unittest.TestCase):
    """Validate the attachment record invariants and serialised form."""

    def test_requires_exactly_one_payload(self) -> None:
        with self.assertRaises(ValueError):
            Attachment(name="a", mime_type="text/plain", size_bytes=1)
        with self.assertRaises(ValueError):
            Attachment(
                name="a",
                mime_type="text/plain",
                size_bytes=1,
                data_url="data:text/plain;base64,YQ==",
                text="a",
            )

    def test_to_dict_uses_stored_key_names(self) -> None:
        binary = Attachment(
            name="x.png",
            mime_type="image/png",
            size_bytes=3,
            data_url="data:image/png;base64,AAAA",
        )
        self.assertEqual(
            binary.to_dict(),
            {
                "name": "x.png",
                "type": "image/png",
                "size": 3,
                "dataUrl": "data:image/png;base64,AAAA",
            },
        )
        self.assertEqual(binary.base64_data, "AAAA")
        text = Attachment(name="n.txt", mime_type="text/plain", size_bytes=2, text="hi")
        self.assertEqual(text.to_dict()["content"], "hi")
        self.assertNotIn("dataUrl", text.to_dict())
        self.assertEqual(Attachment.from_dict(text.to_dict()), text)


class AttachmentProcessorTests(unittest.IsolatedAsyncioTestCase):
    """Validate file processing against type and size limits."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    async def test_image_becomes_data_url(self) -> None:
        path = self.root / "pic.png"
        path.write_bytes(PNG_BYTES)
        attachment = await AttachmentProcessor().process(path)
        self.assertEqual(attachment.name, "pic.png")
        self.assertEqual(attachment.mime_type, "image/png")
        self.assertEqual(attachment.size_bytes, len(PNG_BYTES))
        self.assertTrue(attachment.data_url.startswith("data:image/png;base64,"))
        self.assertEqual(base64.b64decode(attachment.base64_data), PNG_BYTES)
        self.assertIsNone(attachment.text)

    async def test_text_file_is_decoded(self) -> None:
        path = self.root / "notes.txt"
        path.write_text("hello world", encoding="utf-8")
        attachment = await AttachmentProcessor().process(path)
        self.assertTrue(attachment.is_text)
        self.assertEqual(attachment.text, "hello world")
        self.assertIsNone(attachment.data_url)

    async def test_invalid_utf8_text_is_a_read_error(self) -> None:
        processor = AttachmentProcessor()
        with self.assertRaises(FileReadError):
            await processor.process_bytes("bad.txt", b"\xff\xfe\xfa", "text/plain")

    async def test_unsupported_type_rejected(self) -> None:
        path = self.root / "archive.zip"
        path.write_bytes(b"PK\x03\x04")
        with self.assertRaises(UnsupportedTypeError) as ctx:
            await AttachmentProcessor().process(path)
        self.assertIn("not supported", str(ctx.exception))

    async def test_file_over_cap_rejected(self) -> None:
        path = self.root / "big.png"
        path.write_bytes(b"\x00" * 2048)
        with self.assertRaises(AttachmentTooLargeError):
            await AttachmentProcessor(max_bytes=1024).process(path)

    async def test_file_at_cap_accepted(self) -> None:
        path = self.root / "exact.png"
        path.write_bytes(b"\x00" * 1024)
        attachment = await AttachmentProcessor(max_bytes=1024).process(path)
        self.assertEqual(attachment.size_bytes, 1024)

    async def test_missing_file_is_a_read_error(self) -> None:
        with self.assertRaises(FileReadError) as ctx:
            await AttachmentProcessor().process(self.root / "missing.pdf")
        self.assertTrue(str(ctx.exception).startswith("File reading failed"))

    async def test_default_cap(self) -> None:
        self.assertEqual(AttachmentProcessor().max_bytes, DEFAULT_MAX_ATTACHMENT_BYTES)

    async def test_batch_keeps_order_and_isolates_failures(self) -> None:
        first = self.root / "a.txt"
        first.write_text("A", encoding="utf-8")
        rejected = self.root / "b.exe"
        rejected.write_bytes(b"MZ")
        third = self.root / "c.png"
        third.write_bytes(PNG_BYTES)

        with self.assertLogs("multichat.attachments", level="WARNING") as logs:
            batch = await AttachmentProcessor().process_batch([first, rejected, third])

        self.assertEqual([item.name for item in batch.attachments], ["a.txt", "c.png"])
        self.assertFalse(batch.ok)
        self.assertEqual(len(batch.errors), 1)
        self.assertEqual(batch.errors[0][0], "b.exe")
        self.assertIsInstance(batch.errors[0][1], UnsupportedTypeError)
        self.assertTrue(batch.error_messages()[0].startswith("b.exe: "))
        self.assertTrue(any("attachment.rejected" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
