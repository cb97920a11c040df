"""Tests for the conversation message record."""

from __future__ import annotations

import unittest

from multichat.attachments import Attachment
from multichat.messages import Message


class MessageTests(unittest.TestCase):
    """Validate role checks and the persisted dict shape."""

    def test_invalid_role_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Message(role="tool", content="x")

    def test_to_dict_omits_empty_attachments(self) -> None:
        self.assertEqual(Message.user("hi").to_dict(), {"role": "user", "content": "hi"})

    def test_attachments_are_serialised(self) -> None:
        attachment = Attachment(
            name="a.png",
            mime_type="image/png",
            size_bytes=1,
            data_url="data:image/png;base64,AA==",
        )
        payload = Message.user("see", [attachment]).to_dict()
        self.assertEqual(payload["attachments"][0]["dataUrl"], "data:image/png;base64,AA==")
        restored = Message.from_dict(payload)
        self.assertEqual(restored.attachments, (attachment,))

    def test_from_dict_normalizes_role(self) -> None:
        message = Message.from_dict({"role": " Assistant ", "content": "ok"})
        self.assertEqual(message.role, "assistant")
        self.assertEqual(message.attachments, ())


if __name__ == "__main__":
    unittest.main()
