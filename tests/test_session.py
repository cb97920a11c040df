"""Tests for session restore, persistence, and clearing."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from multichat.attachments import Attachment
from multichat.exceptions import UnknownModelError
from multichat.messages import Message
from multichat.persistence import (
    STORAGE_KEY_API_KEY,
    STORAGE_KEY_MESSAGES,
    STORAGE_KEY_MODEL,
    LocalStorage,
)
from multichat.providers import ProviderRegistry
from multichat.session import SessionState


class SessionStateTests(unittest.TestCase):
    """Validate that storage mirrors the in-memory session."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = LocalStorage(Path(self._tmp.name))
        self.registry = ProviderRegistry.build_default()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _session(self, default_model: str = "gpt-4o") -> SessionState:
        return SessionState(self.storage, self.registry, default_model)

    def test_fresh_session_uses_defaults(self) -> None:
        session = self._session()
        session.restore()
        self.assertEqual(session.messages, ())
        self.assertEqual(session.secret_key, "")
        self.assertEqual(session.selected_model_id, "gpt-4o")

    def test_unknown_default_model_rejected(self) -> None:
        with self.assertRaises(UnknownModelError):
            self._session("llama3")

    def test_append_persists_and_restores(self) -> None:
        attachment = Attachment(
            name="n.txt", mime_type="text/plain", size_bytes=2, text="hi"
        )
        session = self._session()
        session.append(Message.user("question", (attachment,)))
        session.append(Message.assistant("answer"))
        session.set_secret_key("  sk-abc  ")
        session.select_model("claude-2")

        restored = self._session()
        restored.restore()
        self.assertEqual(restored.messages, session.messages)
        self.assertEqual(restored.messages[0].attachments, (attachment,))
        self.assertEqual(restored.secret_key, "sk-abc")
        self.assertEqual(restored.selected_model_id, "claude-2")
        self.assertEqual(restored.message_count, 2)

    def test_select_unknown_model_keeps_previous(self) -> None:
        session = self._session()
        with self.assertRaises(UnknownModelError):
            session.select_model("mistral-large")
        self.assertEqual(session.selected_model_id, "gpt-4o")
        self.assertIsNone(self.storage.get_item(STORAGE_KEY_MODEL))

    def test_unknown_persisted_model_falls_back(self) -> None:
        self.storage.set_item(STORAGE_KEY_MODEL, "llama3")
        session = self._session()
        with self.assertLogs("multichat.session", level="WARNING") as logs:
            session.restore()
        self.assertEqual(session.selected_model_id, "gpt-4o")
        self.assertTrue(any("session.model.unknown" in line for line in logs.output))

    def test_corrupt_log_starts_empty(self) -> None:
        self.storage.set_item(STORAGE_KEY_MESSAGES, "{oops")
        self.storage.set_item(STORAGE_KEY_API_KEY, "kept")
        session = self._session()
        with self.assertLogs("multichat.session", level="WARNING"):
            session.restore()
        self.assertEqual(session.messages, ())
        self.assertEqual(session.secret_key, "kept")

    def test_non_list_log_starts_empty(self) -> None:
        self.storage.set_json(STORAGE_KEY_MESSAGES, {"role": "user"})
        session = self._session()
        with self.assertLogs("multichat.session", level="WARNING"):
            session.restore()
        self.assertEqual(session.messages, ())

    def test_null_attachment_size_restores_as_zero(self) -> None:
        self.storage.set_json(
            STORAGE_KEY_MESSAGES,
            [
                {
                    "role": "user",
                    "content": "see file",
                    "attachments": [
                        {"name": "n.txt", "type": "text/plain", "size": None, "content": "x"}
                    ],
                }
            ],
        )
        session = self._session()
        session.restore()
        self.assertEqual(len(session.messages), 1)
        attachment = session.messages[0].attachments[0]
        self.assertEqual(attachment.name, "n.txt")
        self.assertEqual(attachment.size_bytes, 0)

    def test_corrupt_key_file_keeps_default_key(self) -> None:
        self.storage.set_item(STORAGE_KEY_MODEL, "claude-2")
        (Path(self._tmp.name) / f"{STORAGE_KEY_API_KEY}.json").write_text(
            "not json", encoding="utf-8"
        )
        session = self._session()
        with self.assertLogs("multichat.session", level="WARNING") as logs:
            session.restore()
        self.assertEqual(session.secret_key, "")
        self.assertEqual(session.selected_model_id, "claude-2")
        self.assertTrue(any("session.restore.corrupt" in line for line in logs.output))

    def test_corrupt_model_file_keeps_default_model(self) -> None:
        (Path(self._tmp.name) / f"{STORAGE_KEY_MODEL}.json").write_text(
            "{broken", encoding="utf-8"
        )
        session = self._session()
        with self.assertLogs("multichat.session", level="WARNING"):
            session.restore()
        self.assertEqual(session.selected_model_id, "gpt-4o")

    def test_clear_removes_log_but_keeps_key_and_model(self) -> None:
        session = self._session()
        session.set_secret_key("sk")
        session.select_model("gemini-1.5-pro")
        session.append(Message.user("hi"))
        session.clear()

        self.assertEqual(session.messages, ())
        self.assertIsNone(self.storage.get_item(STORAGE_KEY_MESSAGES))
        self.assertEqual(self.storage.get_item(STORAGE_KEY_API_KEY), "sk")
        self.assertEqual(self.storage.get_item(STORAGE_KEY_MODEL), "gemini-1.5-pro")

    def test_persist_writes_all_values(self) -> None:
        session = self._session()
        session.secret_key = "direct"
        session.persist()
        self.assertEqual(self.storage.get_item(STORAGE_KEY_API_KEY), "direct")
        self.assertEqual(self.storage.get_item(STORAGE_KEY_MODEL), "gpt-4o")
        self.assertEqual(self.storage.get_json(STORAGE_KEY_MESSAGES), [])


if __name__ == "__main__":
    unittest.main()
