"""Conversation log plus the persisted secret key and model selection."""

from __future__ import annotations

import logging

from .exceptions import UnknownModelError
from .messages import Message
from .persistence import (
    STORAGE_KEY_API_KEY,
    STORAGE_KEY_MESSAGES,
    STORAGE_KEY_MODEL,
    LocalStorage,
    PersistenceError,
    PersistenceFormatError,
)
from .providers.registry import ProviderRegistry

LOGGER = logging.getLogger(__name__)


class SessionState:
    """Own the append-only message log and mirror it to local storage.

    Every successful ``append`` or ``clear`` leaves the stored log equal to
    the in-memory one. A crash in between loses at most that one mutation.
    """

    def __init__(
        self,
        storage: LocalStorage,
        registry: ProviderRegistry,
        default_model: str,
    ) -> None:
        registry.resolve(default_model)
        self.storage = storage
        self.registry = registry
        self.default_model = default_model
        self.secret_key = ""
        self.selected_model_id = default_model
        self._messages: list[Message] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def message_count(self) -> int:
        return len(self._messages)

    def restore(self) -> None:
        """Load persisted state; missing or unreadable values leave the defaults."""
        self._messages = self._load_messages()

        secret_key = self._load_item(STORAGE_KEY_API_KEY)
        if secret_key is not None:
            self.secret_key = secret_key

        model_id = self._load_item(STORAGE_KEY_MODEL)
        if model_id:
            try:
                self.registry.resolve(model_id)
                self.selected_model_id = model_id
            except UnknownModelError:
                LOGGER.warning(
                    "session.model.unknown",
                    extra={
                        "event": "session.model.unknown",
                        "model": model_id,
                        "fallback": self.default_model,
                    },
                )
                self.selected_model_id = self.default_model

        LOGGER.info(
            "session.restored",
            extra={
                "event": "session.restored",
                "messages": len(self._messages),
                "model": self.selected_model_id,
                "has_key": bool(self.secret_key),
            },
        )

    def _load_item(self, key: str) -> str | None:
        try:
            return self.storage.get_item(key)
        except PersistenceError as exc:
            LOGGER.warning(
                "session.restore.corrupt",
                extra={"event": "session.restore.corrupt", "key": key, "reason": str(exc)},
            )
            return None

    def _load_messages(self) -> list[Message]:
        try:
            payload = self.storage.get_json(STORAGE_KEY_MESSAGES)
            if payload is None:
                return []
            if not isinstance(payload, list):
                raise PersistenceFormatError("Stored conversation is not a list.")
            return [Message.from_dict(item) for item in payload if isinstance(item, dict)]
        except (PersistenceError, TypeError, ValueError) as exc:
            LOGGER.warning(
                "session.restore.corrupt",
                extra={
                    "event": "session.restore.corrupt",
                    "key": STORAGE_KEY_MESSAGES,
                    "reason": str(exc),
                },
            )
            return []

    def append(self, message: Message) -> None:
        self._messages.append(message)
        self._persist_messages()

    def clear(self) -> None:
        """Empty the log and drop its stored copy; key and model are kept."""
        self._messages.clear()
        self.storage.remove_item(STORAGE_KEY_MESSAGES)
        LOGGER.info("session.cleared", extra={"event": "session.cleared"})

    def set_secret_key(self, secret_key: str) -> None:
        self.secret_key = secret_key.strip()
        self.storage.set_item(STORAGE_KEY_API_KEY, self.secret_key)

    def select_model(self, model_id: str) -> None:
        normalized = model_id.strip()
        self.registry.resolve(normalized)
        self.selected_model_id = normalized
        self.storage.set_item(STORAGE_KEY_MODEL, normalized)

    def persist(self) -> None:
        """Write all three values."""
        self._persist_messages()
        self.storage.set_item(STORAGE_KEY_API_KEY, self.secret_key)
        self.storage.set_item(STORAGE_KEY_MODEL, self.selected_model_id)

    def _persist_messages(self) -> None:
        self.storage.set_json(
            STORAGE_KEY_MESSAGES, [message.to_dict() for message in self._messages]
        )
