"""Local key/value storage mirroring the chat session to disk."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import re
from typing import Any

from .exceptions import MultichatError

LOGGER = logging.getLogger(__name__)

STORAGE_KEY_MESSAGES = "chatMessages"
STORAGE_KEY_API_KEY = "apiKey"
STORAGE_KEY_MODEL = "selectedModel"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class PersistenceError(MultichatError):
    """Raised when persistence operations fail."""


class PersistenceFormatError(PersistenceError):
    """Raised when a persisted payload cannot be decoded safely."""


class LocalStorage:
    """String values under fixed keys, one private file per key."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def _enforce_permissions(self, path: Path, mode: int = 0o600) -> None:
        """Best-effort POSIX permission enforcement for a file or directory."""
        if os.name != "posix":
            return
        try:
            path.chmod(mode)
        except OSError as exc:
            LOGGER.warning("Unable to enforce %o permissions for %s: %s", mode, path, exc)

    def _ensure_directory(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create {self.directory}: {exc}") from exc
        self._enforce_permissions(self.directory, 0o700)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise PersistenceError(f"Invalid storage key {key!r}.")
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the stored value, or None when the key was never written."""
        target = self._path_for(key)
        if not target.exists():
            return None
        try:
            raw = target.read_text(encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to read {target}: {exc}") from exc
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceFormatError(f"Stored value for {key!r} is corrupt.") from exc
        if not isinstance(value, str):
            raise PersistenceFormatError(f"Stored value for {key!r} is not a string.")
        return value

    def set_item(self, key: str, value: str) -> None:
        target = self._path_for(key)
        self._ensure_directory()
        tmp = target.with_suffix(".tmp")
        try:
            tmp.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
            self._enforce_permissions(tmp)
            tmp.replace(target)
        except OSError as exc:
            raise PersistenceError(f"Unable to write {target}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        target = self._path_for(key)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to remove {target}: {exc}") from exc

    def get_json(self, key: str) -> Any:
        """Return the decoded JSON document stored as a string under ``key``."""
        raw = self.get_item(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceFormatError(f"Stored JSON for {key!r} is invalid.") from exc

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False, separators=(",", ":")))
