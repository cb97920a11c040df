"""Configuration loading and validation for the multichat client."""

from __future__ import annotations

from copy import deepcopy
import logging
import os
from pathlib import Path
import re
import tomllib
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .attachments import DEFAULT_MAX_ATTACHMENT_BYTES
from .exceptions import ConfigValidationError, UnknownModelError
from .providers.anthropic import ANTHROPIC_ENDPOINT, DEFAULT_ANTHROPIC_VERSION
from .providers.google import GOOGLE_ENDPOINT_BASE
from .providers.openai import OPENAI_ENDPOINT
from .providers.registry import ProviderRegistry

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "multichat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
_KEYBIND_PATTERN = re.compile(r"^[a-z0-9_+]+$")


def _non_empty_string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "multichat"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_non_empty_string(cls, value: Any) -> str:
        return _non_empty_string(value)


class SessionConfig(BaseModel):
    """Default model and where the session mirror lives."""

    default_model: str = "gpt-4o"
    storage_dir: str = "~/.local/state/multichat/storage"

    @field_validator("default_model", "storage_dir", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _non_empty_string(value)


class ProvidersConfig(BaseModel):
    """HTTP settings shared by every provider adapter."""

    timeout_seconds: int = Field(default=120, ge=1, le=3600)
    max_tokens: int = Field(default=4096, ge=1, le=1_000_000)
    anthropic_version: str = DEFAULT_ANTHROPIC_VERSION
    openai_endpoint: str = OPENAI_ENDPOINT
    anthropic_endpoint: str = ANTHROPIC_ENDPOINT
    google_endpoint_base: str = GOOGLE_ENDPOINT_BASE

    @field_validator("anthropic_version", mode="before")
    @classmethod
    def _validate_version(cls, value: Any) -> str:
        return _non_empty_string(value)

    @field_validator(
        "openai_endpoint", "anthropic_endpoint", "google_endpoint_base", mode="before"
    )
    @classmethod
    def _validate_endpoint(cls, value: Any) -> str:
        normalized = _non_empty_string(value)
        parsed = urlparse(normalized)
        scheme = parsed.scheme.lower()
        hostname = (parsed.hostname or "").lower()
        if not hostname:
            raise ValueError("Endpoint must include a hostname.")
        # The API key travels in a header; only loopback may skip TLS.
        if scheme != "https" and not (scheme == "http" and hostname in LOCAL_HOSTS):
            raise ValueError("Endpoint must use https unless it points at localhost.")
        return normalized


class AttachmentsConfig(BaseModel):
    """Limits for file ingestion."""

    max_bytes: int = Field(
        default=DEFAULT_MAX_ATTACHMENT_BYTES, ge=1, le=512 * 1024 * 1024
    )


class KeybindsConfig(BaseModel):
    """Keyboard action mapping."""

    send_message: str = "ctrl+enter"
    attach_file: str = "ctrl+o"
    clear_history: str = "ctrl+l"
    copy_last_message: str = "ctrl+y"
    quit: str = "ctrl+q"

    @field_validator("*", mode="before")
    @classmethod
    def _validate_keybind(cls, value: Any) -> str:
        normalized = _non_empty_string(value).lower()
        if not _KEYBIND_PATTERN.match(normalized):
            raise ValueError(f"Invalid keybind {normalized!r}.")
        return normalized


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/multichat/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _non_empty_string(value)


class Config(BaseModel):
    """Root configuration model for all sections."""

    app: AppConfig = AppConfig()
    session: SessionConfig = SessionConfig()
    providers: ProvidersConfig = ProvidersConfig()
    attachments: AttachmentsConfig = AttachmentsConfig()
    keybinds: KeybindsConfig = KeybindsConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_default_model(self) -> Config:
        try:
            ProviderRegistry.build_default().resolve(self.session.default_model)
        except UnknownModelError as exc:
            raise ValueError(str(exc)) from exc
        return self


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fall back to safe defaults when possible."""
    try:
        config = Config.model_validate(raw)
        return config.model_dump()
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
