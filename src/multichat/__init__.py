"""Top-level package for multichat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import MultichatApp
    from .attachments import Attachment, AttachmentProcessor
    from .chat import ChatClient
    from .config import ensure_config_dir, load_config
    from .dispatcher import RequestDispatcher
    from .exceptions import (
        AttachmentError,
        ConfigValidationError,
        MultichatError,
        NetworkError,
        ProviderError,
        ResponseParseError,
        UnknownModelError,
    )
    from .messages import Message
    from .providers import ProviderRegistry
    from .session import SessionState
    from .state import ConversationState, StateManager

__all__ = [
    "Attachment",
    "AttachmentError",
    "AttachmentProcessor",
    "ChatClient",
    "ConfigValidationError",
    "ConversationState",
    "Message",
    "MultichatApp",
    "MultichatError",
    "NetworkError",
    "ProviderError",
    "ProviderRegistry",
    "RequestDispatcher",
    "ResponseParseError",
    "SessionState",
    "StateManager",
    "UnknownModelError",
    "ensure_config_dir",
    "load_config",
]

_EXCEPTION_NAMES = {
    "AttachmentError",
    "ConfigValidationError",
    "MultichatError",
    "NetworkError",
    "ProviderError",
    "ResponseParseError",
    "UnknownModelError",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the UI dependency out of library imports."""
    if name in {"Attachment", "AttachmentProcessor"}:
        from . import attachments

        return getattr(attachments, name)
    if name == "ChatClient":
        from .chat import ChatClient

        return ChatClient
    if name in {"ensure_config_dir", "load_config"}:
        from .config import ensure_config_dir, load_config

        return {"ensure_config_dir": ensure_config_dir, "load_config": load_config}[name]
    if name == "RequestDispatcher":
        from .dispatcher import RequestDispatcher

        return RequestDispatcher
    if name in _EXCEPTION_NAMES:
        from . import exceptions

        return getattr(exceptions, name)
    if name == "Message":
        from .messages import Message

        return Message
    if name == "ProviderRegistry":
        from .providers import ProviderRegistry

        return ProviderRegistry
    if name == "SessionState":
        from .session import SessionState

        return SessionState
    if name in {"ConversationState", "StateManager"}:
        from .state import ConversationState, StateManager

        return {"ConversationState": ConversationState, "StateManager": StateManager}[name]
    if name == "MultichatApp":
        from .app import MultichatApp

        return MultichatApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
