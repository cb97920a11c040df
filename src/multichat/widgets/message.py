"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..messages import Message

_ROLE_LABELS = {"user": "You", "assistant": "Assistant", "system": "System"}


def _format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


class MessageBubble(Vertical):
    """Render a single chat message with role header, body and attachment names."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    MessageBubble > #attachment-block {
        color: $text-muted;
        padding: 0 1;
        border-left: solid $panel;
    }
    """

    def __init__(self, message: Message, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.message = message
        self.add_class(f"message-{message.role}")

    @property
    def role_label(self) -> str:
        return _ROLE_LABELS.get(self.message.role, self.message.role.capitalize())

    def compose(self) -> ComposeResult:
        yield Static(Text(self.role_label, style="bold"), id="header-block")
        text = self.message.content.rstrip()
        if self.message.role == "system":
            # Error text is shown verbatim, never interpreted as markdown.
            yield Static(Text(text), id="content-block")
        else:
            yield Static(Markdown(text) if text else "", id="content-block")
        if self.message.attachments:
            names = "\n".join(
                f"📎 {item.name} ({_format_size(item.size_bytes)})"
                for item in self.message.attachments
            )
            yield Static(Text(names), id="attachment-block")
