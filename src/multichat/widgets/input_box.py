"""Input row containing message field, attach button and send button."""

from __future__ import annotations

from pathlib import Path

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.message import Message
from textual.widgets import Button, Input

from ..screens import split_paths


def pasted_file_paths(text: str) -> list[str]:
    """Return the pasted paths when every token names an existing file."""
    paths = split_paths(text)
    if paths and all(Path(path).expanduser().is_file() for path in paths):
        return paths
    return []


class MessageInput(Input):
    """Message field that turns a paste of file paths into an attach request."""

    class PathsPasted(Message):
        """Posted instead of inserting text when the paste is a list of files."""

        def __init__(self, paths: list[str]) -> None:
            super().__init__()
            self.paths = paths

    def _on_paste(self, event: events.Paste) -> None:
        paths = pasted_file_paths(event.text)
        if not paths:
            return
        # Skips Input._on_paste so the paths never land in the field.
        event.prevent_default()
        event.stop()
        self.post_message(self.PathsPasted(paths))


class InputBox(Horizontal):
    """Message field with Attach and Send buttons."""

    class AttachRequested(Message):
        """Posted when the user clicks the attach button."""

    class SendRequested(Message):
        """Posted when the user clicks the send button."""

    def compose(self) -> ComposeResult:
        yield MessageInput(placeholder="Type your message...", id="message_input")
        yield Button("Attach", id="attach_button", variant="default")
        yield Button("Send", id="send_button", variant="success")

    def set_busy(self, busy: bool) -> None:
        """Disable every control while a request is in flight."""
        for widget in self.query("Input, Button"):
            widget.disabled = busy

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "attach_button":
            event.stop()
            self.post_message(self.AttachRequested())
        elif event.button.id == "send_button":
            event.stop()
            self.post_message(self.SendRequested())
