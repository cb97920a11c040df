"""Modal screens for confirmation and file path entry."""

from __future__ import annotations

import shlex
from typing import Any

from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class ConfirmScreen(ModalScreen[bool]):
    """Yes/No dialog. Dismisses with True only when the user confirms."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 60;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #confirm-body {
        padding-bottom: 1;
    }

    #confirm-actions {
        height: 3;
        align: right middle;
    }
    """

    def __init__(self, prompt: str) -> None:
        super().__init__()
        self._prompt = prompt

    def compose(self) -> ComposeResult:
        with Container(id="confirm-dialog"):
            yield Static(self._prompt, id="confirm-body")
            with Horizontal(id="confirm-actions"):
                yield Button("Cancel", id="confirm-no")
                yield Button("Clear", id="confirm-yes", variant="error")

    def on_mount(self) -> None:
        self.query_one("#confirm-no", Button).focus()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.dismiss(event.button.id == "confirm-yes")

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(False)


class PathPromptScreen(ModalScreen[list[str] | None]):
    """Collect one or more file paths, separated by whitespace."""

    CSS = """
    PathPromptScreen {
        align: center middle;
    }

    #path-prompt-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #path-prompt-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #path-prompt-input {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def compose(self) -> ComposeResult:
        with Container(id="path-prompt-dialog"):
            yield Static("Attach files", id="path-prompt-title")
            yield Input(
                placeholder="Paths to images, PDFs, text or audio/video files...",
                id="path-prompt-input",
            )
            yield Static("Enter to confirm | Esc to cancel")

    def on_mount(self) -> None:
        self.query_one("#path-prompt-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "path-prompt-input":
            return
        event.stop()
        paths = split_paths(event.value)
        self.dismiss(paths or None)

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)


def split_paths(raw: str) -> list[str]:
    """Split pasted or typed text into file paths.

    Quoted segments may contain spaces; ``file://`` prefixes from drag-and-drop
    are stripped.
    """
    try:
        tokens = shlex.split(raw)
    except ValueError:
        tokens = raw.split()
    paths: list[str] = []
    for token in tokens:
        token = token.strip()
        if token.startswith("file://"):
            token = token[len("file://") :]
        if token:
            paths.append(token)
    return paths
