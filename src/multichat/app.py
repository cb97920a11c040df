"""Main Textual application for chatting with OpenAI, Anthropic and Google models."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import Any

import httpx
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, Footer, Header, Input, Select

from .attachments import AttachmentProcessor
from .chat import ChatClient
from .config import load_config
from .dispatcher import RequestDispatcher
from .exceptions import ChatBusyError, MultichatError
from .logging_utils import configure_logging
from .messages import Message
from .persistence import LocalStorage
from .providers import ProviderRegistry
from .screens import ConfirmScreen, PathPromptScreen
from .session import SessionState
from .widgets import AttachmentBar, ConversationView, InputBox, MessageInput

LOGGER = logging.getLogger(__name__)

CLEAR_PROMPT = "Are you sure you want to clear the chat history?"


class MultichatApp(App[None]):
    """Single-screen chat UI over the provider registry."""

    CSS = """
    Screen {
        layout: vertical;
    }

    #settings_row {
        height: auto;
        padding: 0 1;
        background: $surface;
    }

    #api_key_input {
        width: 1fr;
    }

    #model_select {
        width: 48;
        margin-left: 1;
    }

    #clear_button {
        margin-left: 1;
        min-width: 10;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
        background: $background;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #message_input {
        width: 1fr;
    }

    #attach_button {
        margin-left: 1;
        min-width: 10;
    }

    #send_button {
        margin-left: 1;
        min-width: 10;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary;
    }

    .message-assistant {
        background: $surface;
    }

    .message-system {
        border: round $error;
        color: $error;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "attach_file": "Attach",
        "clear_history": "Clear",
        "copy_last_message": "Copy Last",
        "quit": "Quit",
    }

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = load_config(config_path)
        self.window_title = str(self.config["app"]["title"])
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )

        providers_cfg = self.config["providers"]
        self.registry = ProviderRegistry.build_default(providers_cfg)
        self.dispatcher = RequestDispatcher(
            self.registry,
            timeout=float(providers_cfg["timeout_seconds"]),
            client=client,
        )

        session_cfg = self.config["session"]
        self.session = SessionState(
            LocalStorage(str(session_cfg["storage_dir"])),
            self.registry,
            default_model=str(session_cfg["default_model"]),
        )
        self.session.restore()
        self.chat = ChatClient(
            self.session,
            self.dispatcher,
            AttachmentProcessor(max_bytes=int(self.config["attachments"]["max_bytes"])),
        )
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    def _model_choices(self) -> list[tuple[str, str]]:
        """Picker options; a prefix-matched persisted model is listed too."""
        choices = self.registry.model_choices()
        selected = self.session.selected_model_id
        if all(model_id != selected for _, model_id in choices):
            adapter = self.registry.resolve(selected)
            choices.append((f"{adapter.display_name} · {selected}", selected))
        return choices

    def compose(self) -> ComposeResult:
        """Compose app widgets."""
        yield Header()
        with Horizontal(id="settings_row"):
            yield Input(
                value=self.session.secret_key,
                placeholder="API key",
                password=True,
                id="api_key_input",
            )
            yield Select(
                self._model_choices(),
                value=self.session.selected_model_id,
                allow_blank=False,
                id="model_select",
            )
            yield Button("Clear", id="clear_button", variant="error")
        with Container(id="app-root"):
            yield ConversationView(id="conversation")
            yield AttachmentBar(id="attachment_bar")
            yield InputBox()
        yield Footer()

    async def on_mount(self) -> None:
        """Register runtime keybindings and render the restored history."""
        self.title = self.window_title
        self.sub_title = f"Model: {self.chat.model}"
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        await self.query_one(ConversationView).render_history(self.chat.messages)
        self._refresh_attachments()
        self.query_one("#message_input", Input).focus()

    async def on_unmount(self) -> None:
        """Flush session state and release the HTTP client."""
        try:
            self.session.persist()
        except MultichatError as exc:
            LOGGER.warning(
                "app.persist.failed",
                extra={"event": "app.persist.failed", "error": str(exc)},
            )
        await self.dispatcher.aclose()

    def _set_busy(self, busy: bool) -> None:
        self.query_one(InputBox).set_busy(busy)
        self.query_one("#model_select", Select).disabled = busy
        self.query_one("#clear_button", Button).disabled = busy
        if busy:
            self.sub_title = f"Waiting for {self.chat.model}..."
        else:
            self.sub_title = f"Model: {self.chat.model}"

    def _refresh_attachments(self) -> None:
        self.query_one(AttachmentBar).show_attachments(self.chat.pending_attachments)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "api_key_input":
            return
        try:
            self.session.set_secret_key(event.value)
        except MultichatError as exc:
            self.notify(f"Unable to save API key: {exc}", severity="error")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            event.stop()
            self.action_send_message()

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id != "model_select" or not isinstance(event.value, str):
            return
        if event.value == self.session.selected_model_id:
            return
        try:
            self.session.select_model(event.value)
        except MultichatError as exc:
            self.notify(str(exc), severity="error")
            return
        self.sub_title = f"Model: {self.chat.model}"

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "clear_button":
            event.stop()
            self.action_clear_history()

    def on_input_box_send_requested(self, _message: InputBox.SendRequested) -> None:
        self.action_send_message()

    def on_input_box_attach_requested(self, _message: InputBox.AttachRequested) -> None:
        self.action_attach_file()

    def on_attachment_bar_remove_requested(
        self, message: AttachmentBar.RemoveRequested
    ) -> None:
        if 0 <= message.index < len(self.chat.pending_attachments):
            removed = self.chat.remove_attachment(message.index)
            self.sub_title = f"Removed {removed.name}"
        self._refresh_attachments()

    def on_message_input_paths_pasted(self, event: MessageInput.PathsPasted) -> None:
        """Treat a paste of existing file paths as an attachment request."""
        event.stop()
        self.run_worker(self.attach_paths(event.paths), group="attach")

    def action_send_message(self) -> None:
        """Action invoked by keybinding for sending a message."""
        self.run_worker(self.send_user_message(), group="send")

    def action_attach_file(self) -> None:
        def _on_dismissed(paths: list[str] | None) -> None:
            if paths:
                self.run_worker(self.attach_paths(paths), group="attach")

        self.push_screen(PathPromptScreen(), callback=_on_dismissed)

    def action_clear_history(self) -> None:
        self.run_worker(self.clear_history(), exclusive=True, group="clear")

    async def action_copy_last_message(self) -> None:
        """Copy the latest assistant reply to clipboard when available."""
        content = (self.chat.last_reply() or "").strip()
        if not content:
            self.sub_title = "No assistant message available to copy."
            return
        self.copy_to_clipboard(content)
        self.sub_title = "Copied latest assistant message."

    async def attach_paths(self, paths: list[str]) -> None:
        """Read the selected files and report any that were rejected."""
        batch = await self.chat.attach_files(
            [Path(path).expanduser() for path in paths]
        )
        for error_text in batch.error_messages():
            self.notify(error_text, severity="error", timeout=6)
        if batch.attachments:
            self.sub_title = f"Attached {len(batch.attachments)} file(s)"
        self._refresh_attachments()

    async def send_user_message(self) -> None:
        """Submit the input text with pending attachments and render the outcome."""
        input_widget = self.query_one("#message_input", Input)
        conversation = self.query_one(ConversationView)

        async def _show_user_message(message: Message) -> None:
            input_widget.value = ""
            self._set_busy(True)
            await conversation.add_message(message)

        try:
            reply = await self.chat.submit(
                input_widget.value, on_user_message=_show_user_message
            )
        except ChatBusyError:
            self.sub_title = "Busy. Wait for current request to finish."
            return
        except ValueError as exc:
            self.notify(str(exc), severity="warning")
            return
        except MultichatError as exc:
            self._set_busy(False)
            self.notify(str(exc), severity="error")
            return

        self._set_busy(False)
        await conversation.add_message(reply)
        self._refresh_attachments()
        input_widget.focus()

    async def clear_history(self) -> None:
        """Confirm with the user, then clear both the log and the view."""

        async def _confirm() -> bool:
            return bool(await self.push_screen_wait(ConfirmScreen(CLEAR_PROMPT)))

        try:
            cleared = await self.chat.clear_history(_confirm)
        except MultichatError as exc:
            self.notify(f"Unable to clear history: {exc}", severity="error")
            return
        if cleared:
            await self.query_one(ConversationView).clear()
            self.sub_title = "Chat history cleared."
