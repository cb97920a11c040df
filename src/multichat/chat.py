"""Chat controller: the call site tying session, attachments and dispatcher together."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
import logging
from pathlib import Path

from .attachments import Attachment, AttachmentBatch, AttachmentProcessor
from .dispatcher import RequestDispatcher
from .exceptions import ChatBusyError, MultichatError
from .messages import Message
from .session import SessionState
from .state import ConversationState, StateManager

LOGGER = logging.getLogger(__name__)


class ChatClient:
    """Stateful chat wrapper: pending attachments, the send guard, and error entries."""

    def __init__(
        self,
        session: SessionState,
        dispatcher: RequestDispatcher,
        processor: AttachmentProcessor | None = None,
    ) -> None:
        self.session = session
        self.dispatcher = dispatcher
        self.processor = processor or AttachmentProcessor()
        self.state = StateManager()
        self._pending: list[Attachment] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        return self.session.messages

    @property
    def model(self) -> str:
        return self.session.selected_model_id

    @property
    def pending_attachments(self) -> tuple[Attachment, ...]:
        return tuple(self._pending)

    @property
    def is_busy(self) -> bool:
        return self.state.state == ConversationState.SENDING

    async def attach_files(self, paths: Iterable[str | Path]) -> AttachmentBatch:
        """Process a file selection and queue whatever was accepted."""
        batch = await self.processor.process_batch(paths)
        self._pending.extend(batch.attachments)
        return batch

    def remove_attachment(self, index: int) -> Attachment:
        return self._pending.pop(index)

    async def _begin(self) -> bool:
        if await self.state.transition_if(ConversationState.IDLE, ConversationState.SENDING):
            return True
        return await self.state.transition_if(
            ConversationState.ERROR, ConversationState.SENDING
        )

    async def submit(
        self,
        text: str,
        on_user_message: Callable[[Message], Awaitable[None]] | None = None,
    ) -> Message:
        """Send ``text`` with the pending attachments and return the appended reply.

        The returned message is the assistant reply, or a ``system`` entry
        carrying the error text when the request failed. ``on_user_message``
        runs once the user entry is logged and before the request goes out.
        """
        content = text.strip()
        if not self.session.secret_key:
            raise ValueError("An API key is required before sending.")
        if not content and not self._pending:
            raise ValueError("Cannot send an empty message.")
        if not await self._begin():
            raise ChatBusyError("A request is already in flight.")

        LOGGER.info(
            "chat.state.transition",
            extra={"event": "chat.state.transition", "to_state": "SENDING"},
        )
        attachments = tuple(self._pending)
        final_state = ConversationState.IDLE
        try:
            user_message = Message.user(content, attachments)
            self.session.append(user_message)
            if on_user_message is not None:
                await on_user_message(user_message)
            try:
                reply_text = await self.dispatcher.send(
                    self.session.selected_model_id,
                    self.session.secret_key,
                    self.session.messages,
                    attachments,
                )
            except MultichatError as exc:
                LOGGER.warning(
                    "chat.request.failed",
                    extra={
                        "event": "chat.request.failed",
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                    },
                )
                final_state = ConversationState.ERROR
                reply = Message.system(f"Error: {exc}")
                self.session.append(reply)
                return reply

            reply = Message.assistant(reply_text)
            self.session.append(reply)
            self._pending.clear()
            LOGGER.info(
                "chat.request.complete",
                extra={"event": "chat.request.complete", "model": self.model},
            )
            return reply
        finally:
            await self.state.transition_to(final_state)

    async def clear_history(self, confirm: Callable[[], Awaitable[bool]]) -> bool:
        """Clear the log only after ``confirm`` resolves truthy."""
        if not await confirm():
            return False
        self.session.clear()
        return True

    def last_reply(self) -> str | None:
        for message in reversed(self.session.messages):
            if message.role == "assistant":
                return message.content
        return None
