"""Scrollable conversation view widget."""

from __future__ import annotations

from collections.abc import Iterable

from textual.containers import VerticalScroll

from ..messages import Message
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container that hosts message bubbles."""

    async def add_message(self, message: Message) -> MessageBubble:
        """Create, mount, and scroll to a new message bubble."""
        bubble = MessageBubble(message)
        await self.mount(bubble)
        self.scroll_end(animate=False)
        return bubble

    async def render_history(self, messages: Iterable[Message]) -> None:
        """Replace every bubble with the given log."""
        await self.clear()
        bubbles = [MessageBubble(message) for message in messages]
        if bubbles:
            await self.mount_all(bubbles)
        self.scroll_end(animate=False)

    async def clear(self) -> None:
        await self.remove_children()
