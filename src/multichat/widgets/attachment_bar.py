"""Strip listing the attachments queued for the next send."""

from __future__ import annotations

from collections.abc import Sequence

from textual.message import Message
from textual.widgets import OptionList

from ..attachments import Attachment


class AttachmentBar(OptionList):
    """Pending attachments; selecting one asks the app to remove it."""

    DEFAULT_CSS = """
    AttachmentBar {
        height: auto;
        max-height: 6;
    }
    AttachmentBar.empty {
        display: none;
    }
    """

    class RemoveRequested(Message):
        """Posted when the user selects an attachment to drop."""

        def __init__(self, index: int) -> None:
            super().__init__()
            self.index = index

    def show_attachments(self, attachments: Sequence[Attachment]) -> None:
        self.clear_options()
        self.add_options(
            f"✕ {item.name}  [{item.kind}, {item.mime_type}]" for item in attachments
        )
        self.set_class(not attachments, "empty")

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        event.stop()
        self.post_message(self.RemoveRequested(event.option_index))
