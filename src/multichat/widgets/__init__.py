"""Widget exports for the multichat UI."""

from .attachment_bar import AttachmentBar
from .conversation import ConversationView
from .input_box import InputBox, MessageInput
from .message import MessageBubble

__all__ = ["AttachmentBar", "ConversationView", "InputBox", "MessageBubble", "MessageInput"]
