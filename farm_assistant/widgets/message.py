"""Message bubble widget for conversation rendering."""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..i18n import translate
from ..models import Message, Sender


def format_time(message: Message) -> str:
    """Return the ``HH:MM`` display time of a message in local time."""
    return message.created_at.astimezone().strftime("%H:%M")


class MessageBubble(Vertical):
    """Render one history entry: sender, attachments, content, and time."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
        margin-bottom: 1;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > #attachment-block {
        color: $text-muted;
        padding: 0 1;
        border-left: solid $panel;
    }
    MessageBubble > #content-block {
        height: auto;
    }
    """

    def __init__(
        self,
        message: Message,
        locale: str = "en",
        show_timestamps: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.message = message
        self.locale = locale
        self.show_timestamps = show_timestamps
        self.add_class(f"role-{message.sender.value}")

    @property
    def role_prefix(self) -> str:
        """Return a human-friendly sender label."""
        key = "sender.user" if self.message.sender is Sender.USER else "sender.assistant"
        return translate(key, self.locale)

    def header_text(self) -> str:
        if self.show_timestamps:
            return f"**{self.role_prefix}**  _{format_time(self.message)}_"
        return f"**{self.role_prefix}**"

    def attachment_text(self) -> str:
        return "\n".join(
            f"📎 {attachment.display_name}" for attachment in self.message.attachments
        )

    def compose(self) -> ComposeResult:
        yield Static(Markdown(self.header_text()), id="header-block")
        if self.message.has_attachments:
            yield Static(self.attachment_text(), id="attachment-block")
        text = self.message.content.rstrip()
        yield Static(Markdown(text) if text else "", id="content-block")
