"""Scrollable conversation view widget."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from textual.containers import VerticalScroll
from textual.widgets import Static

from ..i18n import translate
from ..models import Message, Sender
from .message import MessageBubble

PALETTE_KEYS = (
    "background_color",
    "user_message_color",
    "assistant_message_color",
    "border_color",
)


def palette_from_config(ui_config: Mapping[str, Any]) -> dict[str, str]:
    """Pick the colour settings out of the ``[ui]`` config section."""
    return {key: str(ui_config[key]) for key in PALETTE_KEYS if key in ui_config}


def apply_palette(bubble: MessageBubble, palette: Mapping[str, str]) -> None:
    """Colour a bubble by sender and give it the configured border."""
    key = (
        "user_message_color"
        if bubble.message.sender is Sender.USER
        else "assistant_message_color"
    )
    if key in palette:
        bubble.styles.background = palette[key]
    if "border_color" in palette:
        bubble.styles.border = ("round", palette["border_color"])


class ConversationView(VerticalScroll):
    """A scrollable container that mirrors the append-only history."""

    DEFAULT_CSS = """
    ConversationView > #typing-indicator {
        color: $text-muted;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        locale: str = "en",
        show_timestamps: bool = True,
        palette: Mapping[str, str] | None = None,
        **kwargs: object,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.locale = locale
        self.show_timestamps = show_timestamps
        self.palette = dict(palette or {})
        self.last_rendered_id = 0
        self._typing: Static | None = None

    def unrendered(self, history: Sequence[Message]) -> list[Message]:
        """Return history entries newer than the last rendered one."""
        return [message for message in history if message.id > self.last_rendered_id]

    async def sync(self, history: Sequence[Message], pending: bool) -> None:
        """Mount bubbles for new messages and toggle the typing indicator."""
        for message in self.unrendered(history):
            await self.add_message(message)
        await self.set_typing(pending)
        self.scroll_end(animate=True)

    async def add_message(self, message: Message) -> MessageBubble:
        """Create and mount a bubble for ``message``."""
        bubble = MessageBubble(
            message, locale=self.locale, show_timestamps=self.show_timestamps
        )
        bubble.add_class(f"message-{message.sender.value}")
        apply_palette(bubble, self.palette)
        if self._typing is not None:
            await self.mount(bubble, before=self._typing)
        else:
            await self.mount(bubble)
        self.last_rendered_id = max(self.last_rendered_id, message.id)
        return bubble

    async def set_typing(self, visible: bool) -> None:
        if visible and self._typing is None:
            self._typing = Static(translate("typing", self.locale), id="typing-indicator")
            await self.mount(self._typing)
        elif not visible and self._typing is not None:
            await self._typing.remove()
            self._typing = None
