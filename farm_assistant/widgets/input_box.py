"""Input row with message field, attach and send buttons, and staged-file badge."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Input, Label

from ..i18n import translate


class InputBox(Vertical):
    """Input region for composing the next turn."""

    DEFAULT_CSS = """
    InputBox {
        height: auto;
    }
    InputBox #attachment_badge {
        color: $success;
        padding: 0 1;
    }
    InputBox #attachment_badge.hidden {
        display: none;
    }
    """

    class AttachRequested(Message):
        """Posted when the user clicks the attach button."""

    class SendRequested(Message):
        """Posted when the user clicks the send button."""

    def __init__(self, locale: str = "en", **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.locale = locale

    def compose(self) -> ComposeResult:
        yield Label("", id="attachment_badge", classes="hidden")
        with Horizontal(id="input_row"):
            yield Button(translate("input.attach", self.locale), id="attach_button")
            yield Input(
                placeholder=translate("input.placeholder", self.locale),
                id="message_input",
            )
            yield Button(
                translate("input.send", self.locale),
                id="send_button",
                variant="success",
            )

    def set_staged(self, display_name: str | None) -> None:
        """Show or hide the staged-attachment badge."""
        badge = self.query_one("#attachment_badge", Label)
        attach = self.query_one("#attach_button", Button)
        if display_name:
            badge.update(translate("attachment.staged", self.locale, name=display_name))
            badge.remove_class("hidden")
            attach.variant = "primary"
        else:
            badge.update("")
            badge.add_class("hidden")
            attach.variant = "default"

    def clear_input(self) -> None:
        self.query_one("#message_input", Input).value = ""

    def on_button_pressed(self, event: Button.Pressed) -> None:
        """Forward button clicks as typed messages."""
        if event.button.id == "attach_button":
            event.stop()
            self.post_message(self.AttachRequested())
        elif event.button.id == "send_button":
            event.stop()
            self.post_message(self.SendRequested())
