"""Unit tests for individual widget classes."""

from __future__ import annotations

from datetime import datetime
import unittest

from farm_assistant.models import Attachment, Message, Sender
from farm_assistant.state import TurnPhase

try:
    from textual.color import Color
    from textual.message import Message as TextualMessage

    from farm_assistant.widgets.conversation import (
        ConversationView,
        apply_palette,
        palette_from_config,
    )
    from farm_assistant.widgets.input_box import InputBox
    from farm_assistant.widgets.message import MessageBubble, format_time
    from farm_assistant.widgets.status_bar import StatusBar
except ModuleNotFoundError:
    Color = None  # type: ignore[assignment,misc]
    apply_palette = None  # type: ignore[assignment]
    palette_from_config = None  # type: ignore[assignment]
    TextualMessage = None  # type: ignore[assignment,misc]
    ConversationView = None  # type: ignore[assignment,misc]
    InputBox = None  # type: ignore[assignment,misc]
    MessageBubble = None  # type: ignore[assignment,misc]
    StatusBar = None  # type: ignore[assignment,misc]
    format_time = None  # type: ignore[assignment]

MORNING = datetime(2025, 5, 18, 9, 5).astimezone()


def _message(
    message_id: int = 2,
    content: str = "rice",
    sender: Sender = Sender.USER,
    attachments: tuple[Attachment, ...] = (),
) -> Message:
    return Message(
        id=message_id,
        content=content,
        sender=sender,
        created_at=MORNING,
        attachments=attachments,
    )


@unittest.skipIf(MessageBubble is None, "textual is not installed")
class MessageBubbleTests(unittest.TestCase):
    """Validate MessageBubble labels and attachment rendering."""

    def test_role_class_applied(self) -> None:
        bubble = MessageBubble(_message(sender=Sender.ASSISTANT))
        self.assertIn("role-assistant", bubble.classes)

    def test_role_prefix_is_localized(self) -> None:
        self.assertEqual(MessageBubble(_message()).role_prefix, "You")
        self.assertEqual(MessageBubble(_message(), locale="ja").role_prefix, "あなた")

    def test_header_includes_time_when_enabled(self) -> None:
        bubble = MessageBubble(_message())
        self.assertEqual(bubble.header_text(), "**You**  _09:05_")
        hidden = MessageBubble(_message(), show_timestamps=False)
        self.assertEqual(hidden.header_text(), "**You**")

    def test_attachment_names_listed(self) -> None:
        report = Attachment(
            kind="image", reference="/tmp/r.jpg", display_name="Soil Analysis Report.jpg"
        )
        bubble = MessageBubble(_message(content="", attachments=(report,)))
        self.assertEqual(bubble.attachment_text(), "📎 Soil Analysis Report.jpg")

    def test_format_time(self) -> None:
        self.assertEqual(format_time(_message()), "09:05")


@unittest.skipIf(ConversationView is None, "textual is not installed")
class ConversationViewTests(unittest.TestCase):
    def test_unrendered_returns_only_new_messages(self) -> None:
        view = ConversationView()
        history = (_message(1, sender=Sender.ASSISTANT), _message(2), _message(3))
        self.assertEqual(len(view.unrendered(history)), 3)
        view.last_rendered_id = 2
        self.assertEqual([m.id for m in view.unrendered(history)], [3])

    def test_palette_colours_bubble_by_sender(self) -> None:
        palette = palette_from_config(
            {
                "user_message_color": "#2f5d3a",
                "assistant_message_color": "#25352b",
                "border_color": "#68a77a",
                "show_timestamps": True,
            }
        )
        self.assertNotIn("show_timestamps", palette)
        user_bubble = MessageBubble(_message())
        assistant_bubble = MessageBubble(_message(sender=Sender.ASSISTANT))
        apply_palette(user_bubble, palette)
        apply_palette(assistant_bubble, palette)
        self.assertEqual(user_bubble.styles.background, Color.parse("#2f5d3a"))
        self.assertEqual(assistant_bubble.styles.background, Color.parse("#25352b"))


@unittest.skipIf(StatusBar is None, "textual is not installed")
class StatusBarTests(unittest.TestCase):
    """Validate status text for each phase."""

    def test_phase_text(self) -> None:
        bar = StatusBar()
        self.assertEqual(bar.phase_text(TurnPhase.IDLE), "🟢 Ready")
        self.assertEqual(bar.phase_text(TurnPhase.SENDING), "🟡 Waiting for reply")
        self.assertEqual(bar.phase_text(TurnPhase.FAILED), "🟢 Ready")

    def test_count_text_localized(self) -> None:
        self.assertEqual(StatusBar().count_text(3), "Messages: 3")
        self.assertEqual(StatusBar(locale="ja").count_text(3), "メッセージ: 3")

    def test_starts_in_idle_phase(self) -> None:
        self.assertEqual(StatusBar().current_phase, TurnPhase.IDLE)


@unittest.skipIf(InputBox is None, "textual is not installed")
class InputBoxTests(unittest.TestCase):
    def test_locale_is_kept(self) -> None:
        self.assertEqual(InputBox(locale="ja").locale, "ja")

    def test_requests_are_textual_messages(self) -> None:
        self.assertTrue(issubclass(InputBox.SendRequested, TextualMessage))
        self.assertTrue(issubclass(InputBox.AttachRequested, TextualMessage))


if __name__ == "__main__":
    unittest.main()
