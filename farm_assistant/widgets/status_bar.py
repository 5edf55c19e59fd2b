"""Status bar widget for turn phase and history size."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widgets import Label, Static

from ..i18n import translate
from ..state import TurnPhase

_PHASE_KEYS = {
    TurnPhase.IDLE: "status.idle",
    TurnPhase.COMPOSING: "status.composing",
    TurnPhase.SENDING: "status.sending",
    TurnPhase.SUCCEEDED: "status.idle",
    TurnPhase.FAILED: "status.idle",
}


class StatusBar(Static):
    """Render compact runtime status: ``● Ready | Messages: 3``."""

    DEFAULT_CSS = """
    StatusBar {
        layout: horizontal;
        height: auto;
    }
    StatusBar Label {
        margin-right: 1;
    }
    """

    def __init__(self, locale: str = "en", **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.locale = locale
        self.current_phase = TurnPhase.IDLE

    def compose(self) -> ComposeResult:
        yield Label(self.phase_text(TurnPhase.IDLE), id="status_phase")
        yield Label("|", id="status_sep")
        yield Label(self.count_text(0), id="status_messages")

    def phase_text(self, phase: TurnPhase) -> str:
        icon = "🟡" if phase is TurnPhase.SENDING else "🟢"
        return f"{icon} {translate(_PHASE_KEYS[phase], self.locale)}"

    def count_text(self, count: int) -> str:
        return translate("status.messages", self.locale, count=count)

    def set_status(self, *, phase: TurnPhase, message_count: int) -> None:
        self.current_phase = phase
        self.query_one("#status_phase", Label).update(self.phase_text(phase))
        self.query_one("#status_messages", Label).update(self.count_text(message_count))
