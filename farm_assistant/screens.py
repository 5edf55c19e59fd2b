"""Modal screens for attachment selection and the weather panel."""

from __future__ import annotations

from typing import Any

from rich.pretty import Pretty
from textual.app import ComposeResult
from textual.containers import Container, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Static


class WeatherScreen(ModalScreen[None]):
    """Show the relayed weather payload, or a notice when the relay failed."""

    CSS = """
    WeatherScreen {
        align: center middle;
    }

    #weather-dialog {
        width: 80;
        max-width: 120;
        max-height: 28;
        padding: 1 2;
        border: round $success;
        background: $surface;
    }

    #weather-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #weather-body {
        height: auto;
        max-height: 20;
    }

    #weather-notice {
        color: $warning;
    }
    """

    BINDINGS = [
        ("escape", "dismiss_screen", "Close"),
        ("enter", "dismiss_screen", "Close"),
    ]

    def __init__(self, title: str, data: Any = None, notice: str = "") -> None:
        super().__init__()
        self._title = title
        self._data = data
        self._notice = notice

    def compose(self) -> ComposeResult:
        with Container(id="weather-dialog"):
            yield Static(self._title, id="weather-title")
            with VerticalScroll(id="weather-body"):
                if self._data is None:
                    yield Static(self._notice, id="weather-notice")
                else:
                    yield Static(Pretty(self._data, expand_all=True), id="weather-data")
            yield Button("OK", id="weather-ok", variant="primary")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "weather-ok":
            event.stop()
            self.dismiss(None)

    def action_dismiss_screen(self) -> None:
        self.dismiss(None)


class AttachPathScreen(ModalScreen[str | None]):
    """Prompt for the path of the file to stage for the next turn.

    Dismisses with the entered path, or None when cancelled.
    """

    CSS = """
    AttachPathScreen {
        align: center middle;
    }

    #attach-dialog {
        width: 70;
        height: auto;
        padding: 1 2;
        border: round $panel;
        background: $surface;
    }

    #attach-title {
        padding-bottom: 1;
        text-style: bold;
    }

    #attach-input {
        width: 100%;
        margin-bottom: 1;
    }
    """

    def __init__(self, title: str, placeholder: str = "~/soil-analysis.jpg") -> None:
        super().__init__()
        self._title = title
        self._placeholder = placeholder

    def compose(self) -> ComposeResult:
        with Container(id="attach-dialog"):
            yield Static(self._title, id="attach-title")
            yield Input(placeholder=self._placeholder, id="attach-input")
            yield Static("Enter to attach | Esc to cancel", id="attach-help")

    def on_mount(self) -> None:
        self.query_one("#attach-input", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "attach-input":
            return
        event.stop()
        value = event.value.strip()
        self.dismiss(value or None)

    def on_key(self, event: Any) -> None:  # noqa: ANN401
        if str(getattr(event, "key", "")).lower() == "escape":
            self.dismiss(None)
