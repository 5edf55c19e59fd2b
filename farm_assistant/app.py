"""Main Textual application for the farming assistant chat."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Footer, Header, Input

from .config import load_config
from .exceptions import AttachmentValidationError
from .i18n import translate
from .logging_utils import configure_logging
from .message_store import ConversationState
from .models import Attachment
from .screens import AttachPathScreen, WeatherScreen
from .session import ConversationSession
from .state import TurnPhase
from .task_manager import TaskManager
from .weather import WeatherRelay
from .widgets.conversation import ConversationView, palette_from_config
from .widgets.input_box import InputBox
from .widgets.status_bar import StatusBar

LOGGER = logging.getLogger(__name__)


class FarmAssistantApp(App[None]):
    """Terminal chat with the farming strategy assistant."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #input_row {
        height: auto;
    }

    #message_input {
        width: 1fr;
        margin-left: 1;
    }

    #attach_button, #send_button {
        min-width: 10;
    }

    #send_button {
        margin-left: 1;
    }

    #status_bar {
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    MessageBubble {
        width: 85%;
        padding: 1 2;
        border: round $panel;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "attach_file": "Attach",
        "show_weather": "Weather",
        "quit": "Quit",
        "scroll_up": "Scroll Up",
        "scroll_down": "Scroll Down",
    }

    def __init__(
        self,
        config_path: Path | None = None,
        session: ConversationSession | None = None,
    ) -> None:
        self.config = load_config(config_path)
        configure_logging(self.config["logging"])
        self.locale = str(self.config["app"]["locale"])
        self.window_title = str(self.config["app"]["title"])
        self.show_timestamps = bool(self.config["ui"]["show_timestamps"])
        self.palette = palette_from_config(self.config["ui"])
        self.session = session or ConversationSession.from_config(self.config)
        weather_cfg = self.config["weather"]
        self.weather = WeatherRelay(
            upstream_url=str(weather_cfg["upstream_url"]),
            timeout=float(weather_cfg["timeout_seconds"]),
        )
        self._binding_specs = self._binding_specs_from_config(self.config)
        self._ui_tasks = TaskManager()
        self._render_lock = asyncio.Lock()
        super().__init__()

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="app-root"):
            yield ConversationView(
                locale=self.locale,
                show_timestamps=self.show_timestamps,
                palette=self.palette,
                id="conversation",
            )
            yield InputBox(locale=self.locale)
            yield StatusBar(locale=self.locale, id="status_bar")
        yield Footer()

    async def on_mount(self) -> None:
        self.title = self.window_title
        self.sub_title = translate("chat.title", self.locale)
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )

        self._w_input = self.query_one("#message_input", Input)
        self._w_input_box = self.query_one(InputBox)
        self._w_conversation = self.query_one(ConversationView)
        self.query_one("#app-root", Container).styles.background = self.palette[
            "background_color"
        ]

        self.session.store.subscribe(self._on_state_changed)
        self.session.stager.on_change(self._on_staged_changed)
        await self._render_state(self.session.store.state)
        self._w_input.focus()

    def _on_state_changed(self, state: ConversationState) -> None:
        self._ui_tasks.add(asyncio.create_task(self._render_state(state)))

    async def _render_state(self, state: ConversationState) -> None:
        async with self._render_lock:
            await self._w_conversation.sync(state.history, state.pending)
            self._refresh_status(state)

    def _refresh_status(self, state: ConversationState) -> None:
        phase = TurnPhase.SENDING if state.pending else self.session.lifecycle.phase
        self.query_one("#status_bar", StatusBar).set_status(
            phase=phase, message_count=state.message_count
        )

    def _on_staged_changed(self, attachment: Attachment | None) -> None:
        self._w_input_box.set_staged(attachment.display_name if attachment else None)

    def send_user_message(self) -> None:
        """Submit the current draft; refused silently when empty or pending."""
        task = self.session.send(self._w_input.value)
        if task is not None:
            self._w_input_box.clear_input()

    async def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "message_input":
            await self.session.composer.update_draft(event.value)
            self._refresh_status(self.session.store.state)

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            event.stop()
            self.send_user_message()

    async def on_input_box_send_requested(self, _message: InputBox.SendRequested) -> None:
        self.send_user_message()

    async def on_input_box_attach_requested(
        self, _message: InputBox.AttachRequested
    ) -> None:
        await self.action_attach_file()

    def _on_attach_dismissed(self, path: str | None) -> None:
        if not path:
            return
        try:
            attachment = self.session.stager.stage_path(path)
        except AttachmentValidationError as exc:
            self.sub_title = translate("attachment.invalid", self.locale, reason=str(exc))
            LOGGER.warning(
                "app.attachment.rejected",
                extra={"event": "app.attachment.rejected", "reason": str(exc)},
            )
            return
        self.sub_title = translate(
            "attachment.staged", self.locale, name=attachment.display_name
        )

    async def action_send_message(self) -> None:
        self.send_user_message()

    async def action_attach_file(self) -> None:
        self.push_screen(
            AttachPathScreen(translate("attachment.prompt", self.locale)),
            callback=self._on_attach_dismissed,
        )

    async def action_show_weather(self) -> None:
        status, data = await self.weather.fetch()
        self.push_screen(
            WeatherScreen(
                translate("weather.title", self.locale),
                data if status == 200 else None,
                notice=translate("weather.unavailable", self.locale),
            )
        )

    async def action_quit(self) -> None:
        self.exit()

    def action_scroll_up(self) -> None:
        self._w_conversation.scroll_relative(y=-10, animate=False)

    def action_scroll_down(self) -> None:
        self._w_conversation.scroll_relative(y=10, animate=False)

    async def on_unmount(self) -> None:
        """Tear down the session before the widgets it renders into go away."""
        self.session.store.unsubscribe(self._on_state_changed)
        await self.session.close()
        await self._ui_tasks.cancel_all()
        await self.weather.aclose()
