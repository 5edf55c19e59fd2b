"""One mounted conversation: store, stager, composer, and gateway wired together."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from .attachments import AttachmentStager
from .composer import MessageComposer
from .gateway import AssistantGateway
from .message_store import ConversationStore
from .state import StateManager
from .task_manager import TaskManager

LOGGER = logging.getLogger(__name__)


class ConversationSession:
    """Own the in-memory conversation for the lifetime of a mounted view.

    Nothing here outlives :meth:`close`; an exchange that resolves after
    teardown is dropped instead of touching the closed store.
    """

    def __init__(
        self,
        gateway: AssistantGateway,
        *,
        store: ConversationStore | None = None,
        stager: AttachmentStager | None = None,
        lifecycle: StateManager | None = None,
    ) -> None:
        self.gateway = gateway
        self.store = store or ConversationStore()
        self.stager = stager or AttachmentStager()
        self.lifecycle = lifecycle or StateManager()
        self.composer = MessageComposer(
            self.store, self.stager, self.gateway, lifecycle=self.lifecycle
        )
        self.tasks = TaskManager()
        self._closed = False

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> ConversationSession:
        """Build a session from a validated configuration mapping."""
        assistant_cfg = config.get("assistant", {})
        attachments_cfg = config.get("attachments", {})
        gateway = AssistantGateway(
            endpoint=str(assistant_cfg.get("endpoint", "")),
            timeout=float(assistant_cfg.get("timeout_seconds", 30)),
        )
        stager = AttachmentStager(
            max_bytes=int(attachments_cfg.get("max_bytes", 10 * 1024 * 1024)),
        )
        return cls(gateway, stager=stager)

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, raw_text: str | None = None) -> asyncio.Task[Any] | None:
        """Start a turn and schedule its exchange; None when the turn is refused."""
        if self._closed:
            return None
        turn = self.composer.begin_submit(raw_text)
        if turn is None:
            return None
        task = asyncio.create_task(
            self.composer.complete(turn), name=f"exchange-{turn.message_id}"
        )
        return self.tasks.add(task)

    async def close(self) -> None:
        """Tear down the session; in-flight exchanges become no-ops."""
        if self._closed:
            return
        self._closed = True
        self.store.close()
        await self.tasks.cancel_all()
        await self.gateway.aclose()
        LOGGER.info("session.closed", extra={"event": "session.closed"})
