"""User input buffer and the send path for a single conversation."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING

from .exceptions import StoreClosedError, SubmissionRejectedError
from .message_store import ConversationStore, prior_context
from .models import (
    AssistantReply,
    Attachment,
    ExchangeResult,
    FailureKind,
    GatewayFailure,
    Message,
)
from .state import StateManager, TurnPhase

if TYPE_CHECKING:
    from .attachments import AttachmentStager
    from .gateway import AssistantGateway

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingTurn:
    """A user turn that has been appended and awaits its exchange."""

    message_id: int
    content: str
    attachment: Attachment | None
    prior_history: tuple[Message, ...]


class MessageComposer:
    """Validate user input and hand accepted turns to the gateway.

    Submissions are refused while a previous turn is pending, so at most one
    exchange is ever in flight for a store.
    """

    def __init__(
        self,
        store: ConversationStore,
        stager: AttachmentStager,
        gateway: AssistantGateway,
        lifecycle: StateManager | None = None,
    ) -> None:
        self.store = store
        self.stager = stager
        self.gateway = gateway
        self.lifecycle = lifecycle or StateManager()
        self._draft = ""

    @property
    def draft(self) -> str:
        """Current contents of the input buffer."""
        return self._draft

    def set_draft(self, text: str) -> None:
        self._draft = text

    async def update_draft(self, text: str) -> None:
        """Set the buffer and move between Idle and Composing accordingly."""
        self._draft = text
        if text.strip() or self.stager.has_staged():
            await self.lifecycle.transition_if(TurnPhase.IDLE, TurnPhase.COMPOSING)
        else:
            await self.lifecycle.transition_if(TurnPhase.COMPOSING, TurnPhase.IDLE)

    @property
    def can_submit(self) -> bool:
        if self.store.pending or self.store.closed:
            return False
        return bool(self._draft.strip()) or self.stager.has_staged()

    def begin_submit(self, raw_text: str | None = None) -> PendingTurn | None:
        """Validate and append the user turn; return None when refused.

        Refusal leaves the history, the buffer, and the staged attachment
        untouched. On acceptance the buffer is cleared immediately, before
        any network activity.
        """
        text = self._draft if raw_text is None else raw_text
        normalized = text.strip()
        if self.store.pending:
            self._log_refusal("pending")
            return None
        if not normalized and not self.stager.has_staged():
            self._log_refusal("empty")
            return None

        attachment = self.stager.consume()
        try:
            message_id = self.store.append_user_turn(normalized, attachment)
        except (SubmissionRejectedError, StoreClosedError) as exc:
            if attachment is not None:
                self.stager.stage(attachment)
            self._log_refusal(type(exc).__name__)
            return None

        self._draft = ""
        return PendingTurn(
            message_id=message_id,
            content=normalized,
            attachment=attachment,
            prior_history=prior_context(self.store.history),
        )

    async def complete(self, turn: PendingTurn) -> ExchangeResult:
        """Run the exchange for ``turn`` and append its outcome.

        The outcome is always appended (unless the store was torn down), so
        ``pending`` is released even if the exchange is interrupted.
        """
        await self.lifecycle.transition_to(TurnPhase.SENDING)
        result: ExchangeResult = GatewayFailure(
            kind=FailureKind.NETWORK, detail="Exchange did not complete."
        )
        try:
            result = await self.gateway.exchange(
                turn.content,
                turn.prior_history,
                has_attachment=turn.attachment is not None,
            )
        except asyncio.CancelledError:
            LOGGER.info(
                "composer.exchange.cancelled",
                extra={"event": "composer.exchange.cancelled", "message_id": turn.message_id},
            )
            raise
        finally:
            self.store.append_assistant_result(result)
            await self.lifecycle.resolve(isinstance(result, AssistantReply))
        return result

    async def submit(self, raw_text: str | None = None) -> int | None:
        """Submit a turn end to end; return the user message id or None if refused."""
        turn = self.begin_submit(raw_text)
        if turn is None:
            return None
        await self.complete(turn)
        return turn.message_id

    @staticmethod
    def _log_refusal(reason: str) -> None:
        LOGGER.debug(
            "composer.submit.refused",
            extra={"event": "composer.submit.refused", "reason": reason},
        )
