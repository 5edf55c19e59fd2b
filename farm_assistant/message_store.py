"""Append-only conversation history with explicit state transitions."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
import logging

from .exceptions import EmptySubmissionError, StoreClosedError, TurnInFlightError
from .models import (
    AssistantReply,
    Attachment,
    ExchangeResult,
    GatewayFailure,
    Message,
    Sender,
)

LOGGER = logging.getLogger(__name__)

GREETING = (
    "Hello! I'm your farming assistant for Niigata. "
    "How can I help you with strategic farming planning?"
)
FALLBACK_REPLY = "I'm sorry, I couldn't process your message. Please try again later."

StateObserver = Callable[["ConversationState"], None]


def _local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True)
class ConversationState:
    """Immutable snapshot of one conversation session."""

    history: tuple[Message, ...]
    pending: bool = False
    next_id: int = 1

    @property
    def message_count(self) -> int:
        return len(self.history)


def initial_state(greeting: str = GREETING, now: datetime | None = None) -> ConversationState:
    """Return a fresh state seeded with the assistant greeting."""
    first = Message(
        id=1,
        content=greeting,
        sender=Sender.ASSISTANT,
        created_at=now or _local_now(),
    )
    return ConversationState(history=(first,), pending=False, next_id=2)


def append_user_turn(
    state: ConversationState,
    content: str,
    attachment: Attachment | None = None,
    now: datetime | None = None,
) -> tuple[ConversationState, int]:
    """Append a user message and mark the conversation as pending.

    Raises EmptySubmissionError when there is neither text nor an attachment,
    and TurnInFlightError when a previous turn has not resolved yet.
    """
    normalized = content.strip()
    if not normalized and attachment is None:
        raise EmptySubmissionError("A turn needs text or an attachment.")
    if state.pending:
        raise TurnInFlightError("A previous turn is still awaiting its reply.")

    message = Message(
        id=state.next_id,
        content=normalized,
        sender=Sender.USER,
        created_at=now or _local_now(),
        attachments=(attachment,) if attachment is not None else (),
    )
    new_state = ConversationState(
        history=state.history + (message,),
        pending=True,
        next_id=state.next_id + 1,
    )
    return new_state, message.id


def append_assistant_result(
    state: ConversationState,
    result: ExchangeResult,
    now: datetime | None = None,
) -> ConversationState:
    """Append exactly one assistant message and clear the pending flag."""
    completed_at = now or _local_now()
    if isinstance(result, AssistantReply):
        content = result.text
        created_at = result.timestamp or completed_at
    elif isinstance(result, GatewayFailure):
        content = FALLBACK_REPLY
        created_at = completed_at
    else:
        raise TypeError(f"Unsupported exchange result: {type(result).__name__}")

    message = Message(
        id=state.next_id,
        content=content,
        sender=Sender.ASSISTANT,
        created_at=created_at,
    )
    return replace(
        state,
        history=state.history + (message,),
        pending=False,
        next_id=state.next_id + 1,
    )


def prior_context(history: tuple[Message, ...]) -> tuple[Message, ...]:
    """Return history without its final entry (the turn being sent)."""
    return history[:-1]


class ConversationStore:
    """Hold the current ConversationState and notify observers on change."""

    def __init__(self, state: ConversationState | None = None) -> None:
        self._state = state or initial_state()
        self._observers: list[StateObserver] = []
        self._closed = False

    @property
    def state(self) -> ConversationState:
        return self._state

    @property
    def history(self) -> tuple[Message, ...]:
        return self._state.history

    @property
    def pending(self) -> bool:
        return self._state.pending

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, observer: StateObserver) -> None:
        """Register a callback invoked with every new snapshot."""
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: StateObserver) -> None:
        try:
            self._observers.remove(observer)
        except ValueError:
            pass

    def append_user_turn(
        self, content: str, attachment: Attachment | None = None
    ) -> int:
        """Append a user turn and return its message id."""
        if self._closed:
            raise StoreClosedError("Conversation store has been closed.")
        new_state, message_id = append_user_turn(self._state, content, attachment)
        LOGGER.info(
            "store.turn.appended",
            extra={
                "event": "store.turn.appended",
                "message_id": message_id,
                "has_attachment": attachment is not None,
                "history_length": new_state.message_count,
            },
        )
        self._commit(new_state)
        return message_id

    def append_assistant_result(self, result: ExchangeResult) -> None:
        """Append the assistant side of a turn; a no-op once closed."""
        if self._closed:
            LOGGER.info(
                "store.result.dropped",
                extra={"event": "store.result.dropped", "reason": "closed"},
            )
            return
        new_state = append_assistant_result(self._state, result)
        LOGGER.info(
            "store.result.appended",
            extra={
                "event": "store.result.appended",
                "outcome": "reply" if isinstance(result, AssistantReply) else "failure",
                "history_length": new_state.message_count,
            },
        )
        self._commit(new_state)

    def close(self) -> None:
        """Mark the store as torn down and drop all observers."""
        self._closed = True
        self._observers.clear()

    def _commit(self, new_state: ConversationState) -> None:
        self._state = new_state
        for observer in list(self._observers):
            try:
                observer(new_state)
            except Exception as exc:
                LOGGER.error(
                    "store.observer.failed",
                    extra={"event": "store.observer.failed", "error": str(exc)},
                )
