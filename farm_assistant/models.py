"""Value types shared by the conversation store, composer, and gateway."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union


class Sender(str, Enum):
    """Author of a message; fixed at creation."""

    USER = "user"
    ASSISTANT = "assistant"


class FailureKind(str, Enum):
    """Internal taxonomy of gateway failures, used for logging only."""

    NETWORK = "network"
    SERVER = "server"
    MALFORMED_RESPONSE = "malformed-response"


@dataclass(frozen=True)
class Attachment:
    """A staged file reference carried by a user message. Nothing is uploaded."""

    kind: str
    reference: str
    display_name: str


@dataclass(frozen=True)
class Message:
    """A single entry of the append-only conversation history."""

    id: int
    content: str
    sender: Sender
    created_at: datetime
    attachments: tuple[Attachment, ...] = ()

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)


@dataclass(frozen=True)
class AssistantReply:
    """Successful gateway outcome.

    ``timestamp`` is ``None`` when the server did not report one; the store
    then uses the local completion time.
    """

    text: str
    timestamp: datetime | None = None


@dataclass(frozen=True)
class GatewayFailure:
    """Failed gateway outcome; rendered as a fixed apology in the history."""

    kind: FailureKind
    detail: str = ""
    status_code: int | None = None


ExchangeResult = Union[AssistantReply, GatewayFailure]
