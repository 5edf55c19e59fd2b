"""Domain exception hierarchy for the farm assistant."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import FailureKind


class FarmAssistantError(RuntimeError):
    """Base class for all domain-level assistant errors."""


class SubmissionRejectedError(FarmAssistantError):
    """Raised when a user turn cannot be appended to the conversation."""


class EmptySubmissionError(SubmissionRejectedError):
    """Raised when a turn has neither text nor a staged attachment."""


class TurnInFlightError(SubmissionRejectedError):
    """Raised when a turn is submitted while another is still pending."""


class StoreClosedError(FarmAssistantError):
    """Raised when a torn-down conversation store is asked to accept a turn."""


class AttachmentValidationError(FarmAssistantError):
    """Raised when a selected file cannot be staged as an attachment."""


class ConfigValidationError(FarmAssistantError):
    """Raised when configuration cannot be validated safely."""


class GatewayError(FarmAssistantError):
    """Raised inside the gateway when an exchange fails.

    Never escapes :class:`~farm_assistant.gateway.AssistantGateway`; it is
    converted into a :class:`~farm_assistant.models.GatewayFailure` value.
    """

    def __init__(
        self, kind: FailureKind, detail: str = "", status_code: int | None = None
    ) -> None:
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
