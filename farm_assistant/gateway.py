"""Async HTTP gateway to the remote farming assistant endpoint."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from datetime import datetime, timezone
import logging
import time
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from .exceptions import GatewayError
from .models import (
    AssistantReply,
    ExchangeResult,
    FailureKind,
    GatewayFailure,
    Message,
    Sender,
)

LOGGER = logging.getLogger(__name__)

# Hard cap on prior messages sent as context; bounds request size and backend cost.
CONTEXT_WINDOW = 10

EMPTY_REPLY = "Sorry, I couldn't generate a response. Please try again."

_ROLE_BY_SENDER = {
    Sender.USER: "user",
    Sender.ASSISTANT: "assistant",
}


class AssistantResponseBody(BaseModel):
    """Expected JSON body of a successful assistant call."""

    model_config = ConfigDict(extra="ignore")

    response: StrictStr
    timestamp: Any = None


def context_window(
    prior_history: Sequence[Message], limit: int = CONTEXT_WINDOW
) -> list[dict[str, str]]:
    """Map the most recent ``limit`` prior messages to ``{role, content}``, oldest first."""
    recent = list(prior_history)[-limit:] if limit > 0 else []
    return [
        {"role": _ROLE_BY_SENDER[message.sender], "content": message.content}
        for message in recent
    ]


def build_payload(user_text: str, prior_history: Sequence[Message]) -> dict[str, Any]:
    """Build the outbound JSON body for one exchange."""
    return {"message": user_text, "history": context_window(prior_history)}


def parse_timestamp(value: Any) -> datetime | None:
    """Interpret a server timestamp (epoch milliseconds or ISO-8601 string).

    Returns None when the value is absent or cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).astimezone()
        if isinstance(value, str):
            candidate = value.strip()
            if not candidate:
                return None
            try:
                millis = float(candidate)
            except ValueError:
                parsed = datetime.fromisoformat(candidate)
                if parsed.tzinfo is None:
                    parsed = parsed.astimezone()
                return parsed
            return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).astimezone()
    except (ValueError, OverflowError, OSError):
        return None
    return None


class AssistantGateway:
    """Perform one request/response exchange per user turn.

    The gateway never retries and never raises for transport or protocol
    problems: every failure is returned as a :class:`GatewayFailure`.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self._timeout = httpx.Timeout(timeout)
        if client is not None:
            self._client = client
            self._owns_client = False
        else:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True

    async def __aenter__(self) -> AssistantGateway:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client when this gateway created it."""
        if self._owns_client:
            await self._client.aclose()

    @staticmethod
    def build_payload(user_text: str, prior_history: Sequence[Message]) -> dict[str, Any]:
        return build_payload(user_text, prior_history)

    async def exchange(
        self,
        user_text: str,
        prior_history: Sequence[Message],
        *,
        has_attachment: bool = False,
    ) -> ExchangeResult:
        """Send one turn and return the reply or a failure outcome."""
        payload = self.build_payload(user_text, prior_history)
        started = time.monotonic()
        LOGGER.info(
            "gateway.exchange.start",
            extra={
                "event": "gateway.exchange.start",
                "context_messages": len(payload["history"]),
                "has_attachment": has_attachment,
            },
        )
        try:
            reply = await self._post(payload)
        except asyncio.CancelledError:
            LOGGER.info(
                "gateway.exchange.cancelled",
                extra={"event": "gateway.exchange.cancelled"},
            )
            raise
        except GatewayError as exc:
            LOGGER.warning(
                "gateway.exchange.failed",
                extra={
                    "event": "gateway.exchange.failed",
                    "kind": exc.kind.value,
                    "detail": exc.detail,
                    "status_code": exc.status_code,
                    "elapsed_ms": int((time.monotonic() - started) * 1000),
                },
            )
            return GatewayFailure(
                kind=exc.kind, detail=exc.detail, status_code=exc.status_code
            )

        LOGGER.info(
            "gateway.exchange.complete",
            extra={
                "event": "gateway.exchange.complete",
                "elapsed_ms": int((time.monotonic() - started) * 1000),
                "server_timestamp": reply.timestamp is not None,
            },
        )
        return reply

    async def _post(self, payload: dict[str, Any]) -> AssistantReply:
        try:
            response = await self._client.post(
                self.endpoint, json=payload, timeout=self._timeout
            )
        except Exception as exc:  # noqa: BLE001 - transport can fail in many ways.
            raise self._map_exception(exc) from exc

        if not response.is_success:
            raise GatewayError(
                FailureKind.SERVER,
                f"Assistant endpoint returned HTTP {response.status_code}.",
                status_code=response.status_code,
            )
        return self._parse_response(response)

    def _map_exception(self, exc: Exception) -> GatewayError:
        if isinstance(exc, GatewayError):
            return exc
        if isinstance(exc, httpx.TimeoutException):
            return GatewayError(
                FailureKind.NETWORK,
                f"Request to {self.endpoint} timed out after {self.timeout}s.",
            )
        if isinstance(exc, httpx.TransportError):
            return GatewayError(
                FailureKind.NETWORK, f"Unable to reach {self.endpoint}: {exc}"
            )
        return GatewayError(
            FailureKind.NETWORK, f"Request to {self.endpoint} did not complete: {exc}"
        )

    @staticmethod
    def _parse_response(response: httpx.Response) -> AssistantReply:
        try:
            data = response.json()
        except ValueError as exc:
            raise GatewayError(
                FailureKind.MALFORMED_RESPONSE, "Response body is not valid JSON."
            ) from exc

        if not isinstance(data, dict):
            raise GatewayError(
                FailureKind.MALFORMED_RESPONSE, "Response body is not a JSON object."
            )
        try:
            body = AssistantResponseBody.model_validate(data)
        except ValidationError as exc:
            raise GatewayError(
                FailureKind.MALFORMED_RESPONSE,
                "Response body is missing a string 'response' field.",
            ) from exc

        text = body.response if body.response.strip() else EMPTY_REPLY
        return AssistantReply(text=text, timestamp=parse_timestamp(body.timestamp))
