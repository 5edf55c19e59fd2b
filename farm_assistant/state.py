"""Per-turn lifecycle state machine and lock-protected transitions."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

LOGGER = logging.getLogger(__name__)


class TurnPhase(str, Enum):
    """Lifecycle of a single user turn."""

    IDLE = "IDLE"
    COMPOSING = "COMPOSING"
    SENDING = "SENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class StateManager:
    """Track the current turn phase with async lock semantics."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._phase = TurnPhase.IDLE

    @property
    def phase(self) -> TurnPhase:
        """Return the last committed phase without locking."""
        return self._phase

    async def transition_to(self, new_phase: TurnPhase) -> TurnPhase:
        """Move to a new phase and return it."""
        async with self._lock:
            self._log_transition(self._phase, new_phase)
            self._phase = new_phase
            return self._phase

    async def transition_if(
        self,
        expected_phase: TurnPhase,
        new_phase: TurnPhase,
    ) -> bool:
        """Transition only when the current phase matches ``expected_phase``."""
        async with self._lock:
            if self._phase != expected_phase:
                return False
            self._log_transition(self._phase, new_phase)
            self._phase = new_phase
            return True

    async def resolve(self, succeeded: bool) -> None:
        """Pass through Succeeded or Failed and settle back in Idle."""
        async with self._lock:
            outcome = TurnPhase.SUCCEEDED if succeeded else TurnPhase.FAILED
            self._log_transition(self._phase, outcome)
            self._log_transition(outcome, TurnPhase.IDLE)
            self._phase = TurnPhase.IDLE

    @staticmethod
    def _log_transition(old: TurnPhase, new: TurnPhase) -> None:
        if old == new:
            return
        LOGGER.debug(
            "turn.phase.transition",
            extra={
                "event": "turn.phase.transition",
                "from_phase": old.value,
                "to_phase": new.value,
            },
        )
