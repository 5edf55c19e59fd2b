"""Top-level package for the farm assistant chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import FarmAssistantApp
    from .attachments import AttachmentStager
    from .composer import MessageComposer
    from .config import ensure_config_dir, load_config
    from .exceptions import (
        AttachmentValidationError,
        ConfigValidationError,
        EmptySubmissionError,
        FarmAssistantError,
        StoreClosedError,
        TurnInFlightError,
    )
    from .gateway import AssistantGateway
    from .message_store import ConversationState, ConversationStore
    from .session import ConversationSession
    from .state import StateManager, TurnPhase

__all__ = [
    "AssistantGateway",
    "AttachmentStager",
    "AttachmentValidationError",
    "ConfigValidationError",
    "ConversationSession",
    "ConversationState",
    "ConversationStore",
    "EmptySubmissionError",
    "FarmAssistantApp",
    "FarmAssistantError",
    "MessageComposer",
    "StateManager",
    "StoreClosedError",
    "TurnInFlightError",
    "TurnPhase",
    "ensure_config_dir",
    "load_config",
]

_LAZY_EXPORTS: dict[str, str] = {
    "AssistantGateway": ".gateway",
    "AttachmentStager": ".attachments",
    "AttachmentValidationError": ".exceptions",
    "ConfigValidationError": ".exceptions",
    "ConversationSession": ".session",
    "ConversationState": ".message_store",
    "ConversationStore": ".message_store",
    "EmptySubmissionError": ".exceptions",
    "FarmAssistantApp": ".app",
    "FarmAssistantError": ".exceptions",
    "MessageComposer": ".composer",
    "StateManager": ".state",
    "StoreClosedError": ".exceptions",
    "TurnInFlightError": ".exceptions",
    "TurnPhase": ".state",
    "ensure_config_dir": ".config",
    "load_config": ".config",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep the Textual UI optional at import time."""
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
