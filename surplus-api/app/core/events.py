"""
Live event emission.

The push transport is a collaborator: the app only needs something that can
emit an event to a target (a user room or a conversation room). Emission is
best-effort and always happens after the data transaction committed.
"""
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

CONVERSATION_STARTED = "conversation_started"
NEW_MESSAGE = "new_message"
NOTIFICATION = "notification"


class EventEmitter(Protocol):
    def emit(self, target: str, event: str, payload: dict[str, Any]) -> None:
        ...


class LoggingEmitter:
    """Default emitter: records events in the log instead of pushing them."""

    def emit(self, target: str, event: str, payload: dict[str, Any]) -> None:
        logger.info(f"[Events] {event} -> {target}")


def user_room(user_id: str) -> str:
    return f"user_{user_id}"


def conversation_room(conversation_id: int) -> str:
    return f"conversation_{conversation_id}"


def emit_safely(emitter: EventEmitter, target: str, event: str, payload: dict[str, Any]) -> None:
    try:
        emitter.emit(target, event, payload)
    except Exception as e:
        logger.error(f"[Events] Failed to emit {event} to {target}: {e}")
