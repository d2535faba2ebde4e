"""
Declared lifecycles for items, claims, conversations and friendships.

Each table maps (current status, action) to the next status. Anything missing
from a table is an illegal transition and raises InvalidState, so every
status change in the services goes through `advance`.
"""
import enum

from app.core.errors import InvalidState
from app.models.enums import ClaimStatus, ConversationStatus, FriendshipStatus, ItemStatus


class ItemAction(str, enum.Enum):
    CLAIM = "claim"
    RELEASE = "release"
    DELETE = "delete"
    EXPIRE = "expire"


class ClaimAction(str, enum.Enum):
    COMPLETE = "complete"
    CANCEL = "cancel"


class ConversationAction(str, enum.Enum):
    SEND = "send"      # a message from the initiator
    REPLY = "reply"    # a message from the receiver
    ACCEPT = "accept"
    REJECT = "reject"


class RequestAction(str, enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


ITEM_TRANSITIONS = {
    (ItemStatus.AVAILABLE, ItemAction.CLAIM): ItemStatus.CLAIMED,
    (ItemStatus.CLAIMED, ItemAction.RELEASE): ItemStatus.AVAILABLE,
    (ItemStatus.AVAILABLE, ItemAction.DELETE): ItemStatus.DELETED,
    (ItemStatus.CLAIMED, ItemAction.DELETE): ItemStatus.DELETED,
    (ItemStatus.EXPIRED, ItemAction.DELETE): ItemStatus.DELETED,
    (ItemStatus.AVAILABLE, ItemAction.EXPIRE): ItemStatus.EXPIRED,
}

CLAIM_TRANSITIONS = {
    (ClaimStatus.PENDING, ClaimAction.COMPLETE): ClaimStatus.COMPLETED,
    (ClaimStatus.PENDING, ClaimAction.CANCEL): ClaimStatus.CANCELLED,
}

CONVERSATION_TRANSITIONS = {
    (ConversationStatus.PENDING, ConversationAction.SEND): ConversationStatus.PENDING,
    (ConversationStatus.ACCEPTED, ConversationAction.SEND): ConversationStatus.ACCEPTED,
    # replying implicitly accepts
    (ConversationStatus.PENDING, ConversationAction.REPLY): ConversationStatus.ACCEPTED,
    (ConversationStatus.ACCEPTED, ConversationAction.REPLY): ConversationStatus.ACCEPTED,
    (ConversationStatus.PENDING, ConversationAction.ACCEPT): ConversationStatus.ACCEPTED,
    (ConversationStatus.ACCEPTED, ConversationAction.ACCEPT): ConversationStatus.ACCEPTED,
    (ConversationStatus.PENDING, ConversationAction.REJECT): ConversationStatus.REJECTED,
    # a rejected thread stays readable and writable, its status no longer changes
    (ConversationStatus.REJECTED, ConversationAction.SEND): ConversationStatus.REJECTED,
    (ConversationStatus.REJECTED, ConversationAction.REPLY): ConversationStatus.REJECTED,
}

FRIENDSHIP_TRANSITIONS = {
    (FriendshipStatus.PENDING, RequestAction.ACCEPT): FriendshipStatus.ACCEPTED,
    (FriendshipStatus.PENDING, RequestAction.REJECT): FriendshipStatus.REJECTED,
}


def can_advance(table: dict, current, action) -> bool:
    return (current, action) in table


def advance(table: dict, current, action, entity: str):
    """Return the status reached by applying `action` to `current`."""
    try:
        return table[(current, action)]
    except KeyError:
        raise InvalidState(
            f"Cannot {action.value} {entity} in status {current.value}"
        ) from None
