"""
Conversations and messages.

A conversation starts PENDING. The receiver (participant2) accepts it either
explicitly or by replying; every status change goes through the conversation
transition table. Live events are emitted only after the write committed.
"""
import logging

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.db import atomic
from app.core.errors import Forbidden, InvalidRequest, NotFound, UnsupportedType
from app.core.events import (
    CONVERSATION_STARTED,
    NEW_MESSAGE,
    EventEmitter,
    conversation_room,
    emit_safely,
    user_room,
)
from app.models.conversation import Conversation
from app.models.enums import ConversationStatus, MessageType, NotificationType
from app.models.item import Item
from app.models.message import Message
from app.schemas.conversation import ConversationOut, MessageIn, MessageOut
from app.schemas.user import UserOut
from app.services.lifecycle import CONVERSATION_TRANSITIONS, ConversationAction, advance
from app.services.item_service import VISIBLE_ITEM
from app.services.notification_service import create_notification
from app.services.user_service import display_name, get_user

logger = logging.getLogger(__name__)

VOICE_MESSAGE_LABEL = "Voice message"
DEFAULT_AUDIO_MIME = "audio/aac"


def _with_relations(q):
    return q.options(
        joinedload(Conversation.participant1),
        joinedload(Conversation.participant2),
        joinedload(Conversation.item),
    )


def find_between(db: Session, user_a: str, user_b: str) -> Conversation | None:
    """Existing conversation for the unordered pair {user_a, user_b}, if any."""
    return (
        db.query(Conversation)
        .filter(
            or_(
                and_(Conversation.participant1_id == user_a, Conversation.participant2_id == user_b),
                and_(Conversation.participant1_id == user_b, Conversation.participant2_id == user_a),
            )
        )
        .order_by(Conversation.id)
        .first()
    )


def start_conversation(
    db: Session,
    emitter: EventEmitter,
    initiator_id: str,
    receiver_id: str,
    item_id: int | None = None,
) -> Conversation:
    if initiator_id == receiver_id:
        raise InvalidRequest("Cannot message yourself")

    get_user(db, receiver_id)
    if item_id is not None:
        item = db.query(Item).filter(Item.id == item_id, VISIBLE_ITEM).one_or_none()
        if not item:
            raise NotFound("Item not found")

    # Best-effort lookup: two concurrent starts can still create two rows
    existing = find_between(db, initiator_id, receiver_id)
    if existing:
        return existing

    with atomic(db):
        conv = Conversation(
            participant1_id=initiator_id,
            participant2_id=receiver_id,
            item_id=item_id,
            status=ConversationStatus.PENDING,
        )
        db.add(conv)

    logger.info(f"[Messages] Conversation {conv.id} started by {initiator_id} with {receiver_id}")

    payload = {"conversation": ConversationOut.model_validate(conv).model_dump(mode="json")}
    emit_safely(emitter, user_room(receiver_id), CONVERSATION_STARTED, payload)
    emit_safely(emitter, user_room(initiator_id), CONVERSATION_STARTED, payload)
    return conv


def get_conversation(db: Session, conversation_id: int, requester_id: str) -> Conversation:
    conv = (
        _with_relations(db.query(Conversation))
        .filter(Conversation.id == conversation_id)
        .one_or_none()
    )
    if not conv:
        raise NotFound("Conversation not found")
    if not conv.has_participant(requester_id):
        raise Forbidden("Not a participant in this conversation")
    return conv


def list_messages(db: Session, conversation_id: int, requester_id: str) -> list[Message]:
    get_conversation(db, conversation_id, requester_id)
    return (
        db.query(Message)
        .filter(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )


def list_conversations(db: Session, user_id: str) -> list[tuple[Conversation, Message | None]]:
    """The user's conversations, most recently active first, each with its last message."""
    convs = (
        _with_relations(db.query(Conversation))
        .filter(or_(Conversation.participant1_id == user_id, Conversation.participant2_id == user_id))
        .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        .all()
    )
    if not convs:
        return []

    latest_ids = (
        select(func.max(Message.id))
        .where(Message.conversation_id.in_([c.id for c in convs]))
        .group_by(Message.conversation_id)
    )
    last_by_conv = {
        m.conversation_id: m
        for m in db.query(Message).filter(Message.id.in_(latest_ids)).all()
    }
    return [(c, last_by_conv.get(c.id)) for c in convs]


def _parse_type(raw: str) -> MessageType:
    try:
        msg_type = MessageType(raw)
    except ValueError:
        raise UnsupportedType(f"Unsupported message type '{raw}'") from None
    if msg_type not in (MessageType.TEXT, MessageType.AUDIO):
        raise UnsupportedType(f"Unsupported message type '{raw}'")
    return msg_type


def _validate_body(msg_type: MessageType, body: MessageIn) -> tuple[str, str | None]:
    """Return (content, media_url) to store, or raise before anything is written."""
    content = (body.content or "").strip()
    media_url = body.media_url

    if msg_type == MessageType.TEXT:
        if not content:
            raise InvalidRequest("Message content is required")
        return content, media_url

    encoded = body.media_base64
    if not encoded and not media_url:
        raise InvalidRequest("Audio payload missing")

    if encoded:
        if len(encoded) > settings.AUDIO_MAX_BASE64_CHARS:
            raise InvalidRequest("Audio too large; limit ~1MB")
        media_url = encoded if encoded.startswith("data:") else f"data:{DEFAULT_AUDIO_MIME};base64,{encoded}"

    return content or VOICE_MESSAGE_LABEL, media_url


def send_message(
    db: Session,
    emitter: EventEmitter,
    conversation_id: int,
    sender_id: str,
    body: MessageIn,
) -> Message:
    msg_type = _parse_type(body.type)
    content, media_url = _validate_body(msg_type, body)

    with atomic(db):
        conv = (
            db.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .with_for_update()
            .one_or_none()
        )
        if not conv:
            raise NotFound("Conversation not found")
        if not conv.has_participant(sender_id):
            raise Forbidden("Not a participant in this conversation")

        action = ConversationAction.REPLY if sender_id == conv.participant2_id else ConversationAction.SEND
        next_status = advance(CONVERSATION_TRANSITIONS, conv.status, action, "conversation")
        if next_status != conv.status:
            logger.info(f"[Messages] Conversation {conv.id} {conv.status.value} -> {next_status.value}")
            conv.status = next_status

        msg = Message(
            conversation_id=conv.id,
            sender_id=sender_id,
            content=content,
            type=msg_type,
            media_url=media_url,
        )
        db.add(msg)
        conv.updated_at = func.now()

        sender = get_user(db, sender_id)
        receiver_id = conv.other_participant(sender_id)
        create_notification(
            db,
            receiver_id,
            NotificationType.MESSAGE,
            f"New message from {display_name(sender)}",
            related_id=str(conv.id),
        )

    message_out = MessageOut.model_validate(msg).model_dump(mode="json")
    payload = {
        "conversation": {
            "id": conv.id,
            "last_message": message_out,
            "participants": [conv.participant1_id, conv.participant2_id],
        },
        "message": message_out,
        "sender": UserOut.model_validate(sender).model_dump(mode="json"),
    }
    # Receiver, conversation room and sender all get it; clients dedupe by message id
    emit_safely(emitter, user_room(receiver_id), NEW_MESSAGE, payload)
    emit_safely(emitter, conversation_room(conv.id), NEW_MESSAGE, payload)
    emit_safely(emitter, user_room(sender_id), NEW_MESSAGE, payload)
    return msg


def _respond(db: Session, conversation_id: int, requester_id: str, action: ConversationAction) -> Conversation:
    with atomic(db):
        conv = (
            db.query(Conversation)
            .filter(Conversation.id == conversation_id)
            .with_for_update()
            .one_or_none()
        )
        if not conv:
            raise NotFound("Conversation not found")
        if conv.participant2_id != requester_id:
            raise Forbidden(f"Only the receiver can {action.value} this conversation")
        conv.status = advance(CONVERSATION_TRANSITIONS, conv.status, action, "conversation")

    db.refresh(conv)
    return conv


def accept_conversation(db: Session, conversation_id: int, requester_id: str) -> Conversation:
    return _respond(db, conversation_id, requester_id, ConversationAction.ACCEPT)


def reject_conversation(db: Session, conversation_id: int, requester_id: str) -> Conversation:
    return _respond(db, conversation_id, requester_id, ConversationAction.REJECT)


def delete_conversation(db: Session, conversation_id: int, requester_id: str) -> None:
    with atomic(db):
        conv = db.get(Conversation, conversation_id)
        if not conv:
            raise NotFound("Conversation not found")
        if not conv.has_participant(requester_id):
            raise Forbidden("Not a participant in this conversation")

        # Messages first, the conversation row is referenced by them
        db.execute(delete(Message).where(Message.conversation_id == conversation_id))
        db.execute(delete(Conversation).where(Conversation.id == conversation_id))

    logger.info(f"[Messages] Conversation {conversation_id} deleted by {requester_id}")
