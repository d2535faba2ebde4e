from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.events import EventEmitter
from app.deps import get_current_user, get_db, get_emitter
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.user import User
from app.schemas.conversation import (
    ConversationDetailOut,
    ConversationOut,
    ConversationStartIn,
    ConversationSummaryOut,
    MessageIn,
    MessageOut,
)
from app.schemas.item import ItemBriefOut
from app.schemas.user import UserOut
from app.services import conversation_service

router = APIRouter(prefix="/conversations", tags=["conversations"])


def _summary(conv: Conversation, last_message: Message | None) -> ConversationSummaryOut:
    data = ConversationOut.model_validate(conv).model_dump()
    return ConversationSummaryOut(
        **data,
        participant1=UserOut.model_validate(conv.participant1),
        participant2=UserOut.model_validate(conv.participant2),
        item=ItemBriefOut.model_validate(conv.item) if conv.item else None,
        last_message=MessageOut.model_validate(last_message) if last_message else None,
    )


@router.post("/start", response_model=ConversationOut)
def start_conversation(
    payload: ConversationStartIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return conversation_service.start_conversation(
        db, emitter, user.id, payload.receiver_id, payload.item_id
    )


@router.get("", response_model=list[ConversationSummaryOut])
def list_conversations(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return [_summary(c, last) for c, last in conversation_service.list_conversations(db, user.id)]


@router.get("/{conversation_id}", response_model=ConversationDetailOut)
def get_conversation(
    conversation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conv = conversation_service.get_conversation(db, conversation_id, user.id)
    messages = conversation_service.list_messages(db, conversation_id, user.id)
    return ConversationDetailOut(
        conversation=_summary(conv, messages[0] if messages else None),
        messages=[MessageOut.model_validate(m) for m in messages],
    )


@router.post("/{conversation_id}/messages", response_model=MessageOut)
def send_message(
    conversation_id: int,
    payload: MessageIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return conversation_service.send_message(db, emitter, conversation_id, user.id, payload)


@router.put("/{conversation_id}/accept", response_model=ConversationOut)
def accept_conversation(
    conversation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return conversation_service.accept_conversation(db, conversation_id, user.id)


@router.put("/{conversation_id}/reject", response_model=ConversationOut)
def reject_conversation(
    conversation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return conversation_service.reject_conversation(db, conversation_id, user.id)


@router.delete("/{conversation_id}")
def delete_conversation(
    conversation_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    conversation_service.delete_conversation(db, conversation_id, user.id)
    return {"ok": True}
