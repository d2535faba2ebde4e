from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ConversationStatus, MessageType
from app.schemas.item import ItemBriefOut
from app.schemas.user import UserOut


class ConversationStartIn(BaseModel):
    receiver_id: str = Field(min_length=1, max_length=128)
    item_id: Optional[int] = None


class MessageIn(BaseModel):
    content: Optional[str] = None
    # Kept as a plain string: unknown types are rejected by the service
    type: str = "TEXT"
    media_base64: Optional[str] = None
    media_url: Optional[str] = Field(default=None, max_length=2000)


class MessageOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: int
    sender_id: str
    content: Optional[str] = None
    type: MessageType
    media_url: Optional[str] = None
    created_at: datetime


class ConversationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: Optional[int] = None
    participant1_id: str
    participant2_id: str
    status: ConversationStatus
    created_at: datetime
    updated_at: datetime


class ConversationSummaryOut(ConversationOut):
    participant1: UserOut
    participant2: UserOut
    item: Optional[ItemBriefOut] = None
    last_message: Optional[MessageOut] = None


class ConversationDetailOut(BaseModel):
    conversation: ConversationSummaryOut
    messages: list[MessageOut]
