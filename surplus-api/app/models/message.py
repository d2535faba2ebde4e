from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.models.enums import MessageType

if TYPE_CHECKING:
    from .conversation import Conversation
    from .user import User


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = {"schema": "market"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    conversation_id: Mapped[int] = mapped_column(Integer, ForeignKey("market.conversations.id"), nullable=False, index=True)
    sender_id: Mapped[str] = mapped_column(String(128), ForeignKey("market.users.id"), nullable=False)

    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[MessageType] = mapped_column(
        Enum(MessageType, name="message_type"),
        default=MessageType.TEXT,
        nullable=False,
    )
    # Either a remote URL or an inline data: URL for voice notes
    media_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    conversation: Mapped["Conversation"] = relationship("Conversation", back_populates="messages")
    sender: Mapped["User"] = relationship("User")
