from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.models.enums import ConversationStatus

if TYPE_CHECKING:
    from .item import Item
    from .message import Message
    from .user import User


class Conversation(Base):
    """
    Two-party thread. participant1 started it, participant2 is the receiver
    whose reply (or explicit accept) moves it out of PENDING.
    """
    __tablename__ = "conversations"
    __table_args__ = (
        CheckConstraint("participant1_id <> participant2_id", name="ck_conversations_distinct_participants"),
        {"schema": "market"},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("market.items.id"), nullable=True)
    participant1_id: Mapped[str] = mapped_column(String(128), ForeignKey("market.users.id"), nullable=False, index=True)
    participant2_id: Mapped[str] = mapped_column(String(128), ForeignKey("market.users.id"), nullable=False, index=True)

    status: Mapped[ConversationStatus] = mapped_column(
        Enum(ConversationStatus, name="conversation_status"),
        default=ConversationStatus.PENDING,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    item: Mapped[Optional["Item"]] = relationship("Item")
    participant1: Mapped["User"] = relationship("User", foreign_keys=[participant1_id])
    participant2: Mapped["User"] = relationship("User", foreign_keys=[participant2_id])
    messages: Mapped[List["Message"]] = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.id",
    )

    def has_participant(self, user_id: str) -> bool:
        return user_id in (self.participant1_id, self.participant2_id)

    def other_participant(self, user_id: str) -> str:
        return self.participant2_id if self.participant1_id == user_id else self.participant1_id
