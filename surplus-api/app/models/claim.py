from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.models.enums import ClaimStatus

if TYPE_CHECKING:
    from .item import Item
    from .user import User


class Claim(Base):
    __tablename__ = "claims"
    __table_args__ = {"schema": "market"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    item_id: Mapped[int] = mapped_column(Integer, ForeignKey("market.items.id"), nullable=False, index=True)
    claimer_id: Mapped[str] = mapped_column(String(128), ForeignKey("market.users.id"), nullable=False, index=True)

    status: Mapped[ClaimStatus] = mapped_column(
        Enum(ClaimStatus, name="claim_status"),
        default=ClaimStatus.PENDING,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    item: Mapped["Item"] = relationship("Item", back_populates="claims")
    claimer: Mapped["User"] = relationship("User")
