from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, DateTime, Enum, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.models.enums import ItemStatus

if TYPE_CHECKING:
    from .user import User
    from .location import Location
    from .claim import Claim


class Item(Base):
    """
    A listed surplus good. Rows are never removed: DELETED is a soft delete
    and listing queries must go through the visible-item predicate.
    """
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_items_quantity_positive"),
        {"schema": "market"},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), ForeignKey("market.users.id"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit: Mapped[str] = mapped_column(String(32), nullable=False)  # kg, pcs, ...
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    status: Mapped[ItemStatus] = mapped_column(
        Enum(ItemStatus, name="item_status"),
        default=ItemStatus.AVAILABLE,
        nullable=False,
        index=True,
    )

    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    category: Mapped[str] = mapped_column(String(64), default="Other", server_default="Other", nullable=False)
    original_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    discounted_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    price_currency: Mapped[str | None] = mapped_column(String(8), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    user: Mapped["User"] = relationship("User", back_populates="items")
    location: Mapped["Location"] = relationship("Location", back_populates="item", uselist=False)
    claims: Mapped[List["Claim"]] = relationship("Claim", back_populates="item", order_by="Claim.id")
