from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

if TYPE_CHECKING:
    from .item import Item


class Location(Base):
    __tablename__ = "locations"
    __table_args__ = {"schema": "market"}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Exactly one location per item
    item_id: Mapped[int] = mapped_column(Integer, ForeignKey("market.items.id"), nullable=False, unique=True)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)

    item: Mapped["Item"] = relationship("Item", back_populates="location")
