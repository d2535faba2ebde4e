from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import ClaimStatus, ItemStatus
from app.schemas.user import RatingSummary, UserOut


# ===== Location =====

class LocationIn(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str = Field(max_length=300)


class LocationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    latitude: float
    longitude: float
    address: Optional[str] = None


# ===== Items =====

class ItemCreateIn(BaseModel):
    title: str = Field(min_length=2, max_length=200)
    description: Optional[str] = None
    quantity: int = Field(gt=0)
    unit: str = Field(min_length=1, max_length=32)
    expiry_date: datetime
    image_url: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, max_length=64)
    original_price: Optional[float] = Field(default=None, ge=0)
    discounted_price: Optional[float] = Field(default=None, ge=0)
    price_currency: Optional[str] = Field(default=None, max_length=8)
    location: LocationIn

    @field_validator("expiry_date")
    @classmethod
    def validate_expiry_date(cls, v: datetime) -> datetime:
        # Naive timestamps are taken as UTC
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        else:
            v = v.astimezone(timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError("expiry_date must be in the future")
        return v


class ItemBriefOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: ItemStatus
    image_url: Optional[str] = None


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    title: str
    description: Optional[str] = None
    quantity: int
    unit: str
    expiry_date: datetime
    status: ItemStatus
    image_url: Optional[str] = None
    category: str
    original_price: Optional[float] = None
    discounted_price: Optional[float] = None
    price_currency: Optional[str] = None
    created_at: datetime

    location: Optional[LocationOut] = None
    user: UserOut


# ===== Claims =====

class ClaimOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_id: int
    claimer_id: str
    status: ClaimStatus
    created_at: datetime


class ClaimWithItemOut(ClaimOut):
    item: ItemOut


class SellerOut(UserOut):
    rating: RatingSummary


class ItemDetailOut(ItemOut):
    user: SellerOut
    claims: list[ClaimOut] = []
