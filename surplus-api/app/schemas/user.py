from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.enums import UserRole


class RatingSummary(BaseModel):
    average: float = 0
    count: int = 0


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    created_at: datetime


class ProfileOut(UserOut):
    rating: RatingSummary


class ProfileSyncIn(BaseModel):
    email: EmailStr
    display_name: Optional[str] = Field(default=None, max_length=80)
    avatar_url: Optional[str] = Field(default=None, max_length=500)
    role: UserRole = UserRole.CUSTOMER
