from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import FriendshipStatus
from app.schemas.user import UserOut


class FriendRequestIn(BaseModel):
    addressee_id: str = Field(min_length=1, max_length=128)


class FriendshipOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_id: str
    addressee_id: str
    status: FriendshipStatus
    created_at: datetime

    requester: UserOut
    addressee: UserOut
