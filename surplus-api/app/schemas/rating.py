from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RatingIn(BaseModel):
    rated_user_id: str = Field(min_length=1, max_length=128)
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=1000)


class RatingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    rater_id: str
    rated_user_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
