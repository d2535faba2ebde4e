from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.models.enums import NotificationType


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    type: NotificationType
    message: str
    related_id: Optional[str] = None
    read: bool
    created_at: datetime
