import logging

from sqlalchemy.orm import Session

from app.core.db import atomic
from app.core.errors import InvalidRequest, NotFound
from app.models.user import User
from app.schemas.user import ProfileSyncIn

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def display_name(user: User | None) -> str:
    if user and user.display_name:
        return user.display_name
    return "Someone"


def sync_profile(db: Session, user_id: str, payload: ProfileSyncIn) -> User:
    """Create or update the caller's profile from identity-provider data."""
    email = payload.email.lower()

    taken = db.query(User).filter(User.email == email, User.id != user_id).first()
    if taken:
        raise InvalidRequest("Email already used")

    with atomic(db):
        user = db.get(User, user_id)
        if user is None:
            user = User(id=user_id, email=email)
            db.add(user)
            logger.info(f"[Users] Created profile {user_id}")
        else:
            user.email = email

        user.display_name = payload.display_name
        user.avatar_url = payload.avatar_url
        user.role = payload.role

    db.refresh(user)
    return user
