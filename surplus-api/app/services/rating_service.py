from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.db import atomic
from app.core.errors import InvalidRequest
from app.models.rating import Rating
from app.schemas.rating import RatingIn
from app.schemas.user import RatingSummary
from app.services.user_service import get_user


def seller_rating(db: Session, user_id: str) -> RatingSummary:
    """Average and count of every rating received by `user_id`, computed on demand."""
    count, total = (
        db.query(func.count(Rating.id), func.coalesce(func.sum(Rating.rating), 0))
        .filter(Rating.rated_user_id == user_id)
        .one()
    )
    if count == 0:
        return RatingSummary(average=0, count=0)
    return RatingSummary(average=total / count, count=count)


def rate_user(db: Session, rater_id: str, payload: RatingIn) -> Rating:
    if payload.rated_user_id == rater_id:
        raise InvalidRequest("Cannot rate yourself")
    get_user(db, payload.rated_user_id)

    rating = Rating(
        rater_id=rater_id,
        rated_user_id=payload.rated_user_id,
        rating=payload.rating,
        comment=payload.comment,
    )
    with atomic(db):
        db.add(rating)

    db.refresh(rating)
    return rating
