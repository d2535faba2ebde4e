from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.rating import RatingIn, RatingOut
from app.services.rating_service import rate_user

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post("", response_model=RatingOut, status_code=201)
def create_rating(
    payload: RatingIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return rate_user(db, user.id, payload)
