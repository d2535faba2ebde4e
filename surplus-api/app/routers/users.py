from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.deps import get_caller_id, get_current_user, get_db
from app.models.user import User
from app.schemas.user import ProfileOut, ProfileSyncIn, RatingSummary, UserOut
from app.services.rating_service import seller_rating
from app.services.user_service import get_user, sync_profile

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/sync", response_model=UserOut)
def sync_me(
    payload: ProfileSyncIn,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_caller_id),
):
    return sync_profile(db, user_id, payload)


@router.get("/me", response_model=UserOut)
def me(user: User = Depends(get_current_user)):
    return user


@router.get("/{user_id}", response_model=ProfileOut)
def get_profile(
    user_id: str,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    target = get_user(db, user_id)
    data = UserOut.model_validate(target).model_dump()
    return ProfileOut(**data, rating=seller_rating(db, target.id))


@router.get("/{user_id}/rating", response_model=RatingSummary)
def get_rating(user_id: str, db: Session = Depends(get_db)):
    get_user(db, user_id)
    return seller_rating(db, user_id)
