from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.events import EventEmitter
from app.deps import get_current_user, get_db, get_emitter
from app.models.user import User
from app.schemas.friendship import FriendRequestIn, FriendshipOut
from app.schemas.user import UserOut
from app.services import friendship_service

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("", response_model=list[UserOut])
def list_friends(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return friendship_service.list_friends(db, user.id)


@router.get("/requests", response_model=list[FriendshipOut])
def list_requests(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return friendship_service.list_incoming_requests(db, user.id)


@router.post("/requests", response_model=FriendshipOut)
def send_request(
    payload: FriendRequestIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return friendship_service.send_friend_request(db, emitter, user.id, payload.addressee_id)


@router.put("/requests/{friendship_id}/accept", response_model=FriendshipOut)
def accept_request(
    friendship_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return friendship_service.accept_friend_request(db, emitter, friendship_id, user.id)


@router.put("/requests/{friendship_id}/reject", response_model=FriendshipOut)
def reject_request(
    friendship_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return friendship_service.reject_friend_request(db, friendship_id, user.id)
