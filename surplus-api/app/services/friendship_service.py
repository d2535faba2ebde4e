import logging

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from app.core.db import atomic
from app.core.errors import Forbidden, InvalidRequest, NotFound
from app.core.events import EventEmitter
from app.models.enums import FriendshipStatus, NotificationType
from app.models.friendship import Friendship
from app.models.user import User
from app.services.lifecycle import FRIENDSHIP_TRANSITIONS, RequestAction, advance
from app.services.notification_service import create_notification, push_notification
from app.services.user_service import display_name, get_user

logger = logging.getLogger(__name__)


def _with_users(q):
    return q.options(joinedload(Friendship.requester), joinedload(Friendship.addressee))


def _find_between(db: Session, user_a: str, user_b: str) -> Friendship | None:
    return (
        _with_users(db.query(Friendship))
        .filter(
            or_(
                and_(Friendship.requester_id == user_a, Friendship.addressee_id == user_b),
                and_(Friendship.requester_id == user_b, Friendship.addressee_id == user_a),
            )
        )
        .first()
    )


def send_friend_request(db: Session, emitter: EventEmitter, requester_id: str, addressee_id: str) -> Friendship:
    if requester_id == addressee_id:
        raise InvalidRequest("Cannot befriend yourself")
    get_user(db, addressee_id)
    requester = get_user(db, requester_id)

    existing = _find_between(db, requester_id, addressee_id)
    if existing:
        return existing

    with atomic(db):
        friendship = Friendship(
            requester_id=requester_id,
            addressee_id=addressee_id,
            status=FriendshipStatus.PENDING,
        )
        db.add(friendship)
        db.flush()  # get friendship.id

        notification = create_notification(
            db,
            addressee_id,
            NotificationType.FRIEND_REQUEST,
            f"{display_name(requester)} sent you a friend request",
            related_id=str(friendship.id),
        )

    logger.info(f"[Friends] {requester_id} -> {addressee_id} request {friendship.id}")
    push_notification(emitter, notification)
    return friendship


def _load_for_addressee(db: Session, friendship_id: int, requester_id: str) -> Friendship:
    friendship = (
        db.query(Friendship)
        .filter(Friendship.id == friendship_id)
        .with_for_update()
        .one_or_none()
    )
    if not friendship:
        raise NotFound("Friend request not found")
    if friendship.addressee_id != requester_id:
        raise Forbidden("Only the addressee can answer this request")
    return friendship


def accept_friend_request(db: Session, emitter: EventEmitter, friendship_id: int, requester_id: str) -> Friendship:
    addressee = get_user(db, requester_id)

    with atomic(db):
        friendship = _load_for_addressee(db, friendship_id, requester_id)
        friendship.status = advance(FRIENDSHIP_TRANSITIONS, friendship.status, RequestAction.ACCEPT, "friend request")
        notification = create_notification(
            db,
            friendship.requester_id,
            NotificationType.FRIEND_ACCEPT,
            f"{display_name(addressee)} accepted your friend request",
            related_id=str(friendship.id),
        )

    push_notification(emitter, notification)
    db.refresh(friendship)
    return friendship


def reject_friend_request(db: Session, friendship_id: int, requester_id: str) -> Friendship:
    with atomic(db):
        friendship = _load_for_addressee(db, friendship_id, requester_id)
        friendship.status = advance(FRIENDSHIP_TRANSITIONS, friendship.status, RequestAction.REJECT, "friend request")

    db.refresh(friendship)
    return friendship


def list_friends(db: Session, user_id: str) -> list[User]:
    rows = (
        _with_users(db.query(Friendship))
        .filter(
            Friendship.status == FriendshipStatus.ACCEPTED,
            or_(Friendship.requester_id == user_id, Friendship.addressee_id == user_id),
        )
        .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        .all()
    )
    return [f.addressee if f.requester_id == user_id else f.requester for f in rows]


def list_incoming_requests(db: Session, user_id: str) -> list[Friendship]:
    return (
        _with_users(db.query(Friendship))
        .filter(Friendship.addressee_id == user_id, Friendship.status == FriendshipStatus.PENDING)
        .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        .all()
    )
