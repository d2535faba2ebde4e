"""
Notification dispatcher.

`create_notification` only stages the row so it commits together with the
write that caused it; `push_notification` is called after the commit.
"""
from sqlalchemy.orm import Session

from app.core.db import atomic
from app.core.errors import Forbidden, NotFound
from app.core.events import NOTIFICATION, EventEmitter, emit_safely, user_room
from app.models.enums import NotificationType
from app.models.notification import Notification
from app.schemas.notification import NotificationOut


def create_notification(
    db: Session,
    user_id: str,
    type: NotificationType,
    message: str,
    related_id: str | None = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type,
        message=message,
        related_id=related_id,
        read=False,
    )
    db.add(notification)
    return notification


def push_notification(emitter: EventEmitter, notification: Notification) -> None:
    payload = {"notification": NotificationOut.model_validate(notification).model_dump(mode="json")}
    emit_safely(emitter, user_room(notification.user_id), NOTIFICATION, payload)


def list_notifications(db: Session, user_id: str, unread_only: bool = False, limit: int = 50) -> list[Notification]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.read.is_(False))
    return (
        q.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def mark_read(db: Session, notification_id: int, user_id: str) -> Notification:
    notification = db.get(Notification, notification_id)
    if not notification:
        raise NotFound("Notification not found")
    if notification.user_id != user_id:
        raise Forbidden("Not your notification")

    with atomic(db):
        notification.read = True

    db.refresh(notification)
    return notification


def mark_all_read(db: Session, user_id: str) -> int:
    with atomic(db):
        updated = (
            db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
    return updated
