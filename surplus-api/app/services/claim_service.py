import logging

from sqlalchemy.orm import Session, joinedload

from app.core.db import atomic
from app.core.errors import Forbidden, NotFound
from app.core.events import EventEmitter
from app.models.claim import Claim
from app.models.enums import NotificationType
from app.models.item import Item
from app.services.lifecycle import (
    CLAIM_TRANSITIONS,
    ITEM_TRANSITIONS,
    ClaimAction,
    ItemAction,
    advance,
    can_advance,
)
from app.services.notification_service import create_notification, push_notification

logger = logging.getLogger(__name__)


def list_my_claims(db: Session, user_id: str) -> list[Claim]:
    return (
        db.query(Claim)
        .filter(Claim.claimer_id == user_id)
        .options(joinedload(Claim.item).joinedload(Item.location), joinedload(Claim.item).joinedload(Item.user))
        .order_by(Claim.created_at.desc(), Claim.id.desc())
        .all()
    )


def _lock_claim(db: Session, claim_id: int) -> Claim:
    claim = db.query(Claim).filter(Claim.id == claim_id).with_for_update().one_or_none()
    if not claim:
        raise NotFound("Claim not found")
    return claim


def complete_claim(db: Session, emitter: EventEmitter, claim_id: int, requester_id: str) -> Claim:
    """The item owner confirms the hand-over. The item stays CLAIMED."""
    with atomic(db):
        claim = _lock_claim(db, claim_id)
        item = claim.item
        if item.user_id != requester_id:
            raise Forbidden("Only the item owner can complete a claim")

        claim.status = advance(CLAIM_TRANSITIONS, claim.status, ClaimAction.COMPLETE, "claim")
        notification = create_notification(
            db,
            claim.claimer_id,
            NotificationType.SYSTEM,
            f'Your claim on "{item.title}" was completed',
            related_id=str(item.id),
        )

    logger.info(f"[Claims] Claim {claim_id} completed")
    push_notification(emitter, notification)
    db.refresh(claim)
    return claim


def cancel_claim(db: Session, emitter: EventEmitter, claim_id: int, requester_id: str) -> Claim:
    """Either side backs out; the item goes back on the feed if it was still held."""
    with atomic(db):
        claim = _lock_claim(db, claim_id)
        item = db.query(Item).filter(Item.id == claim.item_id).with_for_update().one()
        if requester_id not in (claim.claimer_id, item.user_id):
            raise Forbidden("Not a party to this claim")

        claim.status = advance(CLAIM_TRANSITIONS, claim.status, ClaimAction.CANCEL, "claim")
        if can_advance(ITEM_TRANSITIONS, item.status, ItemAction.RELEASE):
            item.status = advance(ITEM_TRANSITIONS, item.status, ItemAction.RELEASE, "item")

        other_party = item.user_id if requester_id == claim.claimer_id else claim.claimer_id
        notification = create_notification(
            db,
            other_party,
            NotificationType.SYSTEM,
            f'The claim on "{item.title}" was cancelled',
            related_id=str(item.id),
        )

    logger.info(f"[Claims] Claim {claim_id} cancelled by {requester_id}")
    push_notification(emitter, notification)
    db.refresh(claim)
    return claim
