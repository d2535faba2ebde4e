"""
Item lifecycle: listing, creation, claiming and soft deletion.

Every read path filters through VISIBLE_ITEM so DELETED rows never leak
into listings.
"""
import logging

from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.db import atomic
from app.core.errors import Forbidden, InvalidRequest, NotFound
from app.core.events import EventEmitter
from app.models.claim import Claim
from app.models.enums import ClaimStatus, ItemStatus, NotificationType
from app.models.item import Item
from app.models.location import Location
from app.schemas.item import ItemCreateIn
from app.services.lifecycle import ITEM_TRANSITIONS, ItemAction, advance
from app.services.notification_service import create_notification, push_notification
from app.services.user_service import display_name, get_user

logger = logging.getLogger(__name__)

VISIBLE_ITEM = Item.status != ItemStatus.DELETED

ALL_CATEGORIES = "ALL"
LIST_MODES = {"posted", "claimed"}


def _with_relations(q):
    return q.options(joinedload(Item.location), joinedload(Item.user))


def _newest_first(q):
    return q.order_by(Item.created_at.desc(), Item.id.desc())


def list_available_items(db: Session, category: str | None = None) -> list[Item]:
    q = db.query(Item).filter(VISIBLE_ITEM, Item.status == ItemStatus.AVAILABLE)
    if category and category != ALL_CATEGORIES:
        q = q.filter(Item.category == category)
    return _newest_first(_with_relations(q)).all()


def list_user_items(db: Session, user_id: str, mode: str = "posted") -> list[Item]:
    if mode not in LIST_MODES:
        raise InvalidRequest(f"Unknown mode '{mode}' (expected posted or claimed)")

    if mode == "posted":
        q = db.query(Item).filter(VISIBLE_ITEM, Item.user_id == user_id)
        return _newest_first(_with_relations(q)).all()

    claims = (
        db.query(Claim)
        .join(Item, Claim.item_id == Item.id)
        .filter(VISIBLE_ITEM, Claim.claimer_id == user_id)
        .options(joinedload(Claim.item).joinedload(Item.location), joinedload(Claim.item).joinedload(Item.user))
        .order_by(Claim.created_at.desc(), Claim.id.desc())
        .all()
    )
    items: list[Item] = []
    seen: set[int] = set()
    for claim in claims:
        if claim.item_id not in seen:
            seen.add(claim.item_id)
            items.append(claim.item)
    return items


def get_item(db: Session, item_id: int) -> Item:
    item = (
        _with_relations(db.query(Item))
        .options(selectinload(Item.claims))
        .filter(Item.id == item_id, VISIBLE_ITEM)
        .one_or_none()
    )
    if not item:
        raise NotFound("Item not found")
    return item


def _lock_item(db: Session, item_id: int) -> Item:
    item = db.query(Item).filter(Item.id == item_id).with_for_update().one_or_none()
    if not item:
        raise NotFound("Item not found")
    return item


def create_item(db: Session, owner_id: str, payload: ItemCreateIn) -> Item:
    with atomic(db):
        item = Item(
            user_id=owner_id,
            title=payload.title,
            description=payload.description,
            quantity=payload.quantity,
            unit=payload.unit,
            expiry_date=payload.expiry_date,
            image_url=payload.image_url,
            category=payload.category or "Other",
            original_price=payload.original_price,
            discounted_price=payload.discounted_price,
            price_currency=payload.price_currency,
            status=ItemStatus.AVAILABLE,
        )
        db.add(item)
        db.flush()  # get item.id

        db.add(Location(
            item_id=item.id,
            latitude=payload.location.latitude,
            longitude=payload.location.longitude,
            address=payload.location.address,
        ))

    logger.info(f"[Items] {owner_id} listed item {item.id}")
    return get_item(db, item.id)


def claim_item(db: Session, emitter: EventEmitter, item_id: int, claimer_id: str) -> Claim:
    claimer = get_user(db, claimer_id)

    with atomic(db):
        item = _lock_item(db, item_id)
        if item.user_id == claimer_id:
            raise Forbidden("Cannot claim your own item")

        item.status = advance(ITEM_TRANSITIONS, item.status, ItemAction.CLAIM, "item")

        claim = Claim(item_id=item.id, claimer_id=claimer_id, status=ClaimStatus.PENDING)
        db.add(claim)

        notification = create_notification(
            db,
            item.user_id,
            NotificationType.SYSTEM,
            f'{display_name(claimer)} claimed your item "{item.title}"',
            related_id=str(item.id),
        )

    logger.info(f"[Items] Item {item_id} claimed by {claimer_id} (claim {claim.id})")
    push_notification(emitter, notification)
    return claim


def delete_item(db: Session, item_id: int, requester_id: str) -> Item:
    with atomic(db):
        item = _lock_item(db, item_id)
        if item.user_id != requester_id:
            raise Forbidden("Only the owner can delete this item")
        item.status = advance(ITEM_TRANSITIONS, item.status, ItemAction.DELETE, "item")

    logger.info(f"[Items] Item {item_id} deleted by owner")
    db.refresh(item)
    return item
