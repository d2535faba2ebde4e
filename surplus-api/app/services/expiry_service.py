"""
Item expiry sweep, run periodically by the scheduler.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.core.db import SessionLocal, atomic
from app.models.enums import ItemStatus
from app.models.item import Item
from app.services.lifecycle import ITEM_TRANSITIONS, ItemAction, advance

logger = logging.getLogger(__name__)


def expire_items(db: Session, now: datetime | None = None) -> int:
    """Move AVAILABLE items whose expiry date has passed to EXPIRED. Returns how many."""
    now = now or datetime.now(timezone.utc)

    with atomic(db):
        overdue = (
            db.query(Item)
            .filter(Item.status == ItemStatus.AVAILABLE, Item.expiry_date < now)
            .with_for_update(skip_locked=True)
            .all()
        )
        for item in overdue:
            item.status = advance(ITEM_TRANSITIONS, item.status, ItemAction.EXPIRE, "item")

    if overdue:
        logger.info(f"[Scheduler] Expired {len(overdue)} items")
    return len(overdue)


def expire_overdue_items():
    """Scheduler job: own session, never raises into the scheduler thread."""
    db = SessionLocal()
    try:
        expire_items(db)
    except Exception as e:
        logger.error(f"[Scheduler] Error in expire_overdue_items: {e}")
    finally:
        db.close()
