from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.events import EventEmitter
from app.deps import get_current_user, get_db, get_emitter
from app.models.item import Item
from app.models.user import User
from app.schemas.item import ClaimOut, ItemCreateIn, ItemDetailOut, ItemOut
from app.schemas.user import UserOut
from app.services import item_service
from app.services.rating_service import seller_rating

router = APIRouter(prefix="/items", tags=["items"])


def _item_detail(db: Session, item: Item) -> ItemDetailOut:
    data = ItemOut.model_validate(item).model_dump()
    data["user"] = {
        **UserOut.model_validate(item.user).model_dump(),
        "rating": seller_rating(db, item.user_id).model_dump(),
    }
    data["claims"] = [ClaimOut.model_validate(c).model_dump() for c in item.claims]
    return ItemDetailOut.model_validate(data)


# ===== Feed =====

@router.get("", response_model=list[ItemOut])
def list_items(
    category: Optional[str] = Query(default=None, description='Category filter, "ALL" for no filter'),
    db: Session = Depends(get_db),
):
    return item_service.list_available_items(db, category)


@router.get("/mine", response_model=list[ItemOut])
def list_my_items(
    mode: str = Query(default="posted", pattern="^(posted|claimed)$"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return item_service.list_user_items(db, user.id, mode)


@router.get("/{item_id}", response_model=ItemDetailOut)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return _item_detail(db, item_service.get_item(db, item_id))


# ===== Lifecycle =====

@router.post("", response_model=ItemOut, status_code=201)
def create_item(
    payload: ItemCreateIn,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return item_service.create_item(db, user.id, payload)


@router.post("/{item_id}/claim", response_model=ClaimOut, status_code=201)
def claim_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return item_service.claim_item(db, emitter, item_id, user.id)


@router.delete("/{item_id}", response_model=ItemOut)
def delete_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return item_service.delete_item(db, item_id, user.id)
