from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.events import EventEmitter
from app.deps import get_current_user, get_db, get_emitter
from app.models.user import User
from app.schemas.item import ClaimOut, ClaimWithItemOut
from app.services import claim_service

router = APIRouter(prefix="/claims", tags=["claims"])


@router.get("/mine", response_model=list[ClaimWithItemOut])
def list_my_claims(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return claim_service.list_my_claims(db, user.id)


@router.put("/{claim_id}/complete", response_model=ClaimOut)
def complete_claim(
    claim_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return claim_service.complete_claim(db, emitter, claim_id, user.id)


@router.put("/{claim_id}/cancel", response_model=ClaimOut)
def cancel_claim(
    claim_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    emitter: EventEmitter = Depends(get_emitter),
):
    return claim_service.cancel_claim(db, emitter, claim_id, user.id)
