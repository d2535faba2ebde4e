from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from app.core.db import SessionLocal
from app.core.events import EventEmitter
from app.core.security import decode_subject
from app.models.user import User

bearer = HTTPBearer()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_emitter(request: Request) -> EventEmitter:
    return request.app.state.emitter

def get_caller_id(creds: HTTPAuthorizationCredentials = Depends(bearer)) -> str:
    """External identity of the caller, whether or not a profile exists yet."""
    user_id = decode_subject(creds.credentials)
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user_id

def get_current_user(
    user_id: str = Depends(get_caller_id),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Profile not synced")
    return user
