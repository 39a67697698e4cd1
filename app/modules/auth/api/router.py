"""Identity endpoints: map the identity provider's user onto an internal user record"""
import logging
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import internal_error
from app.core.security import Identity
from app.db.session import get_db
from app.deps import get_current_identity, get_current_user
from app.modules.auth.schemas.auth import CurrentUserResponse, SyncResponse
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import User as UserSchema
from app.modules.user_management.services.user import sync_user

logger = logging.getLogger("app")

router = APIRouter()

@router.post("/sync", response_model=SyncResponse)
def sync_current_user(
    *,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> Any:
    """Create (or refresh) the internal user for the signed-in caller"""
    try:
        user, created = sync_user(db, identity)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error syncing user {identity.uid}: {e}")
        raise internal_error("user_sync_failed")
    return SyncResponse(user=UserSchema.model_validate(user), created=created)

@router.get("/me", response_model=CurrentUserResponse)
def read_current_user(current_user: User = Depends(get_current_user)) -> Any:
    """Get the internal user for the signed-in caller"""
    return CurrentUserResponse(data=UserSchema.model_validate(current_user))
