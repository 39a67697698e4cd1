from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.errors import not_found
from app.db.session import get_db
from app.deps import get_optional_viewer
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import UserDetailResponse
from app.modules.user_management.services.user import get_user_with_stats

router = APIRouter()

@router.get("/{user_id}", response_model=UserDetailResponse)
def read_user_profile(
    user_id: str,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_viewer),
) -> Any:
    """Get a profile (by identity provider uid) with counts and the caller's follow state"""
    profile = get_user_with_stats(db, user_id, viewer=viewer)
    if not profile:
        raise not_found("user_not_found")
    return UserDetailResponse(data=profile)
