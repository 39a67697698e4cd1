from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import AlreadyExistsError, conflict
from app.core.responses import SuccessResponse
from app.db.session import get_db
from app.deps import get_current_user
from app.modules.user_management.models.user import User
from app.modules.posts.likes.schemas.like import Like as LikeSchema, LikeCreate, LikeCreateResponse
from app.modules.posts.likes.services.like import add_like, remove_like

router = APIRouter()

@router.post("", response_model=LikeCreateResponse)
def like_post(
    *,
    db: Session = Depends(get_db),
    like_in: LikeCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Like a post; 409 when the caller already likes it"""
    try:
        like = add_like(db, like_in.post_id, current_user)
    except AlreadyExistsError:
        raise conflict("already_liked")
    return LikeCreateResponse(like=LikeSchema.model_validate(like))

@router.delete("", response_model=SuccessResponse)
def unlike_post(
    *,
    db: Session = Depends(get_db),
    post_id: str = Query(..., alias="postId", min_length=1),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Remove the caller's like; succeeds even when there was none"""
    remove_like(db, post_id, current_user)
    return SuccessResponse()
