from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.responses import SuccessResponse
from app.db.session import get_db
from app.deps import get_current_user
from app.modules.user_management.models.user import User
from app.modules.posts.comments.schemas.comment import (
    Comment as CommentSchema, CommentCreate, CommentCreateResponse, CommentListResponse
)
from app.modules.posts.comments.services.comment import (
    create_comment, delete_comment, list_comments
)

router = APIRouter()

@router.get("", response_model=CommentListResponse)
def read_comments_by_post_id(
    *,
    db: Session = Depends(get_db),
    post_id: str = Query(..., alias="postId", min_length=1),
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> Any:
    """Get comments on a post, oldest first"""
    comments = list_comments(db, post_id=post_id, limit=limit, offset=offset)
    return CommentListResponse(data=[CommentSchema.model_validate(c) for c in comments])

@router.post("", response_model=CommentCreateResponse)
def create_new_comment(
    *,
    db: Session = Depends(get_db),
    comment_in: CommentCreate,
    current_user: User = Depends(get_current_user),
) -> Any:
    """Create new comment on a post"""
    comment = create_comment(db, comment_in.post_id, current_user, comment_in.content)
    return CommentCreateResponse(comment=CommentSchema.model_validate(comment))

@router.delete("", response_model=SuccessResponse)
def delete_comment_by_id(
    *,
    db: Session = Depends(get_db),
    comment_id: str = Query(..., alias="commentId", min_length=1),
    current_user: User = Depends(get_current_user),
) -> Any:
    """Delete a comment written by the caller"""
    delete_comment(db, comment_id, current_user)
    return SuccessResponse()
