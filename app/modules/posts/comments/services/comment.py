from typing import List, Optional
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.errors import bad_request, forbidden, internal_error, not_found
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.models.post import Post
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def get_comment(db: Session, comment_id: str) -> Optional[Comment]:
    """Get comment by ID"""
    return db.query(Comment).filter(Comment.id == comment_id).first()

def list_comments(db: Session, post_id: str, limit: Optional[int] = None, offset: int = 0) -> List[Comment]:
    """Comments on a post, oldest first; the window applies only when a limit is given"""
    query = (
        db.query(Comment)
        .options(joinedload(Comment.user))
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    if limit is not None:
        query = query.offset(offset).limit(limit)
    try:
        return query.all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching comments for post {post_id}: {e}")
        raise internal_error("comments_fetch_failed")

def create_comment(db: Session, post_id: str, user: User, content: str) -> Comment:
    """Create a comment on an existing post and return it with its author loaded"""
    content = (content or "").strip()
    if not content:
        raise bad_request("content_required")

    if db.query(Post.id).filter(Post.id == post_id).first() is None:
        raise not_found("post_not_found")

    comment = Comment(
        id=str(uuid.uuid4()),
        post_id=post_id,
        user_id=user.id,
        content=content,
    )
    db.add(comment)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating comment: {e}")
        raise internal_error("comment_create_failed")

    db.refresh(comment)
    comment.user = user
    return comment

def delete_comment(db: Session, comment_id: str, user: User) -> None:
    """Delete a comment; only its author (by internal user id) may do so"""
    comment = get_comment(db, comment_id)
    if not comment:
        raise not_found("comment_not_found")

    if comment.user_id != user.id:
        logger.warning(f"User {user.id} tried to delete comment {comment_id} owned by {comment.user_id}")
        raise forbidden("comment_forbidden")

    try:
        db.delete(comment)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting comment {comment_id}: {e}")
        raise internal_error("comment_delete_failed")
