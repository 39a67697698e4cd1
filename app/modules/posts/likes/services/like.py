import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AlreadyExistsError, internal_error, not_found
from app.db.errors import is_unique_violation
from app.modules.posts.likes.models.like import Like
from app.modules.posts.models.post import Post
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def add_like(db: Session, post_id: str, user: User) -> Like:
    """
    Insert a like row. The (post_id, user_id) unique constraint decides duplicates:
    a second like raises AlreadyExistsError and leaves exactly one row.
    """
    if db.query(Post.id).filter(Post.id == post_id).first() is None:
        raise not_found("post_not_found")

    like = Like(id=str(uuid.uuid4()), post_id=post_id, user_id=user.id)
    db.add(like)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise AlreadyExistsError(f"user {user.id} already likes post {post_id}") from e
        logger.error(f"Error creating like: {e}")
        raise internal_error("like_create_failed")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating like: {e}")
        raise internal_error("like_create_failed")

    db.refresh(like)
    return like

def remove_like(db: Session, post_id: str, user: User) -> int:
    """Delete the caller's like if present; returns the number of rows removed (0 is fine)"""
    try:
        deleted = (
            db.query(Like)
            .filter(Like.post_id == post_id, Like.user_id == user.id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting like: {e}")
        raise internal_error("like_delete_failed")
    return deleted
