from typing import Optional
import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AlreadyExistsError, bad_request, internal_error
from app.db.errors import is_check_violation, is_unique_violation
from app.modules.follows.models.follow import Follow
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def get_follow(db: Session, follower_id: str, following_id: str) -> Optional[Follow]:
    """Get the follow edge from follower to following"""
    return db.query(Follow).filter(
        Follow.follower_id == follower_id,
        Follow.following_id == following_id,
    ).first()

def is_following(db: Session, follower_id: str, following_id: str) -> bool:
    return get_follow(db, follower_id, following_id) is not None

def add_follow(db: Session, follower: User, following: User) -> Follow:
    """
    Insert a follow edge. Duplicates are rejected by the unique constraint
    (AlreadyExistsError) and self-follows by the check constraint.
    """
    if follower.id == following.id:
        raise bad_request("cannot_follow_self")

    follow = Follow(id=str(uuid.uuid4()), follower_id=follower.id, following_id=following.id)
    db.add(follow)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            raise AlreadyExistsError(f"user {follower.id} already follows {following.id}") from e
        if is_check_violation(e):
            raise bad_request("cannot_follow_self")
        logger.error(f"Error creating follow: {e}")
        raise internal_error("follow_create_failed")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating follow: {e}")
        raise internal_error("follow_create_failed")

    db.refresh(follow)
    logger.info(f"User {follower.id} now follows {following.id}")
    return follow

def remove_follow(db: Session, follower: User, following: User) -> int:
    """Delete the follow edge if present; returns the number of rows removed"""
    try:
        deleted = db.query(Follow).filter(
            Follow.follower_id == follower.id,
            Follow.following_id == following.id,
        ).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting follow: {e}")
        raise internal_error("follow_delete_failed")
    return deleted
