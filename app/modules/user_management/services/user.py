from typing import Optional, Tuple
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import Identity
from app.modules.user_management.models.user import User
from app.modules.user_management.schemas.user import UserWithStats
from app.modules.posts.models.post import Post
from app.modules.follows.models.follow import Follow
from app.modules.follows.services.follow import is_following as is_following_user

logger = logging.getLogger(__name__)

def get_user_by_external_id(db: Session, external_id: str) -> Optional[User]:
    """Get user by identity provider uid"""
    if not external_id:
        return None
    return db.query(User).filter(User.external_id == external_id).first()

def _display_name(identity: Identity) -> str:
    if identity.name and identity.name.strip():
        return identity.name.strip()
    if identity.email:
        return identity.email.split("@")[0]
    return "User"

def sync_user(db: Session, identity: Identity) -> Tuple[User, bool]:
    """Gets or creates the internal user for an identity; returns (user, created)"""
    user = get_user_by_external_id(db, identity.uid)
    if user:
        name = _display_name(identity)
        if identity.name and user.name != name:
            user.name = name
            db.commit()
            db.refresh(user)
        return user, False

    user = User(id=str(uuid.uuid4()), external_id=identity.uid, name=_display_name(identity))
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent request created the same external_id first
        db.rollback()
        existing = get_user_by_external_id(db, identity.uid)
        if existing is None:
            raise
        return existing, False

    db.refresh(user)
    logger.info(f"Created user {user.id} for identity {identity.uid}")
    return user, True

def get_user_with_stats(db: Session, external_id: str, viewer: Optional[User] = None) -> Optional[UserWithStats]:
    """Get a user profile with post/follower/following counts and the viewer's follow state"""
    user = get_user_by_external_id(db, external_id)
    if not user:
        return None

    posts_count = db.scalar(select(func.count(Post.id)).where(Post.user_id == user.id)) or 0
    followers_count = db.scalar(select(func.count(Follow.id)).where(Follow.following_id == user.id)) or 0
    following_count = db.scalar(select(func.count(Follow.id)).where(Follow.follower_id == user.id)) or 0

    is_following = False
    if viewer is not None and viewer.id != user.id:
        is_following = is_following_user(db, viewer.id, user.id)

    return UserWithStats(
        id=user.id,
        external_id=user.external_id,
        name=user.name,
        created_at=user.created_at,
        posts_count=posts_count,
        followers_count=followers_count,
        following_count=following_count,
        is_following=is_following,
    )
