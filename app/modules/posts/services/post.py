from typing import Optional
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import bad_request, forbidden, internal_error, not_found
from app.modules.media.service import MediaService
from app.modules.posts.models.post import Post
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.likes.models.like import Like
from app.modules.user_management.models.user import User

logger = logging.getLogger(__name__)

def get_post(db: Session, post_id: str) -> Optional[Post]:
    """Get post by ID"""
    return db.query(Post).filter(Post.id == post_id).first()

def normalize_caption(caption: Optional[str]) -> Optional[str]:
    """Trimmed caption, None when blank; rejects captions over the length limit"""
    if caption is None:
        return None
    if len(caption) > settings.MAX_CAPTION_LENGTH:
        raise bad_request("caption_too_long", max_length=settings.MAX_CAPTION_LENGTH)
    return caption.strip() or None

def create_post(db: Session, user_id: str, image_url: str, caption: Optional[str]) -> Post:
    """Create new post"""
    logging.info(f"Creating post for user ID: {user_id}")
    post = Post(
        id=str(uuid.uuid4()),
        user_id=user_id,
        image_url=image_url,
        caption=caption,
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post

def create_post_with_image(
    db: Session,
    media: MediaService,
    owner: User,
    filename: Optional[str],
    content_type: Optional[str],
    body: bytes,
    caption: Optional[str],
) -> Post:
    """
    Store an image already checked by validate_image, then persist the post that
    references it. If the insert fails the uploaded object is removed on a
    best-effort basis.
    """
    key, image_url = media.upload_image(owner.external_id, filename, body, content_type)
    try:
        return create_post(db, owner.id, image_url, caption)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating post: {e}")
        media.discard(key)
        raise internal_error("post_create_failed")

def delete_post(db: Session, media: MediaService, post_id: str, user: User) -> None:
    """
    Delete an owned post with its likes and comments, then its image (best-effort)
    """
    post = get_post(db, post_id)
    if not post:
        raise not_found("post_not_found")
    if post.user_id != user.id:
        raise forbidden("post_forbidden")

    logging.info(f"Deleting post with ID: {post.id}")
    image_url = post.image_url
    try:
        # Delete associated likes and comments first to maintain referential integrity
        db.query(Like).filter(Like.post_id == post.id).delete(synchronize_session=False)
        db.query(Comment).filter(Comment.post_id == post.id).delete(synchronize_session=False)
        db.delete(post)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error deleting post {post_id}: {e}")
        raise internal_error("post_delete_failed")

    media.discard_url(image_url)
