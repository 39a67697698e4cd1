"""
Post feed aggregation.

Decorates posts with their owner, like and comment counts and the viewer's
like state. A page is built from three queries regardless of its size: the
page itself (posts joined with owner and per-post count subqueries), the
total for the same filter, and the viewer's likes among the page's posts.
"""
from typing import List, Optional, Set
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import internal_error
from app.modules.posts.models.post import Post as PostModel
from app.modules.posts.comments.models.comment import Comment
from app.modules.posts.likes.models.like import Like
from app.modules.posts.schemas.post import PostPage, PostWithStats
from app.modules.user_management.models.user import User as UserModel
from app.modules.user_management.schemas.user import User as UserSchema
from app.modules.user_management.services.user import get_user_by_external_id

logger = logging.getLogger(__name__)

def _likes_count_subquery():
    return (
        select(Like.post_id, func.count(Like.id).label("likes_count"))
        .group_by(Like.post_id)
        .subquery()
    )

def _comments_count_subquery():
    return (
        select(Comment.post_id, func.count(Comment.id).label("comments_count"))
        .group_by(Comment.post_id)
        .subquery()
    )

def _build_posts_query():
    likes = _likes_count_subquery()
    comments = _comments_count_subquery()
    return (
        select(
            PostModel,
            UserModel,
            func.coalesce(likes.c.likes_count, 0).label("likes_count"),
            func.coalesce(comments.c.comments_count, 0).label("comments_count"),
        )
        .join(UserModel, UserModel.id == PostModel.user_id)
        .outerjoin(likes, likes.c.post_id == PostModel.id)
        .outerjoin(comments, comments.c.post_id == PostModel.id)
    )

def _liked_post_ids(db: Session, viewer_id: Optional[str], post_ids: List[str]) -> Set[str]:
    """Which of ``post_ids`` the viewer has liked"""
    if not viewer_id or not post_ids:
        return set()
    rows = db.execute(
        select(Like.post_id).where(Like.user_id == viewer_id, Like.post_id.in_(post_ids))
    )
    return {row.post_id for row in rows}

def _to_post_with_stats(row, liked: Set[str]) -> PostWithStats:
    post_model, user_model, likes_count, comments_count = row
    return PostWithStats(
        id=post_model.id,
        user_id=post_model.user_id,
        image_url=post_model.image_url,
        caption=post_model.caption,
        created_at=post_model.created_at,
        updated_at=post_model.updated_at,
        user=UserSchema.model_validate(user_model),
        likes_count=likes_count,
        comments_count=comments_count,
        is_liked=post_model.id in liked,
    )

def get_posts_page(
    db: Session,
    limit: int = settings.DEFAULT_PAGE_LIMIT,
    offset: int = 0,
    subject_external_id: Optional[str] = None,
    viewer_id: Optional[str] = None,
) -> PostPage:
    """
    Newest-first page of posts, optionally only those owned by ``subject_external_id``.
    An unknown subject yields an empty page. Any database error becomes a 500.
    """
    logger.info(f"Getting posts page limit={limit} offset={offset} subject={subject_external_id}")
    try:
        query = _build_posts_query()
        count_query = select(func.count(PostModel.id))

        if subject_external_id:
            subject = get_user_by_external_id(db, subject_external_id)
            if subject is None:
                return PostPage(items=[], total=0, limit=limit, offset=offset)
            query = query.where(PostModel.user_id == subject.id)
            count_query = count_query.where(PostModel.user_id == subject.id)

        rows = db.execute(
            query.order_by(PostModel.created_at.desc(), PostModel.id.desc()).offset(offset).limit(limit)
        ).all()
        total = db.scalar(count_query) or 0
        liked = _liked_post_ids(db, viewer_id, [row[0].id for row in rows])
    except SQLAlchemyError as e:
        logger.error(f"Error fetching posts: {e}")
        raise internal_error("posts_fetch_failed")

    return PostPage(
        items=[_to_post_with_stats(row, liked) for row in rows],
        total=total,
        limit=limit,
        offset=offset,
    )

def get_post_with_stats(db: Session, post_id: str, viewer_id: Optional[str] = None) -> Optional[PostWithStats]:
    """Single decorated post, or None when it does not exist"""
    try:
        row = db.execute(_build_posts_query().where(PostModel.id == post_id)).first()
        if row is None:
            return None
        liked = _liked_post_ids(db, viewer_id, [post_id])
    except SQLAlchemyError as e:
        logger.error(f"Error fetching post {post_id}: {e}")
        raise internal_error("posts_fetch_failed")
    return _to_post_with_stats(row, liked)
