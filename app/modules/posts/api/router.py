from typing import Any, Optional
import logging

from fastapi import APIRouter, Depends, UploadFile, File, Form, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import bad_request, not_found
from app.core.responses import SuccessResponse
from app.db.session import get_db
from app.deps import get_current_identity, get_current_user, get_optional_viewer
from app.core.security import Identity
from app.modules.media.router import get_media_service
from app.modules.media.service import MediaService, read_image
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_external_id
from app.modules.posts.schemas.post import (
    Post as PostSchema, PostCreateResponse, PostDetailResponse, PostListResponse
)
from app.modules.posts.services.aggregator import get_post_with_stats, get_posts_page
from app.modules.posts.services.post import create_post_with_image, delete_post, normalize_caption

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=PostListResponse)
def read_posts(
    db: Session = Depends(get_db),
    limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    user_id: Optional[str] = Query(None, alias="userId"),
    viewer: Optional[User] = Depends(get_optional_viewer),
) -> Any:
    """
    Newest-first posts with like/comment counts and the caller's like state.
    ``userId`` (identity provider uid) restricts the feed to one profile.
    """
    page = get_posts_page(
        db,
        limit=limit,
        offset=offset,
        subject_external_id=user_id,
        viewer_id=viewer.id if viewer else None,
    )
    return PostListResponse.from_page(page)

@router.post("", response_model=PostCreateResponse)
async def create_new_post(
    *,
    db: Session = Depends(get_db),
    image: Optional[UploadFile] = File(None),
    caption: Optional[str] = Form(None),
    identity: Identity = Depends(get_current_identity),
    media: MediaService = Depends(get_media_service),
) -> Any:
    """
    Create new post from an uploaded image and optional caption.
    """
    if image is None or not image.filename:
        raise bad_request("image_required")

    body = await read_image(image)
    caption = normalize_caption(caption)

    owner = get_user_by_external_id(db, identity.uid)
    if not owner:
        raise not_found("user_not_found")

    post = create_post_with_image(
        db,
        media,
        owner,
        filename=image.filename,
        content_type=image.content_type,
        body=body,
        caption=caption,
    )
    logger.info(f"Created post {post.id} for user {owner.id}")
    return PostCreateResponse(post=PostSchema.model_validate(post))

@router.get("/{post_id}", response_model=PostDetailResponse)
def read_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    viewer: Optional[User] = Depends(get_optional_viewer),
) -> Any:
    """
    Get post by ID with counts and the caller's like state.
    """
    post = get_post_with_stats(db, post_id, viewer_id=viewer.id if viewer else None)
    if not post:
        raise not_found("post_not_found")
    return PostDetailResponse(data=post)

@router.delete("/{post_id}", response_model=SuccessResponse)
def delete_post_by_id(
    *,
    db: Session = Depends(get_db),
    post_id: str,
    current_user: User = Depends(get_current_user),
    media: MediaService = Depends(get_media_service),
) -> Any:
    """
    Delete a post and all associated data. Only the owner may delete it:
    1. All likes on this post
    2. All comments on this post
    3. The post itself, then its image (best-effort)
    """
    delete_post(db, media, post_id, current_user)
    return SuccessResponse()
