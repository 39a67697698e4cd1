from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.errors import AlreadyExistsError, bad_request, conflict, not_found
from app.core.responses import SuccessResponse
from app.core.security import Identity
from app.db.session import get_db
from app.deps import get_current_identity
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_external_id
from app.modules.follows.schemas.follow import Follow as FollowSchema, FollowCreate, FollowCreateResponse
from app.modules.follows.services.follow import add_follow, remove_follow

router = APIRouter()

def _resolve_pair(db: Session, identity: Identity, following_id: str, missing_code: str) -> tuple:
    """Resolve (follower, following) users or raise 404"""
    follower = get_user_by_external_id(db, identity.uid)
    if not follower:
        raise not_found("user_not_found")

    following: User = get_user_by_external_id(db, following_id)
    if not following:
        raise not_found(missing_code)
    return follower, following

@router.post("", response_model=FollowCreateResponse)
def follow_user(
    *,
    db: Session = Depends(get_db),
    follow_in: FollowCreate,
    identity: Identity = Depends(get_current_identity),
) -> Any:
    """Follow a user by identity provider uid; 409 if already following, 400 on self-follow"""
    if follow_in.following_id == identity.uid:
        raise bad_request("cannot_follow_self")

    follower, following = _resolve_pair(db, identity, follow_in.following_id, "follow_target_not_found")
    try:
        follow = add_follow(db, follower, following)
    except AlreadyExistsError:
        raise conflict("already_following")
    return FollowCreateResponse(follow=FollowSchema.model_validate(follow))

@router.delete("", response_model=SuccessResponse)
def unfollow_user(
    *,
    db: Session = Depends(get_db),
    following_id: str = Query(..., alias="followingId", min_length=1),
    identity: Identity = Depends(get_current_identity),
) -> Any:
    """Stop following a user; succeeds even when there was no follow"""
    follower, following = _resolve_pair(db, identity, following_id, "unfollow_target_not_found")
    remove_follow(db, follower, following)
    return SuccessResponse()
