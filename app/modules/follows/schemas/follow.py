from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class FollowCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Identity provider uid of the user to follow
    following_id: str = Field(alias="followingId", min_length=1)

class Follow(BaseModel):
    """Follow model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    follower_id: str
    following_id: str
    created_at: datetime

class FollowCreateResponse(BaseModel):
    success: bool = True
    follow: Follow
