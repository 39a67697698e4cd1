from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

class LikeCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    post_id: str = Field(alias="postId", min_length=1)

class Like(BaseModel):
    """Like model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    user_id: str
    created_at: datetime

class LikeCreateResponse(BaseModel):
    success: bool = True
    like: Like
