from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.modules.user_management.schemas.user import User

class CommentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    post_id: str = Field(alias="postId", min_length=1)
    content: str

class Comment(BaseModel):
    """Comment model returned to client, joined with its author"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime
    user: Optional[User] = None

class CommentListResponse(BaseModel):
    data: List[Comment]

class CommentCreateResponse(BaseModel):
    success: bool = True
    comment: Comment
