from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from app.modules.user_management.schemas.user import User

class PostBase(BaseModel):
    image_url: str
    caption: Optional[str] = None

class Post(PostBase):
    """Post model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime

class PostWithStats(Post):
    """Post with its owner, counters and the viewer's like state"""
    user: Optional[User] = None
    likes_count: int = 0
    comments_count: int = 0
    is_liked: bool = False

class PostPage(BaseModel):
    """One window of the post feed"""
    items: List[PostWithStats]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.total > self.offset + self.limit

class PageMeta(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool = Field(serialization_alias="hasMore")

class PostListResponse(BaseModel):
    data: List[PostWithStats]
    meta: PageMeta

    @classmethod
    def from_page(cls, page: PostPage) -> "PostListResponse":
        return cls(
            data=page.items,
            meta=PageMeta(total=page.total, limit=page.limit, offset=page.offset, has_more=page.has_more),
        )

class PostDetailResponse(BaseModel):
    data: PostWithStats

class PostCreateResponse(BaseModel):
    success: bool = True
    post: Post
