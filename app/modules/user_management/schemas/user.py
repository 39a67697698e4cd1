from datetime import datetime
from pydantic import BaseModel, ConfigDict

class UserBase(BaseModel):
    external_id: str
    name: str

class User(UserBase):
    """User model returned to client"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime

class UserWithStats(User):
    """User with profile counters and the viewer's follow state"""
    posts_count: int = 0
    followers_count: int = 0
    following_count: int = 0
    is_following: bool = False

class UserDetailResponse(BaseModel):
    data: UserWithStats
