from pydantic import BaseModel

from app.modules.user_management.schemas.user import User

class SyncResponse(BaseModel):
    """Result of mapping the caller's identity onto an internal user"""
    success: bool = True
    user: User
    created: bool

class CurrentUserResponse(BaseModel):
    data: User
