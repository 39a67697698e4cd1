from pydantic import BaseModel


class SuccessResponse(BaseModel):
    """Body returned by mutations that have nothing else to report"""
    success: bool = True
