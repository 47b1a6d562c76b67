from pydantic import BaseModel
from typing import Optional


class TokenData(BaseModel):
    username: Optional[str] = None
    user_id: Optional[str] = None


class CurrentUser(BaseModel):
    """The authenticated identity attached to a request"""
    user_id: str
    username: Optional[str] = None
