from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class User(BaseModel):
    id: str
    email: str
    name: str
    picture: Optional[str] = None
    xp: int
    level: int
    daily_streak: int
    badges: List[str]
    created_at: datetime

    class Config:
        from_attributes = True


class UserProgressUpdate(BaseModel):
    """Progression fields the client may write.

    The values are computed on the client and trusted as sent.
    """
    xp: Optional[int] = Field(default=None, ge=0)
    level: Optional[int] = Field(default=None, ge=1)
    badges: Optional[List[str]] = None


class GoogleLogin(BaseModel):
    credential: str


class TokenData(BaseModel):
    user_id: Optional[str] = None


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
