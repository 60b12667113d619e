from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from datetime import datetime, timezone
from typing import Optional, List
from uuid import uuid4


class User(SQLModel, table=True):
    """User model keyed by the identity provider's subject.

    Progression (xp, level, badges) is written by the client through
    PATCH /auth/me; the service stores it as given.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    google_id: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    name: str
    picture: Optional[str] = None
    xp: int = Field(default=0)
    level: int = Field(default=1)
    daily_streak: int = Field(default=0)
    badges: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    lists: List["TaskList"] = Relationship(back_populates="owner")
    tasks: List["Task"] = Relationship(back_populates="owner")
