from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from datetime import datetime, timezone
from typing import Optional, List
from uuid import uuid4
import enum


class ListView(str, enum.Enum):
    LIST = "list"
    KANBAN = "kanban"


class TaskList(SQLModel, table=True):
    """A user-owned list of tasks."""
    __tablename__ = "lists"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    owner_id: str = Field(index=True, foreign_key="users.id")
    name: str
    icon: str = Field(default="List")
    color: str = Field(default="")
    default_view: ListView = Field(default=ListView.LIST)
    # Stored but not used by any operation
    shared_with: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    owner: Optional["User"] = Relationship(back_populates="lists")
