from sqlmodel import SQLModel, Field, Relationship, Column, JSON
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, List
from uuid import uuid4
import enum


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Recurrence(str, enum.Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Task(SQLModel, table=True):
    """Task model.

    `blocked_by` holds ids of other tasks of the same owner. Entries are not
    cleared when the referenced task is deleted. `subtasks` is stored whole
    and rewritten whole on every update.
    """
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    owner_id: str = Field(index=True, foreign_key="users.id")
    list_id: str = Field(index=True, foreign_key="lists.id")
    title: str
    note: str = Field(default="")
    completed: bool = Field(default=False)
    important: bool = Field(default=False)
    priority: Priority = Field(default=Priority.LOW)
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    recurrence: Recurrence = Field(default=Recurrence.NONE)
    status: TaskStatus = Field(default=TaskStatus.TODO)
    time_spent: int = Field(default=0)
    blocked_by: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    subtasks: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    attachments: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    location: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationship back to user
    owner: Optional["User"] = Relationship(back_populates="tasks")
