from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Optional

from ..models import Priority, Recurrence, TaskStatus


def _clean_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Task title cannot be empty")
    return value


class Subtask(BaseModel):
    id: Optional[str] = None
    title: str
    completed: bool = False

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return _clean_title(value)


class Attachment(BaseModel):
    url: str
    filename: Optional[str] = None
    type: Optional[str] = None


class Location(BaseModel):
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius: Optional[float] = None
    name: Optional[str] = None


class TaskCreate(BaseModel):
    """Schema for creating new tasks under a concrete list."""
    list_id: str
    title: str
    note: str = ""
    important: bool = False
    priority: Priority = Priority.LOW
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    recurrence: Recurrence = Recurrence.NONE
    status: TaskStatus = TaskStatus.TODO
    blocked_by: List[str] = Field(default_factory=list)
    subtasks: List[Subtask] = Field(default_factory=list)
    attachments: List[Attachment] = Field(default_factory=list)
    location: Optional[Location] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return _clean_title(value)


class TaskUpdate(BaseModel):
    """Schema for partial task updates. Only fields that were sent are applied."""
    list_id: Optional[str] = None
    title: Optional[str] = None
    note: Optional[str] = None
    completed: Optional[bool] = None
    important: Optional[bool] = None
    priority: Optional[Priority] = None
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    tags: Optional[List[str]] = None
    recurrence: Optional[Recurrence] = None
    status: Optional[TaskStatus] = None
    time_spent: Optional[int] = Field(default=None, ge=0)
    blocked_by: Optional[List[str]] = None
    subtasks: Optional[List[Subtask]] = None
    attachments: Optional[List[Attachment]] = None
    location: Optional[Location] = None

    @field_validator("title")
    @classmethod
    def check_title(cls, value):
        return _clean_title(value)


class Task(BaseModel):
    """Complete task schema with all fields."""
    id: str
    owner_id: str
    list_id: str
    title: str
    note: str
    completed: bool
    important: bool
    priority: Priority
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    tags: List[str]
    recurrence: Recurrence
    status: TaskStatus
    time_spent: int
    blocked_by: List[str]
    subtasks: List[Subtask]
    attachments: List[Attachment]
    location: Optional[Location] = None
    created_at: datetime

    class Config:
        from_attributes = True
