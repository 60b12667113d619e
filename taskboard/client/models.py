"""Immutable client-side entities parsed from service responses."""
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"

STATUS_TODO = "todo"
STATUS_IN_PROGRESS = "in_progress"
STATUS_DONE = "done"
KANBAN_STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_DONE)

VIEW_IMPORTANT = "important"
VIEW_PLANNED = "planned"
VIEW_TODAY = "today"
VIRTUAL_LISTS = (VIEW_IMPORTANT, VIEW_PLANNED, VIEW_TODAY)

DEFAULT_LIST_NAME = "My Tasks"


class Subtask(BaseModel):
    id: Optional[str] = None
    title: str
    completed: bool = False

    class Config:
        frozen = True


class Task(BaseModel):
    id: str
    owner_id: Optional[str] = None
    # None only for legacy records; such tasks show up in every concrete list
    list_id: Optional[str] = None
    title: str
    note: str = ""
    completed: bool = False
    important: bool = False
    priority: Optional[str] = PRIORITY_LOW
    due_date: Optional[date] = None
    due_time: Optional[str] = None
    tags: Tuple[str, ...] = ()
    recurrence: str = "none"
    status: Optional[str] = STATUS_TODO
    time_spent: int = 0
    blocked_by: Tuple[str, ...] = ()
    subtasks: Tuple[Subtask, ...] = ()
    attachments: Tuple[Dict[str, Any], ...] = ()
    location: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        frozen = True


class TaskList(BaseModel):
    id: str
    owner_id: Optional[str] = None
    name: str
    icon: str = "List"
    color: str = ""
    default_view: str = "list"
    shared_with: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None

    class Config:
        frozen = True


class User(BaseModel):
    id: str
    email: str
    name: str
    picture: Optional[str] = None
    xp: int = 0
    level: int = 1
    daily_streak: int = 0
    badges: Tuple[str, ...] = ()
    created_at: Optional[datetime] = None

    class Config:
        frozen = True
