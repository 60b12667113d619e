from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import List, Optional

from ..models import ListView


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("List name cannot be empty")
    return value


class TaskListCreate(BaseModel):
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    default_view: Optional[ListView] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value):
        return _clean_name(value)


class TaskListUpdate(BaseModel):
    """Partial update; unset fields are left alone."""
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    default_view: Optional[ListView] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value):
        return _clean_name(value)


class TaskList(BaseModel):
    id: str
    owner_id: str
    name: str
    icon: str
    color: str
    default_view: ListView
    shared_with: List[str]
    created_at: datetime

    class Config:
        from_attributes = True
