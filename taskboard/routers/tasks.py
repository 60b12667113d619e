from typing import List
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Task as TaskModel, TaskList as TaskListModel, User
from ..schemas.task import Task as TaskSchema, TaskCreate, TaskUpdate
from .auth import get_current_user

router = APIRouter()


def _ensure_list_owned(db: Session, list_id: str, current_user: User) -> None:
    exists = (
        db.query(TaskListModel.id)
        .filter(TaskListModel.id == list_id, TaskListModel.owner_id == current_user.id)
        .first()
    )
    if not exists:
        raise HTTPException(status_code=404, detail="List not found or unauthorized")


def _get_owned_task(db: Session, task_id: str, current_user: User) -> TaskModel:
    task = db.query(TaskModel).filter(TaskModel.id == task_id, TaskModel.owner_id == current_user.id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


def _with_subtask_ids(subtasks: List[dict]) -> List[dict]:
    return [{**subtask, "id": subtask.get("id") or str(uuid4())} for subtask in subtasks]


@router.get("/tasks", response_model=List[TaskSchema])
def get_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get every task of the current user across all lists."""
    return (
        db.query(TaskModel)
        .filter(TaskModel.owner_id == current_user.id)
        .order_by(TaskModel.created_at.asc())
        .all()
    )


@router.get("/tasks/{list_id}", response_model=List[TaskSchema])
def get_list_tasks(
    list_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get the tasks of one list."""
    return (
        db.query(TaskModel)
        .filter(TaskModel.owner_id == current_user.id, TaskModel.list_id == list_id)
        .order_by(TaskModel.created_at.asc())
        .all()
    )


@router.post("/tasks", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new task under one of the user's lists."""
    _ensure_list_owned(db, task.list_id, current_user)

    data = task.model_dump()
    data["subtasks"] = _with_subtask_ids(data["subtasks"])
    db_task = TaskModel(owner_id=current_user.id, **data)
    db.add(db_task)
    db.commit()
    db.refresh(db_task)
    return db_task


@router.patch("/tasks/{task_id}", response_model=TaskSchema)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply a partial update to a task.

    Sequences (tags, subtasks, blocked_by...) are replaced whole.
    """
    task = _get_owned_task(db, task_id, current_user)
    data = task_update.model_dump(exclude_unset=True)

    if task_id in (data.get("blocked_by") or []):
        raise HTTPException(status_code=422, detail="A task cannot block itself")
    if data.get("list_id") is not None and data["list_id"] != task.list_id:
        _ensure_list_owned(db, data["list_id"], current_user)
    if data.get("subtasks") is not None:
        data["subtasks"] = _with_subtask_ids(data["subtasks"])

    for field, value in data.items():
        if value is None and field not in ("due_date", "due_time", "location"):
            continue
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task


@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a specific task. References to it in other tasks are left as is."""
    task = _get_owned_task(db, task_id, current_user)

    db.delete(task)
    db.commit()
    return {"detail": "Task deleted"}
