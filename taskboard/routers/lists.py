from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import Task as TaskModel, TaskList as TaskListModel, User
from ..schemas.task_list import TaskList as TaskListSchema, TaskListCreate, TaskListUpdate
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_owned_list(db: Session, list_id: str, current_user: User) -> TaskListModel:
    task_list = (
        db.query(TaskListModel)
        .filter(TaskListModel.id == list_id, TaskListModel.owner_id == current_user.id)
        .first()
    )
    if not task_list:
        raise HTTPException(status_code=404, detail="List not found or unauthorized")
    return task_list


@router.get("/lists", response_model=List[TaskListSchema])
def get_lists(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Get all lists of the current user in creation order."""
    return (
        db.query(TaskListModel)
        .filter(TaskListModel.owner_id == current_user.id)
        .order_by(TaskListModel.created_at.asc())
        .all()
    )


@router.post("/lists", response_model=TaskListSchema, status_code=status.HTTP_201_CREATED)
def create_list(
    task_list: TaskListCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a new list for the user."""
    db_list = TaskListModel(owner_id=current_user.id, name=task_list.name)
    for field, value in task_list.model_dump(exclude={"name"}, exclude_none=True).items():
        setattr(db_list, field, value)
    db.add(db_list)
    db.commit()
    db.refresh(db_list)
    return db_list


@router.patch("/lists/{list_id}", response_model=TaskListSchema)
def update_list(
    list_id: str,
    list_update: TaskListUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Apply a partial update to a list."""
    task_list = _get_owned_list(db, list_id, current_user)

    for field, value in list_update.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(task_list, field, value)

    db.commit()
    db.refresh(task_list)
    return task_list


@router.delete("/lists/{list_id}")
def delete_list(
    list_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete a list and every task under it."""
    task_list = _get_owned_list(db, list_id, current_user)

    removed = (
        db.query(TaskModel)
        .filter(TaskModel.list_id == list_id, TaskModel.owner_id == current_user.id)
        .delete(synchronize_session=False)
    )
    db.delete(task_list)
    db.commit()
    logger.info("Deleted list %s with %d tasks", list_id, removed)
    return {"detail": "List and associated tasks deleted"}
