"""
Mutation coordinator: every create, update and delete of lists, tasks and
user progression goes through here.

Each operation sends the smallest payload that expresses the change, waits
for the service, and only then writes the service's copy of the entity into
the store. On failure the store is left as it was, the notifier gets a
message and the operation returns None (False for deletes). An
AuthenticationFailure also logs the session out.

Operations touching the same entity run one after another (per-entity
asyncio locks), so rapid edits to one task reach the service in the order
they were issued.
"""
from functools import wraps
from typing import Any, Callable, Dict, Optional
import asyncio
import logging

from pydantic_core import to_jsonable_python

from . import blocking
from .errors import (
    AuthenticationFailure,
    NotFoundOrUnauthorized,
    TaskBlocked,
    TaskboardError,
    ValidationFailure,
)
from .gamification import Award, award_completion
from .models import (
    KANBAN_STATUSES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    VIRTUAL_LISTS,
    Task,
    TaskList,
    User,
)
from .notify import Notifier
from .preferences import TaskTemplate
from .session import Session

logger = logging.getLogger(__name__)

PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)

# Fields the client may change on an existing task
TASK_FIELDS = frozenset(Task.model_fields) - {"id", "owner_id", "created_at"}
LIST_FIELDS = frozenset({"name", "icon", "color", "default_view"})


def operation(action: str, failed=None):
    """Recover from client errors at the operation boundary and report them."""
    def decorator(func):
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except AuthenticationFailure as exc:
                logger.warning("Failed to %s: %s", action, exc)
                self.logout()
                self.notifier.error(AuthenticationFailure.user_message)
            except TaskBlocked as exc:
                logger.info("Refused to %s: %s", action, exc)
                self.notifier.warning(exc.user_message)
            except TaskboardError as exc:
                logger.warning("Failed to %s: %s", action, exc)
                self.notifier.error(f"Failed to {action}: {exc}")
            return failed
        return wrapper
    return decorator


def _clean_text(value: Optional[str], what: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationFailure(f"{what} cannot be empty")
    return value


def _changed_fields(current, changes: Dict[str, Any], allowed) -> Dict[str, Any]:
    """Keep only the entries of `changes` that differ from `current`."""
    unknown = set(changes) - set(allowed)
    if unknown:
        raise ValidationFailure(f"Unknown field(s): {', '.join(sorted(unknown))}")
    return {
        field: value
        for field, value in changes.items()
        if to_jsonable_python(getattr(current, field)) != to_jsonable_python(value)
    }


class MutationCoordinator:
    def __init__(self, session: Session, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier or Notifier()
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def api(self):
        return self.session.api

    @property
    def store(self):
        return self.session.store

    def _lock(self, key: str) -> asyncio.Lock:
        return self._locks.setdefault(key, asyncio.Lock())

    def _forget(self, key: str) -> None:
        lock = self._locks.get(key)
        if lock is not None and not lock.locked():
            del self._locks[key]

    def logout(self) -> None:
        self.session.logout()
        self._locks.clear()

    def _require_task(self, task_id: str) -> Task:
        task = self.store.get_task(task_id)
        if task is None:
            raise NotFoundOrUnauthorized(f"Task {task_id} not found")
        return task

    def _require_list(self, list_id: str) -> TaskList:
        task_list = self.store.get_list(list_id)
        if task_list is None:
            raise NotFoundOrUnauthorized(f"List {list_id} not found")
        return task_list

    # Session

    @operation("sign in")
    async def login_with_google(self, credential: str) -> User:
        token, user = await self.api.login_google(credential)
        self.session.sign_in(token, user)
        try:
            await self._load()
        except TaskboardError:
            self.logout()
            raise
        return user

    @operation("load your tasks")
    async def load_initial(self) -> bool:
        await self._load()
        return True

    async def _load(self) -> None:
        lists = await self.api.get_lists()
        tasks = await self.api.get_tasks()
        self.store.replace_lists(lists)
        self.store.replace_tasks(tasks)
        self.session.select_default_list()

    @operation("refresh tasks")
    async def refresh_tasks(self) -> bool:
        self.store.replace_tasks(await self.api.get_tasks())
        return True

    @operation("refresh profile")
    async def refresh_user(self) -> User:
        self.session.user = await self.api.get_me()
        return self.session.user

    # Lists

    @operation("create list")
    async def add_list(self, name: str, icon: str = None, color: str = None, default_view: str = None) -> TaskList:
        payload = {"name": _clean_text(name, "List name")}
        optional = {"icon": icon, "color": color, "default_view": default_view}
        payload.update({k: v for k, v in optional.items() if v is not None})

        created = await self.api.create_list(payload)
        self.store.upsert_list(created)
        self.session.active_list_id = created.id
        self.notifier.success("List created successfully!")
        return created

    @operation("update list")
    async def update_list(self, list_id: str, **changes) -> TaskList:
        if "name" in changes:
            changes["name"] = _clean_text(changes["name"], "List name")
        async with self._lock(f"list:{list_id}"):
            current = self._require_list(list_id)
            payload = _changed_fields(current, changes, LIST_FIELDS)
            if not payload:
                return current
            updated = await self.api.update_list(list_id, payload)
            self.store.upsert_list(updated)
        self.notifier.success("List updated!")
        return updated

    async def rename_list(self, list_id: str, name: str) -> Optional[TaskList]:
        return await self.update_list(list_id, name=name)

    @operation("delete list", failed=False)
    async def delete_list(self, list_id: str) -> bool:
        async with self._lock(f"list:{list_id}"):
            await self.api.delete_list(list_id)
            # The service removed the list's tasks; take its word for what is left
            tasks = await self.api.get_tasks()
            removed = [t.id for t in self.store.tasks_in_list(list_id)]
            self.store.remove_list(list_id)
            self.store.replace_tasks(tasks)
        self._forget(f"list:{list_id}")
        for task_id in removed:
            self._forget(f"task:{task_id}")
        if self.session.active_list_id == list_id:
            self.session.select_default_list()
        self.notifier.success("List deleted")
        return True

    # Tasks

    @operation("add task")
    async def add_task(self, title: str, list_id: str = None, **fields) -> Task:
        list_id = list_id or self.session.active_list_id
        if not list_id or list_id in VIRTUAL_LISTS:
            raise ValidationFailure("Tasks can only be added to a list")
        priority = fields.pop("priority", None) or PRIORITY_LOW
        if priority not in PRIORITIES:
            raise ValidationFailure(f"Unknown priority '{priority}'")

        payload = {"list_id": list_id, "title": _clean_text(title, "Task title"), "priority": priority}
        payload.update({k: v for k, v in fields.items() if v is not None})
        created = await self.api.create_task(payload)
        self.store.upsert_task(created)
        self.notifier.success("Task added")
        return created

    async def add_task_from_template(self, template: TaskTemplate, list_id: str = None) -> Optional[Task]:
        return await self.add_task(
            template.title,
            list_id=list_id,
            note=template.note,
            tags=list(template.tags),
            priority=template.priority,
            subtasks=[{"title": title, "completed": False} for title in template.subtasks],
        )

    async def _patch_task(self, task_id: str, build: Callable[[Task], Dict[str, Any]]) -> Task:
        """Send the fields `build` changes on the stored task.

        Completing a blocked task is refused without a request. XP is awarded
        only when the stored value before the request was False and the
        service confirms True.
        """
        async with self._lock(f"task:{task_id}"):
            current = self._require_task(task_id)
            changes = build(current)
            if "title" in changes:
                changes["title"] = _clean_text(changes["title"], "Task title")
            if task_id in (changes.get("blocked_by") or ()):
                raise ValidationFailure("A task cannot block itself")
            payload = _changed_fields(current, changes, TASK_FIELDS)
            if not payload:
                return current
            if payload.get("completed") and blocking.is_blocked(current, self.store.tasks):
                raise TaskBlocked()
            updated = await self.api.update_task(task_id, payload)
            self.store.upsert_task(updated)

        if not current.completed and updated.completed:
            await self.award_xp(updated.priority)
        return updated

    @operation("update task")
    async def update_task(self, task_id: str, **changes) -> Task:
        return await self._patch_task(task_id, lambda current: dict(changes))

    @operation("update task")
    async def toggle_important(self, task_id: str) -> Task:
        return await self._patch_task(task_id, lambda current: {"important": not current.important})

    @operation("set priority")
    async def set_priority(self, task_id: str, priority: str) -> Task:
        if priority not in PRIORITIES:
            raise ValidationFailure(f"Unknown priority '{priority}'")
        return await self._patch_task(task_id, lambda current: {"priority": priority})

    @operation("update note")
    async def update_note(self, task_id: str, note: str) -> Task:
        return await self._patch_task(task_id, lambda current: {"note": note or ""})

    @operation("move task")
    async def set_status(self, task_id: str, status: str) -> Task:
        # Kanban status is independent of the completed flag
        if status not in KANBAN_STATUSES:
            raise ValidationFailure(f"Unknown status '{status}'")
        return await self._patch_task(task_id, lambda current: {"status": status})

    @operation("save time")
    async def add_time_spent(self, task_id: str, seconds: int) -> Task:
        seconds = int(seconds)
        if seconds < 0:
            raise ValidationFailure("Time spent cannot be negative")
        return await self._patch_task(task_id, lambda current: {"time_spent": current.time_spent + seconds})

    @operation("update task")
    async def toggle_task(self, task_id: str) -> Task:
        """Flip `completed`."""
        return await self._patch_task(task_id, lambda current: {"completed": not current.completed})

    @operation("delete task", failed=False)
    async def delete_task(self, task_id: str) -> bool:
        async with self._lock(f"task:{task_id}"):
            await self.api.delete_task(task_id)
            self.store.remove_task(task_id)
        self._forget(f"task:{task_id}")
        self.notifier.success("Task deleted")
        return True

    # Subtasks are stored as one array on the task and rewritten whole

    async def _fetch_task(self, task_id: str) -> Task:
        known = self.store.get_task(task_id)
        fresh = await self.api.get_tasks(known.list_id if known else None)
        task = next((t for t in fresh if t.id == task_id), None)
        if task is None:
            raise NotFoundOrUnauthorized(f"Task {task_id} not found")
        return task

    async def _write_subtasks(self, task_id: str, edit: Callable[[list], list]) -> Task:
        async with self._lock(f"task:{task_id}"):
            fresh = await self._fetch_task(task_id)
            subtasks = edit([subtask.model_dump() for subtask in fresh.subtasks])
            updated = await self.api.update_task(task_id, {"subtasks": subtasks})
            self.store.upsert_task(updated)
            return updated

    @operation("add subtask")
    async def add_subtask(self, task_id: str, title: str) -> Task:
        title = _clean_text(title, "Subtask title")
        return await self._write_subtasks(
            task_id, lambda subtasks: subtasks + [{"title": title, "completed": False}]
        )

    @operation("update subtask")
    async def toggle_subtask(self, task_id: str, subtask_id: str) -> Task:
        def flip(subtasks):
            if not any(s["id"] == subtask_id for s in subtasks):
                raise NotFoundOrUnauthorized(f"Subtask {subtask_id} not found")
            return [
                {**s, "completed": not s["completed"]} if s["id"] == subtask_id else s
                for s in subtasks
            ]

        return await self._write_subtasks(task_id, flip)

    # Progression

    @operation("save progress")
    async def award_xp(self, priority: Optional[str]) -> Award:
        async with self._lock("user"):
            user = self.session.user
            if user is None:
                return None
            award = award_completion(user.xp, user.level, priority)
            self.session.user = await self.api.update_me({"xp": award.xp, "level": award.level})
        self.notifier.success(award.message)
        return award

    @operation("save progress")
    async def update_progress(self, xp: int = None, level: int = None, badges=None) -> User:
        changes = {"xp": xp, "level": level, "badges": list(badges) if badges is not None else None}
        payload = {k: v for k, v in changes.items() if v is not None}
        if not payload:
            return self.session.user
        async with self._lock("user"):
            self.session.user = await self.api.update_me(payload)
        return self.session.user

    def select_list(self, list_id: str) -> str:
        """Switch the active list to a concrete id or a virtual view."""
        if list_id not in VIRTUAL_LISTS:
            self._require_list(list_id)
        self.session.active_list_id = list_id
        return self.session.active_list_id
