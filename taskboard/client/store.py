"""
In-memory lists and tasks of the signed-in user.

Each write swaps in a new StoreSnapshot; readers holding an older snapshot
never see a half-applied change. The store does no validation and no I/O.
Only the mutation coordinator writes to it.
"""
from typing import Iterable, NamedTuple, Optional, Tuple

from .models import Task, TaskList


class StoreSnapshot(NamedTuple):
    lists: Tuple[TaskList, ...] = ()
    tasks: Tuple[Task, ...] = ()


def _upsert(items, item):
    replaced = False
    result = []
    for existing in items:
        if existing.id == item.id:
            result.append(item)
            replaced = True
        else:
            result.append(existing)
    if not replaced:
        result.append(item)
    return tuple(result)


class EntityStore:
    def __init__(self, snapshot: Optional[StoreSnapshot] = None):
        self._snapshot = snapshot or StoreSnapshot()

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def lists(self) -> Tuple[TaskList, ...]:
        return self._snapshot.lists

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._snapshot.tasks

    def get_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self._snapshot.tasks if t.id == task_id), None)

    def get_list(self, list_id: str) -> Optional[TaskList]:
        return next((l for l in self._snapshot.lists if l.id == list_id), None)

    def tasks_in_list(self, list_id: str) -> Tuple[Task, ...]:
        return tuple(t for t in self._snapshot.tasks if t.list_id == list_id)

    def replace_lists(self, lists: Iterable[TaskList]) -> StoreSnapshot:
        self._snapshot = self._snapshot._replace(lists=tuple(lists))
        return self._snapshot

    def replace_tasks(self, tasks: Iterable[Task]) -> StoreSnapshot:
        self._snapshot = self._snapshot._replace(tasks=tuple(tasks))
        return self._snapshot

    def upsert_task(self, task: Task) -> StoreSnapshot:
        self._snapshot = self._snapshot._replace(tasks=_upsert(self._snapshot.tasks, task))
        return self._snapshot

    def remove_task(self, task_id: str) -> StoreSnapshot:
        tasks = tuple(t for t in self._snapshot.tasks if t.id != task_id)
        self._snapshot = self._snapshot._replace(tasks=tasks)
        return self._snapshot

    def upsert_list(self, task_list: TaskList) -> StoreSnapshot:
        self._snapshot = self._snapshot._replace(lists=_upsert(self._snapshot.lists, task_list))
        return self._snapshot

    def remove_list(self, list_id: str) -> StoreSnapshot:
        lists = tuple(l for l in self._snapshot.lists if l.id != list_id)
        self._snapshot = self._snapshot._replace(lists=lists)
        return self._snapshot

    def clear(self) -> StoreSnapshot:
        self._snapshot = StoreSnapshot()
        return self._snapshot
