"""Whether a task can be completed given the tasks it is blocked by.

Only direct references are inspected, so a cycle in blocked_by cannot cause
unbounded recursion. Transitive blocking is not evaluated.
"""
from typing import Iterable, List

from .models import Task


def open_blockers(task: Task, all_tasks: Iterable[Task]) -> List[Task]:
    """Existing, incomplete tasks referenced by task.blocked_by, in reference order."""
    if not task.blocked_by:
        return []
    by_id = {t.id: t for t in all_tasks}
    blockers = []
    for blocker_id in task.blocked_by:
        # Ids that no longer resolve do not block
        blocker = by_id.get(blocker_id)
        if blocker is not None and blocker.id != task.id and not blocker.completed:
            blockers.append(blocker)
    return blockers


def is_blocked(task: Task, all_tasks: Iterable[Task]) -> bool:
    return bool(open_blockers(task, all_tasks))
