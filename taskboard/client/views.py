"""
Derived task views: virtual lists, search, sorting and Kanban columns.

Everything here is a pure function of its arguments. Nothing mutates the
store and nothing performs I/O, so the same inputs always give the same
ordered output.
"""
from datetime import date, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from .models import (
    KANBAN_STATUSES,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    STATUS_TODO,
    VIEW_IMPORTANT,
    VIEW_PLANNED,
    VIEW_TODAY,
    Task,
)

SORT_DATE_DESC = "date_desc"
SORT_PRIORITY = "priority"
SORT_ALPHABETICAL = "alphabetical"

_PRIORITY_RANK = {PRIORITY_HIGH: 3, PRIORITY_MEDIUM: 2, PRIORITY_LOW: 1}


def filter_scope(tasks: Iterable[Task], active_list_id: str, today: Optional[date] = None) -> List[Task]:
    """Select the tasks belonging to a virtual or concrete list."""
    if active_list_id == VIEW_IMPORTANT:
        return [t for t in tasks if t.important]
    if active_list_id == VIEW_PLANNED:
        return [t for t in tasks if t.due_date is not None]
    if active_list_id == VIEW_TODAY:
        today = today or date.today()
        return [t for t in tasks if t.due_date is not None and t.due_date == today]
    # Tasks without a list are visible in every concrete list
    return [t for t in tasks if t.list_id == active_list_id or not t.list_id]


def filter_search(tasks: Iterable[Task], query: str) -> List[Task]:
    """Case-insensitive substring match on title or note."""
    needle = (query or "").lower()
    if not needle:
        return list(tasks)
    return [t for t in tasks if needle in t.title.lower() or needle in (t.note or "").lower()]


def sort_tasks(tasks: Iterable[Task], sort_key: str = SORT_DATE_DESC) -> List[Task]:
    """Sort tasks. Python's sort is stable, so ties keep their input order."""
    if sort_key == SORT_PRIORITY:
        return sorted(tasks, key=lambda t: _PRIORITY_RANK.get(t.priority, 0), reverse=True)
    if sort_key == SORT_ALPHABETICAL:
        return sorted(tasks, key=lambda t: t.title)
    return sorted(tasks, key=_created_key, reverse=True)


def _created_key(task: Task):
    # Undated tasks sort last; naive timestamps are read as UTC
    created = task.created_at
    if created is None:
        return (False, 0.0)
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return (True, created.timestamp())


def resolve_view(
    tasks: Sequence[Task],
    active_list_id: str,
    query: str = "",
    sort_key: str = SORT_DATE_DESC,
    today: Optional[date] = None,
) -> List[Task]:
    """Ordered tasks to render for the active list, search query and sort key."""
    scoped = filter_scope(tasks, active_list_id, today=today)
    return sort_tasks(filter_search(scoped, query), sort_key)


def group_kanban(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    """Partition tasks into the todo, in_progress and done columns.

    A missing or unrecognised status lands in todo, so every task appears in
    exactly one column.
    """
    columns: Dict[str, List[Task]] = {status: [] for status in KANBAN_STATUSES}
    for task in tasks:
        status = task.status if task.status in columns else STATUS_TODO
        columns[status].append(task)
    return columns
