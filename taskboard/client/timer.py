"""Focus (pomodoro-style) timer that adds elapsed seconds to a task's time_spent."""
from typing import Callable, Optional
import time

from .models import Task


class FocusTimer:
    """One running timer at a time.

    Elapsed time is counted in whole seconds of wall-clock time and only
    written to the task when the timer stops. Starting a timer while another
    runs stops (and persists) the running one first.
    """

    def __init__(self, coordinator, clock: Callable[[], float] = time.monotonic):
        self.coordinator = coordinator
        self.clock = clock
        self.task_id: Optional[str] = None
        self._started_at: Optional[float] = None

    @property
    def active(self) -> bool:
        return self.task_id is not None

    @property
    def elapsed(self) -> int:
        if not self.active:
            return 0
        return max(0, int(self.clock() - self._started_at))

    def display(self) -> str:
        minutes, seconds = divmod(self.elapsed, 60)
        return f"{minutes:02d}:{seconds:02d}"

    async def start(self, task_id: str) -> None:
        if self.active:
            await self.stop()
        self.task_id = task_id
        self._started_at = self.clock()

    async def stop(self) -> Optional[Task]:
        """Stop the timer and add the elapsed seconds to the task."""
        if not self.active:
            return None
        task_id, seconds = self.task_id, self.elapsed
        self.task_id = None
        self._started_at = None
        return await self.coordinator.add_time_spent(task_id, seconds)
