from .task import Priority, Recurrence, Task, TaskStatus
from .task_list import ListView, TaskList
from .user import User

# Export all models for easy importing
__all__ = ["Task", "TaskList", "User", "Priority", "Recurrence", "TaskStatus", "ListView"]
