"""
Client-only preferences kept in a local JSON file: the UI theme and saved
task templates. Nothing here is sent to the service except through
MutationCoordinator.add_task_from_template.
"""
from pathlib import Path
from typing import List, Optional
import logging

from pydantic import BaseModel, Field

from ..config import PREFERENCES_PATH
from .errors import ValidationFailure
from .models import PRIORITY_LOW, Task

logger = logging.getLogger(__name__)

THEMES = ("light", "dark")


class TaskTemplate(BaseModel):
    """Snapshot of a task's content, reusable to create new tasks."""
    name: str
    title: str
    note: str = ""
    tags: List[str] = Field(default_factory=list)
    priority: str = PRIORITY_LOW
    subtasks: List[str] = Field(default_factory=list)

    @classmethod
    def from_task(cls, task: Task, name: Optional[str] = None) -> "TaskTemplate":
        return cls(
            name=name or task.title,
            title=task.title,
            note=task.note,
            tags=list(task.tags),
            priority=task.priority or PRIORITY_LOW,
            subtasks=[subtask.title for subtask in task.subtasks],
        )


class Preferences(BaseModel):
    theme: str = "light"
    templates: List[TaskTemplate] = Field(default_factory=list)


class PreferencesStore:
    def __init__(self, path: Path = PREFERENCES_PATH):
        self.path = Path(path)
        self.preferences = self._load()

    def _load(self) -> Preferences:
        if not self.path.exists():
            return Preferences()
        try:
            return Preferences.model_validate_json(self.path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable preferences file %s", self.path)
            return Preferences()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.preferences.model_dump_json(indent=2), encoding="utf-8")

    # Theme

    @property
    def theme(self) -> str:
        return self.preferences.theme

    def set_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValidationFailure(f"Unknown theme '{theme}'. Must be one of: {', '.join(THEMES)}")
        self.preferences.theme = theme
        self.save()
        return theme

    def toggle_theme(self) -> str:
        return self.set_theme("dark" if self.theme == "light" else "light")

    # Templates

    @property
    def templates(self) -> List[TaskTemplate]:
        return list(self.preferences.templates)

    def get_template(self, name: str) -> Optional[TaskTemplate]:
        return next((t for t in self.preferences.templates if t.name == name), None)

    def save_template(self, template: TaskTemplate) -> TaskTemplate:
        """Add a template, replacing any existing one with the same name."""
        if not template.title.strip():
            raise ValidationFailure("Template title cannot be empty")
        others = [t for t in self.preferences.templates if t.name != template.name]
        self.preferences.templates = others + [template]
        self.save()
        return template

    def template_from_task(self, task: Task, name: Optional[str] = None) -> TaskTemplate:
        return self.save_template(TaskTemplate.from_task(task, name=name))

    def remove_template(self, name: str) -> bool:
        remaining = [t for t in self.preferences.templates if t.name != name]
        if len(remaining) == len(self.preferences.templates):
            return False
        self.preferences.templates = remaining
        self.save()
        return True
