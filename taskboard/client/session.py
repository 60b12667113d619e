"""Per-login state container.

Holds the credential, the signed-in user, the entity store and the active
list. One Session exists per authenticated user and is handed to whatever
needs it; there is no module-level state.
"""
from typing import Optional

from .api import TaskboardApi
from .models import DEFAULT_LIST_NAME, VIEW_IMPORTANT, User
from .store import EntityStore


class Session:
    def __init__(self, api: Optional[TaskboardApi] = None, store: Optional[EntityStore] = None):
        self.api = api or TaskboardApi()
        self.store = store or EntityStore()
        self.user: Optional[User] = None
        self.active_list_id: str = VIEW_IMPORTANT

    @property
    def token(self) -> Optional[str]:
        return self.api.token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api.token)

    def sign_in(self, token: str, user: User) -> None:
        self.api.token = token
        self.user = user

    def logout(self) -> None:
        """Drop the credential and every cached entity (back to the login state)."""
        self.api.token = None
        self.user = None
        self.store.clear()
        self.active_list_id = VIEW_IMPORTANT

    def select_default_list(self) -> str:
        """Activate "My Tasks", else the first list, else the important view."""
        lists = self.store.lists
        default = next((l for l in lists if l.name == DEFAULT_LIST_NAME), None)
        if default is None and lists:
            default = lists[0]
        self.active_list_id = default.id if default else VIEW_IMPORTANT
        return self.active_list_id
