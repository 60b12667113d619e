"""
HTTP client for the persistence service.

Thin wrapper over httpx.AsyncClient. Every method returns parsed client
entities or raises one of the errors in taskboard.client.errors; HTTP status
codes never leak past this module.
"""
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar
import logging

import httpx
from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from ..config import API_URL
from .errors import (
    AuthenticationFailure,
    NotFoundOrUnauthorized,
    TransientFailure,
    ValidationFailure,
)
from .models import Task, TaskList, User

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

Model = TypeVar("Model", bound=BaseModel)


def _detail(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    detail = data.get("detail") if isinstance(data, dict) else data
    if isinstance(detail, list):
        # pydantic validation errors
        return "; ".join(str(item.get("msg", item)) for item in detail)
    return str(detail or "")


def _parse(model: Type[Model], data: Any) -> Model:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise TransientFailure(f"Malformed {model.__name__} in response") from exc


def _parse_many(model: Type[Model], data: Any) -> List[Model]:
    if not isinstance(data, list):
        raise TransientFailure(f"Expected a list of {model.__name__} in response")
    return [_parse(model, item) for item in data]


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    code = response.status_code
    detail = _detail(response)
    if code in (401, 403):
        raise AuthenticationFailure(detail)
    if code == 404:
        raise NotFoundOrUnauthorized(detail)
    if code in (400, 422):
        raise ValidationFailure(detail)
    raise TransientFailure(f"Server error {code}: {detail}")


class TaskboardApi:
    def __init__(
        self,
        base_url: str = API_URL,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        body = to_jsonable_python(json) if json is not None else None
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(method, path, json=body, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransientFailure(str(exc) or type(exc).__name__) from exc
        _raise_for_status(response)
        try:
            return response.json()
        except ValueError as exc:
            raise TransientFailure("Unreadable response from server") from exc

    # Auth

    async def login_google(self, credential: str) -> Tuple[str, User]:
        data = await self._request("POST", "/auth/google", json={"credential": credential})
        if not isinstance(data, dict) or not data.get("access_token"):
            raise TransientFailure("Malformed login response")
        return data["access_token"], _parse(User, data.get("user"))

    async def get_me(self) -> User:
        return _parse(User, await self._request("GET", "/auth/me"))

    async def update_me(self, changes: Dict[str, Any]) -> User:
        return _parse(User, await self._request("PATCH", "/auth/me", json=changes))

    # Lists

    async def get_lists(self) -> List[TaskList]:
        return _parse_many(TaskList, await self._request("GET", "/lists"))

    async def create_list(self, payload: Dict[str, Any]) -> TaskList:
        return _parse(TaskList, await self._request("POST", "/lists", json=payload))

    async def update_list(self, list_id: str, changes: Dict[str, Any]) -> TaskList:
        return _parse(TaskList, await self._request("PATCH", f"/lists/{list_id}", json=changes))

    async def delete_list(self, list_id: str) -> None:
        await self._request("DELETE", f"/lists/{list_id}")

    # Tasks

    async def get_tasks(self, list_id: Optional[str] = None) -> List[Task]:
        path = f"/tasks/{list_id}" if list_id else "/tasks"
        return _parse_many(Task, await self._request("GET", path))

    async def create_task(self, payload: Dict[str, Any]) -> Task:
        return _parse(Task, await self._request("POST", "/tasks", json=payload))

    async def update_task(self, task_id: str, changes: Dict[str, Any]) -> Task:
        return _parse(Task, await self._request("PATCH", f"/tasks/{task_id}", json=changes))

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")
