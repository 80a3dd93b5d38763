"""
TickTick Open API Client.

This module provides the TickTick class, the entry point for all Open API
operations. It owns one ``httpx.AsyncClient`` configured with the bearer
token; models and builders receive the client explicitly when they need to
reach the API.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from ticktick_open.builders import ProjectBuilder, TaskBuilder
from ticktick_open.constants import (
    BASE_URL,
    DEFAULT_TIMEOUT,
    PROJECT_CREATE_PATH,
    PROJECT_DATA_PATH,
    PROJECT_LIST_PATH,
    PROJECT_PATH,
    TASK_COMPLETE_PATH,
    TASK_CREATE_PATH,
    TASK_PATH,
    TASK_UPDATE_PATH,
)
from ticktick_open.exceptions import (
    TickTickConfigurationError,
    TickTickConnectionError,
    TickTickResponseParseError,
    error_for_response,
)
from ticktick_open.models import (
    AccessToken,
    Project,
    ProjectCreate,
    ProjectData,
    Task,
    TaskCreate,
)
from ticktick_open.settings import TickTickSettings, get_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")
C = TypeVar("C", bound="TickTick")

_TASK = TypeAdapter(Task)
_PROJECT = TypeAdapter(Project)
_PROJECT_LIST = TypeAdapter(list[Project])
_PROJECT_DATA = TypeAdapter(ProjectData)


def _validate_token(value: str) -> str:
    if not value:
        raise TickTickConfigurationError("Access token is empty")
    if not value.isascii() or not value.isprintable() or any(c.isspace() for c in value):
        raise TickTickConfigurationError("Access token contains characters not allowed in an HTTP header")
    return value


def _path(template: str, **ids: str) -> str:
    """Fill an endpoint template with identifiers, each as one escaped path segment."""
    for name, value in ids.items():
        if not value or value in (".", ".."):
            raise TickTickConfigurationError(
                f"Invalid {name} {value!r}: the resource has no server identifier"
            )
    return template.format(**{name: quote(str(value), safe="") for name, value in ids.items()})


class TickTick:
    """
    Client for the TickTick Open API.

    Usage:
        async with TickTick(access_token) as client:
            projects = await client.get_all_projects()
            task = await client.task_builder("Buy milk").priority(TaskPriority.HIGH).build_and_publish()
            await task.complete(client)
    """

    def __init__(
        self,
        access_token: AccessToken | str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        token = access_token.value if isinstance(access_token, AccessToken) else access_token
        token = _validate_token(token)

        try:
            self._http = httpx.AsyncClient(
                base_url=BASE_URL,
                headers={"Authorization": f"Bearer {token}"},
                timeout=timeout,
                transport=transport,
            )
        except (ValueError, TypeError) as e:
            raise TickTickConfigurationError(f"Failed to build HTTP client: {e}") from e

        logger.debug("TickTick client created (timeout=%ss)", timeout)

    @classmethod
    def from_settings(cls: type[C], settings: TickTickSettings | None = None, **kwargs: Any) -> C:
        """Create a client from ``TICKTICK_*`` settings."""
        settings = settings or get_settings()
        if settings.access_token is None:
            raise TickTickConfigurationError(
                "No access token configured. Set TICKTICK_ACCESS_TOKEN or run ticktick-open-auth."
            )
        kwargs.setdefault("timeout", settings.timeout)
        return cls(settings.access_token.get_secret_value(), **kwargs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_url={str(self._http.base_url)!r})"

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    @property
    def is_closed(self) -> bool:
        return self._http.is_closed

    async def __aenter__(self: C) -> C:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # Request Helpers
    # =========================================================================

    async def _request(self, method: str, path: str, *, json: Any = None) -> httpx.Response:
        """Send one request and raise for transport errors and non-2xx statuses."""
        logger.debug("%s %s", method, path)
        try:
            response = await self._http.request(method, path, json=json)
        except httpx.HTTPError as e:
            raise TickTickConnectionError(
                f"{method} {path} failed: {e}",
                method=method,
                url=f"{BASE_URL}{path}",
            ) from e

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if not response.is_success:
            raise error_for_response(response)
        return response

    @staticmethod
    def _parse(adapter: TypeAdapter[T], response: httpx.Response) -> T:
        try:
            return adapter.validate_json(response.content)
        except ValidationError as e:
            raise TickTickResponseParseError(
                f"Unexpected response from {response.request.url.path}: {e}",
                body=response.text,
            ) from e

    async def _get(self, adapter: TypeAdapter[T], path: str) -> T:
        return self._parse(adapter, await self._request("GET", path))

    async def _post(self, adapter: TypeAdapter[T], path: str, body: dict[str, Any]) -> T:
        return self._parse(adapter, await self._request("POST", path, json=body))

    # =========================================================================
    # Task Operations
    # =========================================================================

    def task_builder(self, title: str) -> TaskBuilder:
        """Start building a task bound to this client."""
        return TaskBuilder(self, title)

    async def get_task(self, project_id: str, task_id: str) -> Task:
        """
        Get a task by project and task ID.

        Args:
            project_id: Project the task belongs to
            task_id: Task identifier

        Returns:
            Task object
        """
        path = _path(TASK_PATH, project_id=project_id, task_id=task_id)
        return await self._get(_TASK, path)

    async def create_task(self, payload: TaskCreate) -> Task:
        """Create a task from a creation body. Prefer ``task_builder``."""
        task = await self._post(_TASK, TASK_CREATE_PATH, payload.to_payload())
        logger.info("Created task %s in project %s", task.id, task.project_id)
        return task

    async def update_task(self, task: Task) -> None:
        """Send the full state of a task to the update endpoint."""
        await self._request("POST", _path(TASK_UPDATE_PATH, task_id=task.id), json=task.to_payload())

    async def complete_task(self, project_id: str, task_id: str) -> None:
        await self._request("POST", _path(TASK_COMPLETE_PATH, project_id=project_id, task_id=task_id))

    async def delete_task(self, project_id: str, task_id: str) -> None:
        await self._request("DELETE", _path(TASK_PATH, project_id=project_id, task_id=task_id))
        logger.info("Deleted task %s", task_id)

    async def get_all_tasks_in_projects(self) -> list[Task]:
        """
        Get the tasks of every project.

        Projects are fetched first, then each project's data one at a time.
        Tasks keep project-list order. Any failure aborts the whole call.

        Returns:
            List of tasks across all projects
        """
        tasks: list[Task] = []
        for project in await self.get_all_projects():
            data = await self.get_project_data(project.id)
            tasks.extend(data.tasks)
        return tasks

    # =========================================================================
    # Project Operations
    # =========================================================================

    def project_builder(self, name: str) -> ProjectBuilder:
        """Start building a project bound to this client."""
        return ProjectBuilder(self, name)

    async def get_project(self, project_id: str) -> Project:
        return await self._get(_PROJECT, _path(PROJECT_PATH, project_id=project_id))

    async def get_all_projects(self) -> list[Project]:
        """
        List the user's projects.

        Returns:
            List of projects
        """
        return await self._get(_PROJECT_LIST, PROJECT_LIST_PATH)

    async def get_project_data(self, project_id: str) -> ProjectData:
        """
        Get a project with its tasks and kanban columns.

        Args:
            project_id: Project identifier

        Returns:
            ProjectData with tasks and columns
        """
        return await self._get(_PROJECT_DATA, _path(PROJECT_DATA_PATH, project_id=project_id))

    async def create_project(self, payload: ProjectCreate) -> Project:
        """Create a project from a creation body. Prefer ``project_builder``."""
        project = await self._post(_PROJECT, PROJECT_CREATE_PATH, payload.to_payload())
        logger.info("Created project %s", project.id)
        return project

    async def update_project(self, project: Project) -> None:
        """Send the full state of a project to the update endpoint."""
        await self._request(
            "POST",
            _path(PROJECT_PATH, project_id=project.id),
            json=project.to_payload(),
        )

    async def delete_project(self, project_id: str) -> None:
        await self._request("DELETE", _path(PROJECT_PATH, project_id=project_id))
        logger.info("Deleted project %s", project_id)
