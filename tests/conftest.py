"""
Pytest Configuration and Fixtures for the TickTick Open API Client Tests.

This module provides the fake Open API server, data factories and shared
fixtures used by the test suite.

Architecture:
    - FakeTickTickServer: In-memory Open API behind ``httpx.MockTransport``
    - Factories: Generate wire-format test data (tasks, projects, columns)
    - Fixtures: Provide configured clients and fake servers
    - Markers: Custom pytest markers for test categorization
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator, Callable

import httpx
import pytest

from ticktick_open.client import TickTick
from ticktick_open.models import format_datetime
from ticktick_open.settings import reset_settings


# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "tasks: Task-related tests")
    config.addinivalue_line("markers", "projects: Project-related tests")
    config.addinivalue_line("markers", "builders: Builder tests")
    config.addinivalue_line("markers", "models: Model (de)serialization tests")
    config.addinivalue_line("markers", "auth: Authorization flow tests")
    config.addinivalue_line("markers", "errors: Error handling tests")
    config.addinivalue_line("markers", "settings: Settings and CLI tests")


# =============================================================================
# Time Utilities
# =============================================================================


def utc_now() -> datetime:
    """Get current UTC time truncated to seconds (wire precision)."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def days_from_now(n: int) -> datetime:
    """Get datetime n days from now."""
    return utc_now() + timedelta(days=n)


# =============================================================================
# ID Generators
# =============================================================================


class IDGenerator:
    """Sequential 24-character hex IDs, like the ones TickTick issues."""

    _counter: int = 0

    @classmethod
    def reset(cls) -> None:
        """Reset counter (call in fixtures)."""
        cls._counter = 0

    @classmethod
    def next_id(cls) -> str:
        """Generate next unique ID."""
        cls._counter += 1
        return f"{cls._counter:024x}"


# =============================================================================
# Wire Data Factories
# =============================================================================


class TaskFactory:
    """Factory for task JSON as returned by the Open API."""

    @staticmethod
    def create(
        id: str | None = None,
        project_id: str | None = None,
        title: str = "Test Task",
        priority: int = 0,
        status: int = 0,
        due_date: datetime | None = None,
        items: list[dict[str, Any]] | None = None,
        tags: list[str] | None = None,
        **extra: Any,
    ) -> dict[str, Any]:
        """Create task JSON with sensible defaults."""
        data: dict[str, Any] = {
            "id": id or IDGenerator.next_id(),
            "projectId": project_id or IDGenerator.next_id(),
            "title": title,
            "isAllDay": False,
            "priority": priority,
            "status": status,
            "sortOrder": 0,
            "timeZone": "America/Los_Angeles",
            "items": items or [],
            "reminders": [],
            "tags": tags or [],
        }
        if due_date is not None:
            data["dueDate"] = format_datetime(due_date)
        data.update(extra)
        return data

    @staticmethod
    def create_subtask(title: str = "Subtask", status: int = 0, sort_order: int = 0) -> dict[str, Any]:
        """Create checklist item JSON."""
        return {
            "id": IDGenerator.next_id(),
            "title": title,
            "status": status,
            "isAllDay": False,
            "sortOrder": sort_order,
            "startDate": "2019-11-13T03:00:00+0000",
            "timeZone": "America/Los_Angeles",
        }

    @staticmethod
    def create_batch(count: int, **kwargs: Any) -> list[dict[str, Any]]:
        """Create multiple tasks."""
        return [TaskFactory.create(title=f"Task {i+1}", **kwargs) for i in range(count)]


class ProjectFactory:
    """Factory for project JSON as returned by the Open API."""

    @staticmethod
    def create(
        id: str | None = None,
        name: str = "Test Project",
        color: str | None = "#F18181",
        view_mode: str = "list",
        kind: str = "TASK",
        **extra: Any,
    ) -> dict[str, Any]:
        """Create project JSON with sensible defaults."""
        data: dict[str, Any] = {
            "id": id or IDGenerator.next_id(),
            "name": name,
            "color": color,
            "sortOrder": 0,
            "closed": False,
            "groupId": "",
            "viewMode": view_mode,
            "permission": "write",
            "kind": kind,
        }
        data.update(extra)
        return data


class ColumnFactory:
    """Factory for kanban column JSON."""

    @staticmethod
    def create_kanban_set(project_id: str) -> list[dict[str, Any]]:
        """Create a standard kanban column set."""
        return [
            {"id": IDGenerator.next_id(), "projectId": project_id, "name": name, "sortOrder": i}
            for i, name in enumerate(["To Do", "In Progress", "Done"])
        ]


# =============================================================================
# Fake Open API Server
# =============================================================================


Route = Callable[..., httpx.Response]


class FakeTickTickServer:
    """
    In-memory TickTick Open API.

    Stores resources as wire JSON, records every request and lets tests force
    specific responses per (method, path).
    """

    def __init__(self) -> None:
        self.projects: dict[str, dict[str, Any]] = {}
        self.tasks: dict[str, dict[str, Any]] = {}
        self.columns: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self._overrides: dict[tuple[str, str], httpx.Response | Exception] = {}
        self._routes: list[tuple[str, re.Pattern[str], Route]] = [
            ("POST", re.compile(r"/open/v1/task"), self._create_task),
            ("POST", re.compile(r"/open/v1/task/(?P<task_id>[^/]+)"), self._update_task),
            ("GET", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)/task/(?P<task_id>[^/]+)"), self._get_task),
            ("DELETE", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)/task/(?P<task_id>[^/]+)"), self._delete_task),
            ("POST", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)/task/(?P<task_id>[^/]+)/complete"), self._complete_task),
            ("GET", re.compile(r"/open/v1/project/"), self._list_projects),
            ("POST", re.compile(r"/open/v1/project"), self._create_project),
            ("GET", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)/data"), self._project_data),
            ("GET", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)"), self._get_project),
            ("POST", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)"), self._update_project),
            ("DELETE", re.compile(r"/open/v1/project/(?P<project_id>[^/]+)"), self._delete_project),
        ]

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        override = self._overrides.get((request.method, request.url.path))
        if isinstance(override, Exception):
            raise override
        if override is not None:
            return override

        for method, pattern, route in self._routes:
            match = pattern.fullmatch(request.url.path)
            if method == request.method and match:
                return route(request, **match.groupdict())
        return httpx.Response(404, json={"errorMessage": "no route"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def respond(self, method: str, path: str, response: httpx.Response | Exception) -> None:
        """Force the response (or raised exception) for one endpoint."""
        self._overrides[(method, path)] = response

    # -------------------------------------------------------------------------
    # Seeding & Assertions
    # -------------------------------------------------------------------------

    def seed_project(self, project: dict[str, Any], tasks: list[dict[str, Any]] | None = None) -> None:
        self.projects[project["id"]] = project
        for task in tasks or []:
            task["projectId"] = project["id"]
            self.tasks[task["id"]] = task

    def calls(self, method: str, path: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and (path is None or r.url.path == path)
        ]

    def assert_called(self, method: str, path: str, times: int | None = None) -> None:
        calls = self.calls(method, path)
        assert calls, f"Expected {method} {path} to be called"
        if times is not None:
            assert len(calls) == times, f"Expected {times} calls to {method} {path}, got {len(calls)}"

    def assert_not_called(self, method: str, path: str | None = None) -> None:
        assert not self.calls(method, path), f"Expected no {method} {path or ''} calls"

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    @staticmethod
    def _not_found(kind: str, id: str) -> httpx.Response:
        return httpx.Response(404, json={"errorMessage": f"{kind} {id} not found"})

    def _create_task(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        task = TaskFactory.create(project_id=body.pop("projectId", None))
        task.update(body)
        self.tasks[task["id"]] = task
        return httpx.Response(200, json=task)

    def _update_task(self, request: httpx.Request, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return self._not_found("task", task_id)
        self.tasks[task_id].update(json.loads(request.content))
        return httpx.Response(200, json=self.tasks[task_id])

    def _get_task(self, request: httpx.Request, project_id: str, task_id: str) -> httpx.Response:
        task = self.tasks.get(task_id)
        if task is None or task["projectId"] != project_id:
            return self._not_found("task", task_id)
        return httpx.Response(200, json=task)

    def _delete_task(self, request: httpx.Request, project_id: str, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return self._not_found("task", task_id)
        del self.tasks[task_id]
        return httpx.Response(200)

    def _complete_task(self, request: httpx.Request, project_id: str, task_id: str) -> httpx.Response:
        if task_id not in self.tasks:
            return self._not_found("task", task_id)
        self.tasks[task_id]["status"] = 2
        return httpx.Response(200)

    def _list_projects(self, request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=list(self.projects.values()))

    def _create_project(self, request: httpx.Request) -> httpx.Response:
        project = ProjectFactory.create()
        project.update(json.loads(request.content))
        self.projects[project["id"]] = project
        return httpx.Response(200, json=project)

    def _project_data(self, request: httpx.Request, project_id: str) -> httpx.Response:
        if project_id not in self.projects:
            return self._not_found("project", project_id)
        return httpx.Response(200, json={
            "project": self.projects[project_id],
            "tasks": [t for t in self.tasks.values() if t["projectId"] == project_id],
            "columns": self.columns.get(project_id, []),
        })

    def _get_project(self, request: httpx.Request, project_id: str) -> httpx.Response:
        if project_id not in self.projects:
            return self._not_found("project", project_id)
        return httpx.Response(200, json=self.projects[project_id])

    def _update_project(self, request: httpx.Request, project_id: str) -> httpx.Response:
        if project_id not in self.projects:
            return self._not_found("project", project_id)
        self.projects[project_id].update(json.loads(request.content))
        return httpx.Response(200, json=self.projects[project_id])

    def _delete_project(self, request: httpx.Request, project_id: str) -> httpx.Response:
        if self.projects.pop(project_id, None) is None:
            return self._not_found("project", project_id)
        return httpx.Response(200)


# =============================================================================
# Fixtures
# =============================================================================


ACCESS_TOKEN = "3c6e0b8a-9c0e-4a6e-8f5c-1d2b3c4d5e6f"


@pytest.fixture(autouse=True)
def _reset_state():
    """Reset ID counter and cached settings around every test."""
    IDGenerator.reset()
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def access_token() -> str:
    return ACCESS_TOKEN


@pytest.fixture
def server() -> FakeTickTickServer:
    """Empty fake Open API server."""
    return FakeTickTickServer()


@pytest.fixture
async def client(server: FakeTickTickServer) -> AsyncIterator[TickTick]:
    """TickTick client wired to the fake server."""
    async with TickTick(ACCESS_TOKEN, transport=server.transport()) as ticktick:
        yield ticktick


@pytest.fixture
def task_factory() -> type[TaskFactory]:
    return TaskFactory


@pytest.fixture
def project_factory() -> type[ProjectFactory]:
    return ProjectFactory


@pytest.fixture
def seeded_server(server: FakeTickTickServer) -> FakeTickTickServer:
    """Two projects: the first with three tasks, the second empty."""
    first = ProjectFactory.create(name="Work")
    second = ProjectFactory.create(name="Someday")
    server.seed_project(first, TaskFactory.create_batch(3))
    server.seed_project(second)
    server.columns[first["id"]] = ColumnFactory.create_kanban_set(first["id"])
    return server
