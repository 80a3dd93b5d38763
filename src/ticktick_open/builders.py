"""
Builders for creating tasks and projects.

A builder starts with the one required field, accumulates optional fields
through chained setters and publishes a single creation request:

    task = await (
        TaskBuilder(client, "Write report")
        .project_id(project.id)
        .due_date(datetime(2025, 1, 20, 17, tzinfo=timezone.utc))
        .priority(TaskPriority.HIGH)
        .build_and_publish()
    )

Only fields that were set end up in the request body.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable

from ticktick_open.constants import ProjectKind, TaskPriority, TaskStatus, ViewMode
from ticktick_open.models import (
    Project,
    ProjectCreate,
    ProjectID,
    Subtask,
    Task,
    TaskCreate,
)

if TYPE_CHECKING:
    from ticktick_open.client import TickTick


class TaskBuilder:
    """Accumulates fields for a new task."""

    def __init__(self, client: TickTick, title: str) -> None:
        self._client = client
        self._body = TaskCreate(title=title)

    def __repr__(self) -> str:
        return f"TaskBuilder({self.to_payload()!r})"

    def _set(self, field: str, value: Any) -> TaskBuilder:
        setattr(self._body, field, value)
        return self

    def title(self, value: str) -> TaskBuilder:
        return self._set("title", value)

    def project_id(self, value: str) -> TaskBuilder:
        return self._set("project_id", ProjectID(value))

    def is_all_day(self, value: bool) -> TaskBuilder:
        return self._set("is_all_day", value)

    def completed_time(self, value: datetime) -> TaskBuilder:
        return self._set("completed_time", value)

    def content(self, value: str) -> TaskBuilder:
        return self._set("content", value)

    def desc(self, value: str) -> TaskBuilder:
        return self._set("desc", value)

    def due_date(self, value: datetime) -> TaskBuilder:
        return self._set("due_date", value)

    def subtasks(self, value: Iterable[Subtask]) -> TaskBuilder:
        return self._set("subtasks", list(value))

    def priority(self, value: TaskPriority) -> TaskBuilder:
        return self._set("priority", value)

    def reminders(self, value: Iterable[str]) -> TaskBuilder:
        return self._set("reminders", list(value))

    def repeat_flag(self, value: str) -> TaskBuilder:
        return self._set("repeat_flag", value)

    def sort_order(self, value: int) -> TaskBuilder:
        return self._set("sort_order", value)

    def start_date(self, value: datetime) -> TaskBuilder:
        return self._set("start_date", value)

    def status(self, value: TaskStatus) -> TaskBuilder:
        return self._set("status", value)

    def time_zone(self, value: str) -> TaskBuilder:
        return self._set("time_zone", value)

    def tags(self, value: Iterable[str]) -> TaskBuilder:
        return self._set("tags", list(value))

    def build(self) -> TaskCreate:
        """Return a copy of the accumulated creation body."""
        return self._body.model_copy(deep=True)

    def to_payload(self) -> dict[str, Any]:
        return self._body.to_payload()

    async def build_and_publish(self) -> Task:
        """
        Create the task on the server.

        Returns:
            The created task, including its server-assigned ID

        Raises:
            TickTickAPIError: If the request fails or returns non-2xx
            TickTickResponseParseError: If the response is not a task
        """
        return await self._client.create_task(self._body)


class ProjectBuilder:
    """Accumulates fields for a new project."""

    def __init__(self, client: TickTick, name: str) -> None:
        self._client = client
        self._body = ProjectCreate(name=name)

    def __repr__(self) -> str:
        return f"ProjectBuilder({self.to_payload()!r})"

    def _set(self, field: str, value: Any) -> ProjectBuilder:
        setattr(self._body, field, value)
        return self

    def name(self, value: str) -> ProjectBuilder:
        return self._set("name", value)

    def color(self, value: str) -> ProjectBuilder:
        return self._set("color", value)

    def sort_order(self, value: int) -> ProjectBuilder:
        return self._set("sort_order", value)

    def view_mode(self, value: ViewMode) -> ProjectBuilder:
        return self._set("view_mode", value)

    def kind(self, value: ProjectKind) -> ProjectBuilder:
        return self._set("kind", value)

    def build(self) -> ProjectCreate:
        return self._body.model_copy(deep=True)

    def to_payload(self) -> dict[str, Any]:
        return self._body.to_payload()

    async def build_and_publish(self) -> Project:
        """Create the project on the server and return it."""
        return await self._client.create_project(self._body)
