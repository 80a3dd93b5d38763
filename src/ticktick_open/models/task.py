"""
TickTick Task Models.

Task and Subtask mirror the Open API ``Task`` and ``ChecklistItem`` schemas.
TaskCreate is the body of a creation request and has no identifier.

Models carry no client; operations that talk to the API take the
``TickTick`` client as their first argument.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from pydantic import Field

from ticktick_open.constants import SubtaskStatus, TaskPriority, TaskStatus
from ticktick_open.models.base import TickTickDateTime, TickTickModel
from ticktick_open.models.ids import ProjectID, SubtaskID, TaskID

if TYPE_CHECKING:
    from ticktick_open.builders import TaskBuilder
    from ticktick_open.client import TickTick

logger = logging.getLogger(__name__)


class Subtask(TickTickModel):
    """
    Checklist item embedded in a task.

    Subtasks have no endpoints of their own; they are created, changed and
    removed by publishing the owning task.
    """

    id: SubtaskID = Field(default_factory=SubtaskID)
    title: str = ""
    status: SubtaskStatus = SubtaskStatus.NORMAL
    completed_time: Optional[TickTickDateTime] = None
    is_all_day: bool = False
    sort_order: int = 0
    start_date: Optional[TickTickDateTime] = None
    time_zone: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == SubtaskStatus.COMPLETED


class Task(TickTickModel):
    """A TickTick task."""

    id: TaskID = Field(default_factory=TaskID)
    project_id: ProjectID = Field(default_factory=ProjectID)
    title: str
    is_all_day: bool = False
    completed_time: Optional[TickTickDateTime] = None
    content: Optional[str] = None
    desc: Optional[str] = None
    due_date: Optional[TickTickDateTime] = None
    subtasks: list[Subtask] = Field(default_factory=list, alias="items")
    priority: TaskPriority = TaskPriority.NONE
    reminders: list[str] = Field(default_factory=list)
    repeat_flag: Optional[str] = None
    sort_order: int = 0
    start_date: Optional[TickTickDateTime] = None
    status: TaskStatus = TaskStatus.NORMAL
    time_zone: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    # =========================================================================
    # Retrieval
    # =========================================================================

    @classmethod
    def builder(cls, client: TickTick, title: str) -> TaskBuilder:
        """Start building a new task."""
        from ticktick_open.builders import TaskBuilder

        return TaskBuilder(client, title)

    @classmethod
    async def get(cls, client: TickTick, project_id: str, task_id: str) -> Task:
        """Fetch a task by project and task ID."""
        return await client.get_task(project_id, task_id)

    @classmethod
    async def get_all_in_projects(cls, client: TickTick) -> list[Task]:
        """Fetch every task of every project."""
        return await client.get_all_tasks_in_projects()

    # =========================================================================
    # Instance Operations
    # =========================================================================

    async def delete(self, client: TickTick) -> None:
        """Delete this task on the server."""
        await client.delete_task(self.project_id, self.id)

    async def publish_changes(self, client: TickTick) -> None:
        """
        Send the full current state of this task to the server.

        The server may recompute fields (e.g. sort order, reminders); fetch
        the task again to observe them.
        """
        await client.update_task(self)

    async def complete(self, client: TickTick) -> None:
        """
        Mark this task completed.

        The local status only changes once the server has accepted the
        request, so a failed call leaves the instance untouched.
        """
        await client.complete_task(self.project_id, self.id)
        self.status = TaskStatus.COMPLETED
        logger.debug("Task %s marked completed", self.id)


class TaskCreate(TickTickModel):
    """Body of a task creation request. Unset fields are omitted."""

    title: str
    project_id: Optional[ProjectID] = None
    is_all_day: Optional[bool] = None
    completed_time: Optional[TickTickDateTime] = None
    content: Optional[str] = None
    desc: Optional[str] = None
    due_date: Optional[TickTickDateTime] = None
    subtasks: list[Subtask] = Field(default_factory=list, alias="items")
    priority: Optional[TaskPriority] = None
    reminders: list[str] = Field(default_factory=list)
    repeat_flag: Optional[str] = None
    sort_order: Optional[int] = None
    start_date: Optional[TickTickDateTime] = None
    status: Optional[TaskStatus] = None
    time_zone: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        return {key: value for key, value in payload.items() if value != []}
