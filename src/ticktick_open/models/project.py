"""
TickTick Project Models.

Project mirrors the Open API ``Project`` schema; ProjectData and Column are
the read-only result of the "get project with data" endpoint.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Optional

from pydantic import BeforeValidator, Field

from ticktick_open.constants import ProjectKind, ProjectPermission, ViewMode
from ticktick_open.models.base import TickTickModel
from ticktick_open.models.ids import ColumnID, GroupID, ProjectID
from ticktick_open.models.task import Task

if TYPE_CHECKING:
    from ticktick_open.builders import ProjectBuilder
    from ticktick_open.client import TickTick


# Unknown strings fall back to the enum's default member.
LenientViewMode = Annotated[ViewMode, BeforeValidator(lambda v: ViewMode(v) if isinstance(v, str) else v)]
LenientPermission = Annotated[
    ProjectPermission,
    BeforeValidator(lambda v: ProjectPermission(v) if isinstance(v, str) else v),
]
LenientProjectKind = Annotated[ProjectKind, BeforeValidator(lambda v: ProjectKind(v) if isinstance(v, str) else v)]


class Column(TickTickModel):
    """Kanban column of a project."""

    id: ColumnID = Field(default_factory=ColumnID)
    project_id: ProjectID = Field(default_factory=ProjectID)
    name: str = ""
    sort_order: int = 0


class Project(TickTickModel):
    """A TickTick project (task or note list)."""

    id: ProjectID = Field(default_factory=ProjectID)
    name: str = ""
    color: Optional[str] = None
    sort_order: int = 0
    closed: bool = False
    group_id: GroupID = Field(default_factory=GroupID)
    view_mode: LenientViewMode = ViewMode.LIST
    permission: LenientPermission = ProjectPermission.READ
    kind: LenientProjectKind = ProjectKind.TASK

    @classmethod
    def builder(cls, client: TickTick, name: str) -> ProjectBuilder:
        """Start building a new project."""
        from ticktick_open.builders import ProjectBuilder

        return ProjectBuilder(client, name)

    @classmethod
    async def get(cls, client: TickTick, project_id: str) -> Project:
        return await client.get_project(project_id)

    @classmethod
    async def get_all(cls, client: TickTick) -> list[Project]:
        return await client.get_all_projects()

    async def get_data(self, client: TickTick) -> ProjectData:
        """Fetch this project's tasks and columns in one request."""
        return await client.get_project_data(self.id)

    async def get_tasks(self, client: TickTick) -> list[Task]:
        return (await self.get_data(client)).tasks

    async def get_columns(self, client: TickTick) -> list[Column]:
        return (await self.get_data(client)).columns

    async def publish_changes(self, client: TickTick) -> None:
        """Send the full current state of this project to the server."""
        await client.update_project(self)

    async def delete(self, client: TickTick) -> None:
        await client.delete_project(self.id)


class ProjectData(TickTickModel):
    """Snapshot of a project with its undone tasks and kanban columns."""

    project: Optional[Project] = None
    tasks: list[Task] = Field(default_factory=list)
    columns: list[Column] = Field(default_factory=list)


class ProjectCreate(TickTickModel):
    """Body of a project creation request. Unset fields are omitted."""

    name: str
    color: Optional[str] = None
    sort_order: Optional[int] = None
    view_mode: Optional[ViewMode] = None
    kind: Optional[ProjectKind] = None
