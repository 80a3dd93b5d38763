"""
TickTick Open API Data Models.

Pydantic models mapping the Open API JSON schema (camelCase on the wire,
snake_case in Python).

Models:
    - Task: Task with its embedded subtasks
    - Subtask: Checklist item
    - TaskCreate: Task creation body
    - Project: Project (task or note list)
    - ProjectCreate: Project creation body
    - ProjectData: Project with tasks and columns
    - Column: Kanban column
    - AccessToken: OAuth2 bearer token
"""

from ticktick_open.models.base import (
    TickTickDateTime,
    TickTickModel,
    format_datetime,
    parse_datetime,
)
from ticktick_open.models.ids import (
    ColumnID,
    GroupID,
    Identifier,
    ProjectID,
    SubtaskID,
    TaskID,
)
from ticktick_open.models.task import Subtask, Task, TaskCreate
from ticktick_open.models.project import Column, Project, ProjectCreate, ProjectData
from ticktick_open.models.token import AccessToken

__all__ = [
    "TickTickDateTime",
    "TickTickModel",
    "format_datetime",
    "parse_datetime",
    "Identifier",
    "ProjectID",
    "GroupID",
    "ColumnID",
    "TaskID",
    "SubtaskID",
    "Task",
    "Subtask",
    "TaskCreate",
    "Project",
    "ProjectCreate",
    "ProjectData",
    "Column",
    "AccessToken",
]
