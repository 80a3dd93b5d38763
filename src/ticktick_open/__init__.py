"""
ticktick-open - Async Python client for the TickTick Open API.

Quick Start:
    ```python
    from ticktick_open import Authorization, TickTick, TaskPriority

    awaiting = Authorization.begin_auth(client_id, "http://localhost:8080")
    token = await awaiting.finish_auth_with_redirect(client_secret)

    async with TickTick(token) as client:
        project = await client.project_builder("Errands").build_and_publish()
        task = await (
            client.task_builder("Buy milk")
            .project_id(project.id)
            .priority(TaskPriority.HIGH)
            .build_and_publish()
        )
        await task.complete(client)
    ```

Architecture:
    Authorization ──► AccessToken
                          │
                          ▼
    TaskBuilder ──►   TickTick   ◄── Task / Project instance methods
    ProjectBuilder    (httpx)        (client passed explicitly)
                          │
                          ▼
                  TickTick Open API v1
"""

__version__ = "0.1.0"
__author__ = "TickTick Open Contributors"

from ticktick_open.client import TickTick
from ticktick_open.builders import TaskBuilder, ProjectBuilder
from ticktick_open.auth import (
    Authorization,
    AwaitingAuthCode,
    AuthorizationResponse,
    RedirectListener,
    wait_for_redirect,
)
from ticktick_open.models import (
    AccessToken,
    Column,
    ColumnID,
    GroupID,
    Project,
    ProjectData,
    ProjectID,
    Subtask,
    SubtaskID,
    Task,
    TaskID,
)
from ticktick_open.constants import (
    ProjectKind,
    ProjectPermission,
    SubtaskStatus,
    TaskPriority,
    TaskStatus,
    ViewMode,
)
from ticktick_open.exceptions import (
    TickTickError,
    TickTickConfigurationError,
    TickTickAPIError,
    TickTickConnectionError,
    TickTickAuthenticationError,
    TickTickForbiddenError,
    TickTickNotFoundError,
    TickTickServerError,
    TickTickResponseParseError,
    TickTickAuthorizationError,
    TickTickCSRFMismatchError,
    TickTickAuthorizationTimeoutError,
)
from ticktick_open.settings import TickTickSettings, get_settings, configure_settings

__all__ = [
    # Version
    "__version__",
    # Client
    "TickTick",
    "TaskBuilder",
    "ProjectBuilder",
    # Authorization
    "Authorization",
    "AwaitingAuthCode",
    "AuthorizationResponse",
    "RedirectListener",
    "wait_for_redirect",
    # Models
    "AccessToken",
    "Task",
    "TaskID",
    "Subtask",
    "SubtaskID",
    "Project",
    "ProjectID",
    "ProjectData",
    "Column",
    "ColumnID",
    "GroupID",
    # Constants
    "TaskPriority",
    "TaskStatus",
    "SubtaskStatus",
    "ViewMode",
    "ProjectPermission",
    "ProjectKind",
    # Exceptions
    "TickTickError",
    "TickTickConfigurationError",
    "TickTickAPIError",
    "TickTickConnectionError",
    "TickTickAuthenticationError",
    "TickTickForbiddenError",
    "TickTickNotFoundError",
    "TickTickServerError",
    "TickTickResponseParseError",
    "TickTickAuthorizationError",
    "TickTickCSRFMismatchError",
    "TickTickAuthorizationTimeoutError",
    # Settings
    "TickTickSettings",
    "get_settings",
    "configure_settings",
]
