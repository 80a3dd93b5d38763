"""
TickTick Open API Constants.

Endpoint templates, OAuth parameters and the enumerations used on the wire.
All URLs are fixed; identifiers are substituted with ``str.format``.
"""

from __future__ import annotations

from enum import Enum, IntEnum

# =============================================================================
# Endpoints
# =============================================================================

BASE_URL = "https://ticktick.com"
API_PREFIX = "/open/v1"

TASK_CREATE_PATH = f"{API_PREFIX}/task"
TASK_UPDATE_PATH = f"{API_PREFIX}/task/{{task_id}}"
TASK_PATH = f"{API_PREFIX}/project/{{project_id}}/task/{{task_id}}"
TASK_COMPLETE_PATH = f"{API_PREFIX}/project/{{project_id}}/task/{{task_id}}/complete"

PROJECT_CREATE_PATH = f"{API_PREFIX}/project"
PROJECT_LIST_PATH = f"{API_PREFIX}/project/"
PROJECT_PATH = f"{API_PREFIX}/project/{{project_id}}"
PROJECT_DATA_PATH = f"{API_PREFIX}/project/{{project_id}}/data"

# =============================================================================
# OAuth2
# =============================================================================

AUTHORIZE_URL = f"{BASE_URL}/oauth/authorize"
TOKEN_URL = f"{BASE_URL}/oauth/token"

OAUTH_SCOPES = ("tasks:read", "tasks:write")
# The token endpoint expects the scopes in this order.
TOKEN_SCOPE = "tasks:write tasks:read"

DEFAULT_REDIRECT_URI = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0
DEFAULT_REDIRECT_TIMEOUT = 300.0

# yyyy-MM-dd'T'HH:mm:ssZ
DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%z"


# =============================================================================
# Integer Enumerations (strict)
# =============================================================================


class TaskPriority(IntEnum):
    """Task priority as encoded by the API."""

    NONE = 0
    LOW = 1
    MEDIUM = 3
    HIGH = 5


class TaskStatus(IntEnum):
    """Task completion status."""

    NORMAL = 0
    COMPLETED = 2


class SubtaskStatus(IntEnum):
    """Checklist item completion status."""

    NORMAL = 0
    COMPLETED = 1


# =============================================================================
# String Enumerations (lenient)
# =============================================================================


class _LenientEnum(str, Enum):
    """
    String enum that resolves unknown strings to a default member.

    Subclasses list their default member first. Non-string values are still
    rejected.
    """

    @classmethod
    def default(cls) -> "_LenientEnum":
        return next(iter(cls))

    @classmethod
    def _missing_(cls, value: object) -> "_LenientEnum | None":
        if isinstance(value, str):
            return cls.default()
        return None


class ViewMode(_LenientEnum):
    """Project view mode."""

    LIST = "list"
    KANBAN = "kanban"
    TIMELINE = "timeline"


class ProjectPermission(_LenientEnum):
    """Permission the current user holds on a project."""

    READ = "read"
    WRITE = "write"
    COMMENT = "comment"


class ProjectKind(_LenientEnum):
    """Whether a project holds tasks or notes."""

    TASK = "TASK"
    NOTE = "NOTE"
