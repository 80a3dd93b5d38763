"""
Shared model base and the TickTick datetime codec.

TickTick timestamps look like ``2019-11-13T03:00:00+0000``: second precision
and a numeric UTC offset without a colon. Anything else is rejected.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    SerializerFunctionWrapHandler,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from ticktick_open.constants import DATETIME_FORMAT
from ticktick_open.models.ids import Identifier

_DATETIME_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{4}")


# =============================================================================
# Datetime Codec
# =============================================================================


def format_datetime(value: datetime) -> str:
    """Render a datetime in the TickTick wire format (always UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(DATETIME_FORMAT)


def parse_datetime(value: str) -> datetime:
    """
    Parse a TickTick wire timestamp into an aware UTC datetime.

    Raises:
        ValueError: If the string is not exactly in the wire format
    """
    if not _DATETIME_PATTERN.fullmatch(value):
        raise ValueError(f"Invalid TickTick datetime {value!r}, expected yyyy-MM-ddTHH:mm:ss+ZZZZ")
    return datetime.strptime(value, DATETIME_FORMAT).astimezone(timezone.utc)


def _validate_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return parse_datetime(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return value


TickTickDateTime = Annotated[
    datetime,
    BeforeValidator(_validate_datetime),
    PlainSerializer(format_datetime, return_type=str, when_used="json"),
]
"""Datetime field using the TickTick wire format. Wrap in Optional for absent values."""


# =============================================================================
# Base Model
# =============================================================================


class TickTickModel(BaseModel):
    """
    Base for all wire models.

    Python attributes are snake_case, the wire is camelCase. Unknown fields
    sent by the service are ignored.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        extra="ignore",
    )

    @model_serializer(mode="wrap")
    def _omit_empty_identifiers(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for name, field in type(self).model_fields.items():
            value = getattr(self, name, None)
            if isinstance(value, Identifier) and value.is_empty():
                data.pop(name, None)
                if field.alias:
                    data.pop(field.alias, None)
        return data

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body sent to the API."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
