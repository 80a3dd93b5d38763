"""Opaque string identifiers for TickTick resources."""

from __future__ import annotations

from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema


class Identifier(str):
    """
    A resource identifier.

    Behaves exactly like the wrapped string; the empty string marks a
    resource that has not been created on the server yet.
    """

    __slots__ = ()

    def is_empty(self) -> bool:
        return not self

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )


class ProjectID(Identifier):
    __slots__ = ()


class GroupID(Identifier):
    __slots__ = ()


class ColumnID(Identifier):
    __slots__ = ()


class TaskID(Identifier):
    __slots__ = ()


class SubtaskID(Identifier):
    __slots__ = ()
