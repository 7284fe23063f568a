from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from ..enums import PriorityLevel, TaskStatus
from ..utils import as_utc

NAME_REQUIRED = "Name is required and must be a string"


def _priority_field():
    return Field(
        default=None,
        validation_alias=AliasChoices("priorityLevel", "priority_level"),
    )


def _reject_null(value, field_name: str):
    if value is None:
        raise ValueError(f"{field_name} must not be null")
    return value


class TaskCreate(BaseModel):
    """Schema for creating new tasks.

    Omitted enum fields fall back to the model defaults.
    """
    name: str = None
    description: Optional[str] = None
    priority_level: Optional[PriorityLevel] = _priority_field()
    status: Optional[TaskStatus] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_is_text(cls, value):
        if not isinstance(value, str) or not value:
            raise ValueError(NAME_REQUIRED)
        return value

    @field_validator("priority_level", "status", mode="before")
    @classmethod
    def _enum_not_null(cls, value, info):
        return _reject_null(value, info.field_name)


class TaskUpdate(BaseModel):
    """Schema for updating existing tasks.

    Only fields present in the request body are applied; see ``changes``.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    priority_level: Optional[PriorityLevel] = _priority_field()
    status: Optional[TaskStatus] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_is_text(cls, value):
        if not isinstance(value, str) or not value:
            raise ValueError("Name must be a non-empty string")
        return value

    @field_validator("priority_level", "status", mode="before")
    @classmethod
    def _enum_not_null(cls, value, info):
        return _reject_null(value, info.field_name)

    @field_validator("description", mode="before")
    @classmethod
    def _null_clears_description(cls, value):
        return "" if value is None else value

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)


class TaskStatusUpdate(BaseModel):
    """Schema for the status-only update."""
    status: Optional[TaskStatus] = None


class TaskPriorityUpdate(BaseModel):
    """Schema for the priority-only update."""
    priority_level: Optional[PriorityLevel] = _priority_field()


class WireModel(BaseModel):
    """Response models: snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TaskRead(WireModel):
    """Task as returned over the wire."""

    id: str
    owner: str
    name: str
    description: str
    priority_level: PriorityLevel
    status: TaskStatus
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def _utc_iso(self, value: datetime) -> str:
        return as_utc(value).isoformat()


class PageMeta(WireModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool


class TaskPage(WireModel):
    meta: PageMeta
    data: List[TaskRead]


class MessageResponse(BaseModel):
    message: str
