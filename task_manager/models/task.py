from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
from typing import Optional

from ..enums import DEFAULT_PRIORITY, DEFAULT_STATUS, PriorityLevel, TaskStatus
from ..utils import new_object_id, utcnow


class Task(SQLModel, table=True):
    """A single task owned by one subject.

    ``seq`` is the store-assigned insertion order and only breaks ties when
    two tasks share a ``created_at``.
    """
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    seq: Optional[int] = Field(default=None, primary_key=True)
    id: str = Field(default_factory=new_object_id, unique=True, index=True, max_length=24)
    owner: str = Field(index=True)
    name: str
    description: str = Field(default="")
    priority_level: PriorityLevel = Field(default=DEFAULT_PRIORITY)
    status: TaskStatus = Field(default=DEFAULT_STATUS)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
