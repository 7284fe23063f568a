"""Owner-scoped task persistence.

Every lookup filters on ``(id, owner)`` inside the SQL statement itself, and
each find-and-update / find-and-delete runs in a single transaction.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlmodel import select

from ..database import get_session
from ..enums import PriorityLevel, TaskStatus
from ..errors import InvalidInput
from ..models import Task
from ..utils import next_timestamp, utcnow

MUTABLE_FIELDS = ("name", "description", "priority_level", "status")


def _validated(changes: dict) -> dict:
    """Check field values before they reach a write; unknown enum values fail."""
    clean = {}
    for field, value in changes.items():
        if field not in MUTABLE_FIELDS:
            raise InvalidInput(f"Unknown task field: {field}")
        if field == "priority_level":
            value = _coerce_enum(PriorityLevel, value, "priorityLevel")
        elif field == "status":
            value = _coerce_enum(TaskStatus, value, "status")
        elif field == "name" and (not isinstance(value, str) or not value):
            raise InvalidInput("Name must be a non-empty string")
        elif field == "description":
            value = "" if value is None else value
            if not isinstance(value, str):
                raise InvalidInput("Description must be a string")
        clean[field] = value
    return clean


def _coerce_enum(enum_cls, value, label: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidInput(f"Invalid {label}: must be one of {allowed}") from None


def _owned(task_id: str, owner: str):
    return select(Task).where(Task.id == task_id, Task.owner == owner)


class TaskRepository:
    """Scoped CRUD over the ``tasks`` table.

    Methods are synchronous; the task service runs them on worker threads.
    Each call opens and closes its own session.
    """

    def __init__(self, session_factory=None) -> None:
        self.session_factory = session_factory

    def create(self, owner: str, fields: dict) -> Task:
        values = _validated(fields)
        now = utcnow()
        task = Task(owner=owner, created_at=now, updated_at=now, **values)
        with get_session(self.session_factory) as session:
            session.add(task)
            session.commit()
            session.refresh(task)
            return task

    def find_page(self, owner: str, skip: int, limit: int) -> List[Task]:
        statement = (
            select(Task)
            .where(Task.owner == owner)
            .order_by(Task.created_at.desc(), Task.seq.desc())
            .offset(skip)
            .limit(limit)
        )
        with get_session(self.session_factory) as session:
            return list(session.exec(statement).all())

    def count(self, owner: str) -> int:
        statement = select(func.count()).select_from(Task).where(Task.owner == owner)
        with get_session(self.session_factory) as session:
            return session.exec(statement).one()

    def find_one(self, task_id: str, owner: str) -> Optional[Task]:
        with get_session(self.session_factory) as session:
            return session.exec(_owned(task_id, owner)).first()

    def find_one_and_update(self, task_id: str, owner: str, changes: dict) -> Optional[Task]:
        """Apply ``changes`` to the owned task; ``None`` when it does not exist."""
        values = _validated(changes)
        with get_session(self.session_factory) as session:
            task = session.exec(_owned(task_id, owner).with_for_update()).first()
            if task is None:
                return None
            for field, value in values.items():
                setattr(task, field, value)
            task.updated_at = next_timestamp(task.updated_at)
            session.add(task)
            session.commit()
            session.refresh(task)
            return task

    def find_one_and_delete(self, task_id: str, owner: str) -> Optional[Task]:
        with get_session(self.session_factory) as session:
            task = session.exec(_owned(task_id, owner).with_for_update()).first()
            if task is None:
                return None
            session.delete(task)
            session.commit()
            return task
