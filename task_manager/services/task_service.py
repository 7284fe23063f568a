"""Task operations scoped to the calling subject.

Input problems are reported before the repository is touched. Repository
calls are blocking and run on worker threads; the list operation issues its
count and page queries concurrently.
"""

import asyncio
import logging
import math

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from ..config import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT
from ..database import get_session_factory
from ..errors import Internal, InvalidInput, NotFound
from ..repositories.task_repository import TaskRepository
from ..schemas.task import (
    NAME_REQUIRED,
    PageMeta,
    TaskCreate,
    TaskPage,
    TaskPriorityUpdate,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from ..utils import is_valid_object_id
from .authorization import RequestContext

logger = logging.getLogger(__name__)

INVALID_ID = "Invalid task ID"
TASK_NOT_FOUND = "Task not found"
NO_UPDATE_FIELDS = "At least one field (name, description, priorityLevel, status) must be provided for update"
STATUS_REQUIRED = "Status is required"
PRIORITY_REQUIRED = "Priority level is required"
TASK_DELETED = "Task deleted successfully"

# Upper bound for page and limit; (page - 1) * limit fits a signed 64-bit integer.
MAX_PAGING_VALUE = 2**31 - 1


def coerce_positive_int(raw, default: int) -> int:
    """Read a paging parameter.

    Missing, zero or non-numeric values take ``default``. Negative values are
    raised to 1 and values above ``MAX_PAGING_VALUE`` are lowered to it.
    Fractions are truncated.
    """
    if raw is None or isinstance(raw, bool):
        return default
    try:
        number = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number == 0:
        return default
    return min(max(1, int(number)), MAX_PAGING_VALUE)


def build_page_meta(page: int, limit: int, total: int) -> PageMeta:
    total_pages = math.ceil(total / limit)
    return PageMeta(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )


def _require_valid_id(task_id) -> None:
    if not is_valid_object_id(task_id):
        raise InvalidInput(INVALID_ID)


class TaskService:
    def __init__(self, repository: TaskRepository) -> None:
        self.repository = repository

    async def _call(self, func, *args):
        try:
            return await run_in_threadpool(func, *args)
        except SQLAlchemyError as exc:
            logger.exception("Task store call failed", extra={"operation": getattr(func, "__name__", repr(func))})
            raise Internal() from exc

    async def create_task(self, ctx: RequestContext, payload: TaskCreate) -> TaskRead:
        if not isinstance(payload.name, str) or not payload.name:
            raise InvalidInput(NAME_REQUIRED)

        fields = payload.model_dump(exclude_none=True)
        fields.setdefault("description", "")
        task = await self._call(self.repository.create, ctx.subject_id, fields)
        logger.info("Task created", extra={"task_id": task.id, "subject_id": ctx.subject_id})
        return TaskRead.model_validate(task)

    async def list_tasks(self, ctx: RequestContext, page=None, limit=None) -> TaskPage:
        page = coerce_positive_int(page, DEFAULT_PAGE)
        limit = coerce_positive_int(limit, DEFAULT_PAGE_LIMIT)
        skip = (page - 1) * limit

        tasks, total = await asyncio.gather(
            self._call(self.repository.find_page, ctx.subject_id, skip, limit),
            self._call(self.repository.count, ctx.subject_id),
        )
        return TaskPage(
            meta=build_page_meta(page, limit, total),
            data=[TaskRead.model_validate(task) for task in tasks],
        )

    async def get_task(self, ctx: RequestContext, task_id: str) -> TaskRead:
        _require_valid_id(task_id)
        task = await self._call(self.repository.find_one, task_id, ctx.subject_id)
        if task is None:
            raise NotFound(TASK_NOT_FOUND)
        return TaskRead.model_validate(task)

    async def update_task(self, ctx: RequestContext, task_id: str, payload: TaskUpdate) -> TaskRead:
        _require_valid_id(task_id)
        changes = payload.changes()
        if not changes:
            raise InvalidInput(NO_UPDATE_FIELDS)
        return await self._apply(ctx, task_id, changes)

    async def update_task_status(self, ctx: RequestContext, task_id: str, payload: TaskStatusUpdate) -> TaskRead:
        _require_valid_id(task_id)
        if payload.status is None:
            raise InvalidInput(STATUS_REQUIRED)
        return await self._apply(ctx, task_id, {"status": payload.status})

    async def update_task_priority(
        self, ctx: RequestContext, task_id: str, payload: TaskPriorityUpdate
    ) -> TaskRead:
        _require_valid_id(task_id)
        if payload.priority_level is None:
            raise InvalidInput(PRIORITY_REQUIRED)
        return await self._apply(ctx, task_id, {"priority_level": payload.priority_level})

    async def delete_task(self, ctx: RequestContext, task_id: str) -> dict:
        _require_valid_id(task_id)
        deleted = await self._call(self.repository.find_one_and_delete, task_id, ctx.subject_id)
        if deleted is None:
            raise NotFound(TASK_NOT_FOUND)
        logger.info("Task deleted", extra={"task_id": task_id, "subject_id": ctx.subject_id})
        return {"message": TASK_DELETED}

    async def _apply(self, ctx: RequestContext, task_id: str, changes: dict) -> TaskRead:
        task = await self._call(self.repository.find_one_and_update, task_id, ctx.subject_id, changes)
        if task is None:
            raise NotFound(TASK_NOT_FOUND)
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "subject_id": ctx.subject_id, "fields": sorted(changes)},
        )
        return TaskRead.model_validate(task)


def get_task_repository(session_factory=Depends(get_session_factory)) -> TaskRepository:
    return TaskRepository(session_factory)


def get_task_service(repository: TaskRepository = Depends(get_task_repository)) -> TaskService:
    return TaskService(repository)
