from typing import Optional

from fastapi import APIRouter, Depends, status

from ..schemas.task import (
    MessageResponse,
    TaskCreate,
    TaskPage,
    TaskPriorityUpdate,
    TaskRead,
    TaskStatusUpdate,
    TaskUpdate,
)
from ..services.authorization import RequestContext, get_request_context
from ..services.task_service import TaskService, get_task_service

router = APIRouter()


@router.post("/tasks", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task: Optional[TaskCreate] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """Create a new task owned by the caller."""
    return await service.create_task(ctx, task or TaskCreate())


@router.get("/tasks", response_model=TaskPage)
async def get_tasks(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """Get one page of the caller's tasks, newest first."""
    return await service.list_tasks(ctx, page=page, limit=limit)


@router.get("/tasks/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    return await service.get_task(ctx, task_id)


@router.put("/tasks/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    task_update: Optional[TaskUpdate] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    """Update any subset of name, description, priorityLevel and status."""
    return await service.update_task(ctx, task_id, task_update or TaskUpdate())


@router.patch("/tasks/status/{task_id}", response_model=TaskRead)
async def update_task_status(
    task_id: str,
    payload: Optional[TaskStatusUpdate] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    return await service.update_task_status(ctx, task_id, payload or TaskStatusUpdate())


@router.patch("/tasks/priority/{task_id}", response_model=TaskRead)
async def update_task_priority(
    task_id: str,
    payload: Optional[TaskPriorityUpdate] = None,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    return await service.update_task_priority(ctx, task_id, payload or TaskPriorityUpdate())


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: TaskService = Depends(get_task_service),
):
    return await service.delete_task(ctx, task_id)
