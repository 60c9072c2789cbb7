from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from gtd_todo.app.security import get_current_user_id
from gtd_todo.domain.task_models import (
    ReorderTasksRequest,
    ReorderTasksResponse,
    SystemList,
    Task,
    TaskCreate,
    TaskList,
    TaskStatusFilter,
    TaskUpdate,
)
from gtd_todo.services.task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


def get_service(request: Request) -> TaskService:
    # Wired in main.create_app
    return request.app.state.task_service


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    payload: TaskCreate,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    task = await svc.create_task(user_id, payload)
    response.headers["Location"] = f"/api/tasks/{task.id}"
    return task


@router.get("", response_model=TaskList)
async def list_tasks(
    system_list: Optional[SystemList] = Query(default=None, alias="systemList"),
    archived: bool = False,
    task_status: Optional[TaskStatusFilter] = Query(default=None, alias="status"),
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    tasks = await svc.list_tasks(user_id, system_list=system_list, archived=archived, status=task_status)
    return TaskList(tasks=tasks)


@router.patch("/reorder", response_model=ReorderTasksResponse)
async def reorder_tasks(
    payload: ReorderTasksRequest,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    return await svc.reorder_tasks(user_id, payload)


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    return await svc.get_task(user_id, task_id)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    return await svc.update_task(user_id, task_id, payload)


@router.patch("/{task_id}/complete", response_model=Task)
async def complete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    return await svc.complete_task(user_id, task_id)


@router.patch("/{task_id}/reopen", response_model=Task)
async def reopen_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    return await svc.reopen_task(user_id, task_id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    svc: TaskService = Depends(get_service),
):
    await svc.delete_task(user_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
