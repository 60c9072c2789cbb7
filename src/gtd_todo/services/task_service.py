import logging
from datetime import datetime, timezone
from typing import List, Optional

from gtd_todo.domain.errors import TaskNotFoundError
from gtd_todo.domain.ports import TaskRepo
from gtd_todo.domain.task_models import (
    ReorderTasksRequest,
    ReorderTasksResponse,
    ReorderedTask,
    SystemList,
    Task,
    TaskCreate,
    TaskStatus,
    TaskStatusFilter,
    TaskUpdate,
    new_task_id,
)
from gtd_todo.services.task_ordering import TaskOrderingEngine

logger = logging.getLogger("gtd.tasks")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TaskService:
    def __init__(self, repo: TaskRepo):
        self.repo = repo
        self.ordering = TaskOrderingEngine(repo)

    async def create_task(self, user_id: str, data: TaskCreate) -> Task:
        # New tasks go to the end of their list. The max read and the insert are
        # separate round trips, so two concurrent creates in one list can share a
        # sort order; the next reorder of that list makes it dense again.
        sort_order = await self.ordering.compute_insertion_order(user_id, data.system_list)
        now = _now()
        task = Task(
            id=new_task_id(),
            user_id=user_id,
            name=data.name,
            description=data.description,
            due_date=data.due_date,
            priority=data.priority,
            system_list=data.system_list,
            status=TaskStatus.open,
            sort_order=sort_order,
            is_archived=False,
            created_at=now,
            updated_at=now,
        )
        await self.repo.add(task)
        logger.info(
            "task.create",
            extra={
                "category": "tasks",
                "event": "task.create",
                "task_id": task.id,
                "user_id": user_id,
                "system_list": task.system_list.value,
                "sort_order": sort_order,
            },
        )
        return task

    async def get_task(self, user_id: str, task_id: str) -> Task:
        task = await self.repo.get(task_id)
        # Someone else's task reads as missing.
        if task is None or task.user_id != user_id:
            raise TaskNotFoundError(task_id)
        return task

    async def list_tasks(
        self,
        user_id: str,
        system_list: Optional[SystemList] = None,
        archived: bool = False,
        status: Optional[TaskStatusFilter] = None,
    ) -> List[Task]:
        """Open tasks by default. ``archived=True`` wins over ``status``;
        ``status=All`` drops both the archive and the status filter."""
        if archived:
            return await self.repo.list_for_user(user_id, system_list=system_list, archived=True)
        if status == TaskStatusFilter.all:
            return await self.repo.list_for_user(user_id, system_list=system_list, archived=None)
        if status == TaskStatusFilter.done:
            return await self.repo.list_for_user(
                user_id, system_list=system_list, archived=True, status=TaskStatus.done
            )
        return await self.repo.list_for_user(
            user_id, system_list=system_list, archived=False, status=TaskStatus.open
        )

    async def update_task(self, user_id: str, task_id: str, data: TaskUpdate) -> Task:
        task = await self.get_task(user_id, task_id)
        changes = data.model_dump(exclude_unset=True)
        # name and system_list cannot be cleared, only replaced
        for field in ("name", "system_list"):
            if changes.get(field, "") is None:
                del changes[field]

        target = changes.get("system_list")
        if target is not None and target != task.system_list and not task.is_archived:
            # Moving lists appends to the end of the destination list.
            changes["sort_order"] = await self.ordering.compute_insertion_order(user_id, target)

        if not changes:
            return task

        changes["updated_at"] = _now()
        task = task.model_copy(update=changes)
        await self.repo.update(task)
        logger.info(
            "task.update",
            extra={
                "category": "tasks",
                "event": "task.update",
                "task_id": task_id,
                "fields": sorted(k for k in changes if k != "updated_at"),
                "system_list": task.system_list.value,
                "sort_order": task.sort_order,
            },
        )
        return task

    async def complete_task(self, user_id: str, task_id: str) -> Task:
        task = await self.get_task(user_id, task_id)
        now = _now()
        task = task.model_copy(update={
            "status": TaskStatus.done,
            "is_archived": True,
            "completed_at": now,
            "updated_at": now,
        })
        await self.repo.update(task)
        logger.info("task.complete", extra={"category": "tasks", "event": "task.complete", "task_id": task_id})
        return task

    async def reopen_task(self, user_id: str, task_id: str) -> Task:
        """Unarchive a task, keeping its system list and putting it at the top."""
        task = await self.get_task(user_id, task_id)
        task = task.model_copy(update={
            "status": TaskStatus.open,
            "is_archived": False,
            "completed_at": None,
            "sort_order": 0,
            "updated_at": _now(),
        })
        await self.repo.update(task)
        logger.info("task.reopen", extra={"category": "tasks", "event": "task.reopen", "task_id": task_id})
        return task

    async def delete_task(self, user_id: str, task_id: str) -> None:
        await self.get_task(user_id, task_id)
        await self.repo.delete(task_id)
        logger.info("task.delete", extra={"category": "tasks", "event": "task.delete", "task_id": task_id})

    async def reorder_tasks(self, user_id: str, data: ReorderTasksRequest) -> ReorderTasksResponse:
        assignments = await self.ordering.reorder(user_id, data.system_list, data.task_ids)
        return ReorderTasksResponse(
            reordered_tasks=[ReorderedTask(id=tid, sort_order=order) for tid, order in assignments.items()]
        )
