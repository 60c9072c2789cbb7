# tests/helpers.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from gtd_todo.domain.task_models import SystemList, Task, new_task_id

USER_A = "11111111-1111-1111-1111-111111111111"
USER_B = "22222222-2222-2222-2222-222222222222"

_BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def make_task(
    user_id: str = USER_A,
    system_list: SystemList = SystemList.inbox,
    sort_order: int = 0,
    *,
    is_archived: bool = False,
    name: Optional[str] = None,
    minutes: int = 0,
) -> Task:
    created = _BASE_TIME + timedelta(minutes=minutes)
    return Task(
        id=new_task_id(),
        user_id=user_id,
        name=name or f"task {sort_order}",
        system_list=system_list,
        sort_order=sort_order,
        is_archived=is_archived,
        created_at=created,
        updated_at=created,
    )


async def seed(repo, *tasks: Task) -> list[Task]:
    for t in tasks:
        await repo.add(t)
    return list(tasks)


async def sort_orders(repo, tasks) -> list[int]:
    return [(await repo.get(t.id)).sort_order for t in tasks]
