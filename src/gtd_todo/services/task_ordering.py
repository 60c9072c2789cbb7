"""Sort-order assignment for tasks within a user's system list.

``sort_order`` is a plain rank: lower values display first. New tasks are
appended after the current maximum, and a reorder rewrites the rank of every
supplied task to its index in the requested order. There is no fractional
indexing; tasks left out of a reorder keep whatever rank they had, so a
partial reorder can leave duplicates or gaps in the list.

Two reorders on the same (user, list) race at the storage layer and the later
commit wins for the whole list.
"""
from __future__ import annotations

import logging
from typing import Dict, Sequence, Union

from gtd_todo.domain.errors import (
    InvalidReorderRequestError,
    SystemListMismatchError,
    TaskOwnershipError,
    TasksNotFoundError,
)
from gtd_todo.domain.ports import TaskRepo
from gtd_todo.domain.task_models import SystemList

logger = logging.getLogger("gtd.tasks")

NIL_ID = "00000000-0000-0000-0000-000000000000"


def coerce_system_list(value: Union[SystemList, str]) -> SystemList:
    try:
        return SystemList(value)
    except ValueError:
        allowed = ", ".join(s.value for s in SystemList)
        raise InvalidReorderRequestError(
            f"System list must be a valid value ({allowed})."
        ) from None


def validate_reorder_ids(task_ids: Sequence[str]) -> list[str]:
    """Check the request shape before anything touches storage."""
    if not task_ids:
        raise InvalidReorderRequestError("Task IDs array must not be empty.")

    ids = list(task_ids)
    if any(not isinstance(tid, str) or not tid.strip() or tid == NIL_ID for tid in ids):
        raise InvalidReorderRequestError("All task IDs must be valid non-empty IDs.")

    seen: set[str] = set()
    dupes: list[str] = []
    for tid in ids:
        if tid in seen and tid not in dupes:
            dupes.append(tid)
        seen.add(tid)
    if dupes:
        raise InvalidReorderRequestError(f"Duplicate task IDs: {', '.join(dupes)}")

    return ids


class TaskOrderingEngine:
    def __init__(self, repo: TaskRepo):
        self.repo = repo

    async def compute_insertion_order(self, user_id: str, system_list: SystemList) -> int:
        """Sort order that puts a new task at the end of the list (0 if it is empty)."""
        current = await self.repo.max_sort_order(user_id, coerce_system_list(system_list))
        return 0 if current is None else current + 1

    async def reorder(
        self,
        user_id: str,
        system_list: Union[SystemList, str],
        task_ids: Sequence[str],
    ) -> Dict[str, int]:
        """Rank ``task_ids`` 0..N-1 in the given order, all or nothing.

        Raises InvalidReorderRequestError, TasksNotFoundError,
        TaskOwnershipError or SystemListMismatchError; on any of them nothing
        is written.
        """
        target = coerce_system_list(system_list)
        ids = validate_reorder_ids(task_ids)

        async with self.repo.transaction() as tx:
            found = await tx.get_many(ids)

            missing = [tid for tid in ids if tid not in found]
            if missing:
                raise TasksNotFoundError(missing)

            if any(task.user_id != user_id for task in found.values()):
                logger.warning(
                    "task.reorder.forbidden",
                    extra={"category": "tasks", "event": "task.reorder.forbidden", "user_id": user_id},
                )
                raise TaskOwnershipError()

            if any(task.system_list != target for task in found.values()):
                raise SystemListMismatchError(target.value)

            assignments = {tid: index for index, tid in enumerate(ids)}
            await tx.set_sort_orders(assignments)

        logger.info(
            "task.reorder",
            extra={
                "category": "tasks",
                "event": "task.reorder",
                "user_id": user_id,
                "system_list": target.value,
                "count": len(assignments),
            },
        )
        return assignments
