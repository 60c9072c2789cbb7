from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Mapping, Optional, Sequence

from gtd_todo.domain.task_models import SystemList, Task, TaskStatus


class _MemoryTaskTransaction:
    def __init__(self, tasks: Dict[str, Task]):
        self._tasks = tasks
        self.staged: Dict[str, int] = {}

    async def get_many(self, task_ids: Sequence[str]) -> Dict[str, Task]:
        return {tid: self._tasks[tid].model_copy() for tid in task_ids if tid in self._tasks}

    async def set_sort_orders(self, assignments: Mapping[str, int]) -> None:
        self.staged.update(assignments)


class InMemoryTaskRepo:
    """
    Process-local task store.
    Same interface as SQLTaskRepo; used by tests and STORAGE=memory.
    Transactions are serialized by a lock and only applied if the block exits cleanly.
    """
    def __init__(self):
        self._tasks: Dict[str, Task] = {}
        self._lock = asyncio.Lock()

    async def add(self, task: Task) -> Task:
        self._tasks[task.id] = task.model_copy()
        return task

    async def get(self, task_id: str) -> Optional[Task]:
        task = self._tasks.get(task_id)
        return task.model_copy() if task else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        system_list: Optional[SystemList] = None,
        archived: Optional[bool] = False,
        status: Optional[TaskStatus] = None,
    ) -> List[Task]:
        # archived=None and status=None each mean "don't filter on this".
        out = [
            t.model_copy()
            for t in self._tasks.values()
            if t.user_id == user_id
            and (archived is None or t.is_archived == archived)
            and (status is None or t.status == status)
            and (system_list is None or t.system_list == system_list)
        ]
        return sorted(out, key=lambda t: (t.sort_order, t.created_at))

    async def update(self, task: Task) -> Task:
        self._tasks[task.id] = task.model_copy()
        return task

    async def delete(self, task_id: str) -> bool:
        return self._tasks.pop(task_id, None) is not None

    async def max_sort_order(self, user_id: str, system_list: SystemList) -> Optional[int]:
        orders = [
            t.sort_order
            for t in self._tasks.values()
            if t.user_id == user_id and t.system_list == system_list and not t.is_archived
        ]
        return max(orders) if orders else None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[_MemoryTaskTransaction]:
        async with self._lock:
            tx = _MemoryTaskTransaction(self._tasks)
            yield tx
            now = datetime.now(timezone.utc)
            for tid, order in tx.staged.items():
                self._tasks[tid] = self._tasks[tid].model_copy(
                    update={"sort_order": order, "updated_at": now}
                )
