"""
Storage ports used by the services.

Services depend on these Protocols; the SQLAlchemy and in-memory
repositories both satisfy them.
"""

from __future__ import annotations

from typing import AsyncContextManager, Mapping, Optional, Protocol, Sequence

from gtd_todo.domain.task_models import SystemList, Task, TaskStatus
from gtd_todo.domain.user_models import UserRecord


class TaskTransaction(Protocol):
    """Reads and writes that commit together when the transaction block exits."""

    async def get_many(self, task_ids: Sequence[str]) -> dict[str, Task]: ...

    async def set_sort_orders(self, assignments: Mapping[str, int]) -> None: ...


class TaskRepo(Protocol):
    async def add(self, task: Task) -> Task: ...

    async def get(self, task_id: str) -> Optional[Task]: ...

    async def list_for_user(
        self,
        user_id: str,
        *,
        system_list: Optional[SystemList] = None,
        archived: Optional[bool] = False,
        status: Optional[TaskStatus] = None,
    ) -> list[Task]: ...

    async def update(self, task: Task) -> Task: ...

    async def delete(self, task_id: str) -> bool: ...

    async def max_sort_order(self, user_id: str, system_list: SystemList) -> Optional[int]: ...

    def transaction(self) -> AsyncContextManager[TaskTransaction]: ...


class UserRepo(Protocol):
    async def add(self, user: UserRecord) -> UserRecord: ...

    async def get(self, user_id: str) -> Optional[UserRecord]: ...

    async def get_by_email(self, email: str) -> Optional[UserRecord]: ...
