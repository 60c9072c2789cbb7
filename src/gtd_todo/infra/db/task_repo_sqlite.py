from __future__ import annotations
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, delete, func, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.ext.asyncio import AsyncSession

from gtd_todo.domain.task_models import SystemList, Task, TaskPriority, TaskStatus


class Base(DeclarativeBase):
    pass


class TaskRow(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        Index("ix_tasks_user_list_archived", "user_id", "system_list", "is_archived"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    priority: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    system_list: Mapped[str] = mapped_column(String(10), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    @classmethod
    def from_domain(cls, task: Task) -> "TaskRow":
        row = cls(id=task.id)
        row.apply(task)
        return row

    def apply(self, task: Task) -> None:
        self.user_id = task.user_id
        self.name = task.name
        self.description = task.description
        self.due_date = task.due_date
        self.priority = task.priority.value if task.priority else None
        self.status = task.status.value
        self.system_list = task.system_list.value
        self.sort_order = task.sort_order
        self.is_archived = task.is_archived
        self.completed_at = task.completed_at
        self.created_at = task.created_at
        self.updated_at = task.updated_at

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            description=self.description,
            due_date=self.due_date,
            priority=TaskPriority(self.priority) if self.priority else None,
            status=TaskStatus(self.status),
            system_list=SystemList(self.system_list),
            sort_order=self.sort_order,
            is_archived=self.is_archived,
            completed_at=self.completed_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class SQLTaskTransaction:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _rows(self, task_ids: Sequence[str]) -> List[TaskRow]:
        # FOR UPDATE locks the rows on Postgres; SQLite serializes writers itself.
        res = await self.session.execute(
            select(TaskRow).where(TaskRow.id.in_(list(task_ids))).with_for_update()
        )
        return list(res.scalars().all())

    async def get_many(self, task_ids: Sequence[str]) -> Dict[str, Task]:
        return {row.id: row.to_domain() for row in await self._rows(task_ids)}

    async def set_sort_orders(self, assignments: Mapping[str, int]) -> None:
        now = datetime.now(timezone.utc)
        for row in await self._rows(list(assignments)):
            row.sort_order = assignments[row.id]
            row.updated_at = now


class SQLTaskRepo:
    def __init__(self, sessionmaker):
        self.sessionmaker = sessionmaker

    async def add(self, task: Task) -> Task:
        async with self.sessionmaker() as session:
            session.add(TaskRow.from_domain(task))
            await session.commit()
            return task

    async def get(self, task_id: str) -> Optional[Task]:
        async with self.sessionmaker() as session:
            row = await session.get(TaskRow, task_id)
            return row.to_domain() if row else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        system_list: Optional[SystemList] = None,
        archived: Optional[bool] = False,
        status: Optional[TaskStatus] = None,
    ) -> List[Task]:
        stmt = select(TaskRow).where(TaskRow.user_id == user_id)
        if archived is not None:
            stmt = stmt.where(TaskRow.is_archived == archived)
        if status is not None:
            stmt = stmt.where(TaskRow.status == status.value)
        if system_list is not None:
            stmt = stmt.where(TaskRow.system_list == system_list.value)
        stmt = stmt.order_by(TaskRow.sort_order, TaskRow.created_at)
        async with self.sessionmaker() as session:
            res = await session.execute(stmt)
            return [r.to_domain() for r in res.scalars().all()]

    async def update(self, task: Task) -> Task:
        async with self.sessionmaker() as session:
            row = await session.get(TaskRow, task.id)
            if row is None:
                session.add(TaskRow.from_domain(task))
            else:
                row.apply(task)
            await session.commit()
            return task

    async def delete(self, task_id: str) -> bool:
        async with self.sessionmaker() as session:
            res = await session.execute(delete(TaskRow).where(TaskRow.id == task_id))
            await session.commit()
            return res.rowcount > 0

    async def max_sort_order(self, user_id: str, system_list: SystemList) -> Optional[int]:
        stmt = select(func.max(TaskRow.sort_order)).where(
            TaskRow.user_id == user_id,
            TaskRow.system_list == system_list.value,
            TaskRow.is_archived.is_(False),
        )
        async with self.sessionmaker() as session:
            return (await session.execute(stmt)).scalar()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLTaskTransaction]:
        # session.begin() commits on clean exit and rolls back on any exception,
        # including cancellation.
        async with self.sessionmaker() as session:
            async with session.begin():
                yield SQLTaskTransaction(session)
