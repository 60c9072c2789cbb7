from __future__ import annotations
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String, select
from sqlalchemy.orm import Mapped, mapped_column

from gtd_todo.domain.user_models import UserRecord
from gtd_todo.infra.db.task_repo_sqlite import Base


class UserRow(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def to_domain(self) -> UserRecord:
        return UserRecord(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            password_hash=self.password_hash,
            created_at=self.created_at,
        )


class SQLUserRepo:
    def __init__(self, sessionmaker):
        self.sessionmaker = sessionmaker

    async def add(self, user: UserRecord) -> UserRecord:
        row = UserRow(
            id=user.id,
            email=user.email,
            display_name=user.display_name,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )
        async with self.sessionmaker() as session:
            session.add(row)
            await session.commit()
            return user

    async def get(self, user_id: str) -> Optional[UserRecord]:
        async with self.sessionmaker() as session:
            row = await session.get(UserRow, user_id)
            return row.to_domain() if row else None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        async with self.sessionmaker() as session:
            res = await session.execute(select(UserRow).where(UserRow.email == email.lower()))
            row = res.scalar_one_or_none()
            return row.to_domain() if row else None
