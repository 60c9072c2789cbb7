from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from pathlib import Path
from typing import Optional


def make_sqlite_url(db_path: str) -> str:
    # db_path like "./data/gtd.db"
    p = Path(db_path).resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{p.as_posix()}"


def normalize_database_url(url: str) -> str:
    # Hosted Postgres hands out postgres:// URLs; the async engine needs a driver.
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def make_database_url(database_url: Optional[str], db_path: str) -> str:
    if database_url:
        return normalize_database_url(database_url)
    return make_sqlite_url(db_path)


def make_engine(url: str) -> AsyncEngine:
    return create_async_engine(url, pool_pre_ping=True)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    # Imported here so every table module is registered on Base.metadata.
    from gtd_todo.infra.db.task_repo_sqlite import Base
    import gtd_todo.infra.db.user_repo_sqlite  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
