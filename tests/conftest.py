# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from gtd_todo.infra.db.sqlite import init_db, make_engine, make_sessionmaker, make_sqlite_url
from gtd_todo.infra.db.task_repo_memory import InMemoryTaskRepo
from gtd_todo.infra.db.task_repo_sqlite import SQLTaskRepo


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(params=["memory", "sqlite"])
async def repo(request, tmp_path: Path):
    """
    Every task repository implementation, so ordering behaviour is checked
    against real SQLAlchemy transactions as well as the in-memory store.
    """
    if request.param == "memory":
        yield InMemoryTaskRepo()
        return

    engine = make_engine(make_sqlite_url(str(tmp_path / "tasks.db")))
    await init_db(engine)
    yield SQLTaskRepo(make_sessionmaker(engine))
    await engine.dispose()
