import logging
from typing import Optional

from fastapi import FastAPI

from gtd_todo.app.errors import register_exception_handlers
from gtd_todo.app.middleware.access_log import AccessLogMiddleware
from gtd_todo.app.routes import auth, tasks
from gtd_todo.config import Settings
from gtd_todo.infra.db.sqlite import init_db, make_database_url, make_engine, make_sessionmaker
from gtd_todo.infra.db.task_repo_memory import InMemoryTaskRepo
from gtd_todo.infra.db.task_repo_sqlite import SQLTaskRepo
from gtd_todo.infra.db.user_repo_memory import InMemoryUserRepo
from gtd_todo.infra.db.user_repo_sqlite import SQLUserRepo
from gtd_todo.observability.logging import setup_logging
from gtd_todo.services.auth_service import AuthService
from gtd_todo.services.task_service import TaskService

logger = logging.getLogger("gtd.system")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, settings.log_dir)
    logger.info("system.start", extra={"category": "system", "event": "system.start", "storage": settings.storage})

    app = FastAPI(title="GTD Todo")
    app.state.settings = settings
    app.add_middleware(AccessLogMiddleware)
    register_exception_handlers(app)

    if settings.storage == "memory":
        task_repo, user_repo = InMemoryTaskRepo(), InMemoryUserRepo()
        app.state.engine = None
    else:
        engine = make_engine(make_database_url(settings.database_url, settings.db_path))
        sessionmaker = make_sessionmaker(engine)
        task_repo, user_repo = SQLTaskRepo(sessionmaker), SQLUserRepo(sessionmaker)
        app.state.engine = engine

        # Create tables on startup
        @app.on_event("startup")
        async def _startup():
            await init_db(engine)
            logger.info("db.ready", extra={"category": "system", "event": "db.ready", "url": engine.url.render_as_string()})

        @app.on_event("shutdown")
        async def _shutdown():
            await engine.dispose()

    app.state.task_service = TaskService(task_repo)
    app.state.auth_service = AuthService(user_repo, settings)

    app.include_router(auth.router)
    app.include_router(tasks.router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


def run() -> None:
    import os
    import uvicorn

    uvicorn.run(
        "gtd_todo.app.main:create_app",
        factory=True,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,  # setup_logging owns the handlers
    )
