from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    database_url: Optional[str] = None
    db_path: str = "./data/gtd.db"
    storage: str = "sqlite"  # "sqlite" | "memory"
    log_level: str = "INFO"
    log_dir: Optional[str] = "./logs"
    jwt_secret: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    jwt_ttl_minutes: int = 1440
    password_hash_iterations: int = 260_000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            db_path=os.getenv("DB_PATH", "./data/gtd.db"),
            storage=os.getenv("STORAGE", "sqlite").lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            # LOG_DIR="" turns the file handler off
            log_dir=os.getenv("LOG_DIR", "./logs") or None,
            jwt_secret=os.getenv("JWT_SECRET", "dev-secret-change-in-production"),
            jwt_ttl_minutes=int(os.getenv("JWT_TTL_MINUTES", "1440")),
            password_hash_iterations=int(os.getenv("PASSWORD_HASH_ITERATIONS", "260000")),
        )
