from __future__ import annotations
from datetime import datetime
import uuid

from pydantic import Field

from gtd_todo.domain.task_models import CamelModel


class UserCreate(CamelModel):
    email: str = Field(min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    display_name: str = Field(min_length=1, max_length=100)


class User(CamelModel):
    id: str
    email: str
    display_name: str
    created_at: datetime


class UserRecord(User):
    """User plus the stored password hash. Never returned over HTTP."""
    password_hash: str


class LoginRequest(CamelModel):
    email: str
    password: str


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"


def new_user_id() -> str:
    return str(uuid.uuid4())
