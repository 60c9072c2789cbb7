from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from gtd_todo.config import Settings
from gtd_todo.domain.errors import AuthenticationError, EmailAlreadyRegisteredError
from gtd_todo.domain.ports import UserRepo
from gtd_todo.domain.user_models import (
    LoginRequest,
    TokenResponse,
    User,
    UserCreate,
    UserRecord,
    new_user_id,
)

logger = logging.getLogger("gtd.auth")


def hash_password(password: str, iterations: int, salt: Optional[str] = None) -> str:
    """PBKDF2-HMAC-SHA256, stored as ``pbkdf2_sha256$iterations$salt$hexdigest``."""
    if salt is None:
        salt = secrets.token_hex(16)
    key = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return f"pbkdf2_sha256${iterations}${salt}${key.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algo, iterations, salt, _ = stored.split("$", 3)
    except ValueError:
        return False
    if algo != "pbkdf2_sha256":
        return False
    return hmac.compare_digest(hash_password(password, int(iterations), salt), stored)


class AuthService:
    def __init__(self, repo: UserRepo, settings: Settings):
        self.repo = repo
        self.settings = settings

    async def register(self, data: UserCreate) -> User:
        email = data.email.strip().lower()
        if await self.repo.get_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        record = UserRecord(
            id=new_user_id(),
            email=email,
            display_name=data.display_name,
            password_hash=hash_password(data.password, self.settings.password_hash_iterations),
            created_at=datetime.now(timezone.utc),
        )
        await self.repo.add(record)
        logger.info("auth.register", extra={"category": "auth", "event": "auth.register", "user_id": record.id})
        return User(**record.model_dump(exclude={"password_hash"}))

    async def login(self, data: LoginRequest) -> TokenResponse:
        record = await self.repo.get_by_email(data.email.strip().lower())
        if record is None or not verify_password(data.password, record.password_hash):
            logger.warning("auth.login.failed", extra={"category": "auth", "event": "auth.login.failed"})
            raise AuthenticationError()
        logger.info("auth.login", extra={"category": "auth", "event": "auth.login", "user_id": record.id})
        return TokenResponse(access_token=self.issue_token(record.id))

    async def get_user(self, user_id: str) -> User:
        record = await self.repo.get(user_id)
        if record is None:
            raise AuthenticationError("User not found.")
        return User(**record.model_dump(exclude={"password_hash"}))

    def issue_token(self, user_id: str, expires_delta: Optional[timedelta] = None) -> str:
        expire = datetime.now(timezone.utc) + (
            expires_delta or timedelta(minutes=self.settings.jwt_ttl_minutes)
        )
        return jwt.encode(
            {"sub": user_id, "exp": expire},
            self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
        )

    def decode_token(self, token: str) -> str:
        """Return the user id carried by a valid token."""
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret,
                algorithms=[self.settings.jwt_algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired.") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token.") from None

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token.")
        return user_id
