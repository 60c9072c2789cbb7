"""Tests for registration, login and bearer tokens."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from gtd_todo.config import Settings
from gtd_todo.domain.errors import AuthenticationError, EmailAlreadyRegisteredError
from gtd_todo.domain.user_models import LoginRequest, UserCreate
from gtd_todo.infra.db.user_repo_memory import InMemoryUserRepo
from gtd_todo.services.auth_service import AuthService, hash_password, verify_password


@pytest.fixture
def settings() -> Settings:
    return Settings(storage="memory", log_dir=None, jwt_secret="test-secret", password_hash_iterations=1000)


@pytest.fixture
def svc(settings: Settings) -> AuthService:
    return AuthService(InMemoryUserRepo(), settings)


def _signup(email: str = "Ada@Example.com") -> UserCreate:
    return UserCreate(email=email, password="correct horse", display_name="Ada")


class TestPasswordHashing:
    def test_roundtrip(self) -> None:
        stored = hash_password("s3cret-pass", 1000)
        assert stored.startswith("pbkdf2_sha256$1000$")
        assert verify_password("s3cret-pass", stored)
        assert not verify_password("wrong-pass", stored)

    def test_salted(self) -> None:
        assert hash_password("same", 1000) != hash_password("same", 1000)

    def test_garbage_hash_never_verifies(self) -> None:
        assert not verify_password("x", "not-a-hash")
        assert not verify_password("x", "md5$1$salt$abc")


@pytest.mark.anyio
class TestAuthService:
    async def test_register_normalizes_email(self, svc: AuthService) -> None:
        user = await svc.register(_signup())
        assert user.email == "ada@example.com"
        assert user.display_name == "Ada"
        assert not hasattr(user, "password_hash")

    async def test_duplicate_email_rejected(self, svc: AuthService) -> None:
        await svc.register(_signup())
        with pytest.raises(EmailAlreadyRegisteredError):
            await svc.register(_signup("ada@example.com"))

    async def test_login_issues_token_for_user(self, svc: AuthService) -> None:
        user = await svc.register(_signup())
        token = await svc.login(LoginRequest(email="ADA@example.com", password="correct horse"))

        assert token.token_type == "bearer"
        assert svc.decode_token(token.access_token) == user.id

    async def test_login_wrong_password(self, svc: AuthService) -> None:
        await svc.register(_signup())
        with pytest.raises(AuthenticationError):
            await svc.login(LoginRequest(email="ada@example.com", password="nope"))

    async def test_login_unknown_email(self, svc: AuthService) -> None:
        with pytest.raises(AuthenticationError):
            await svc.login(LoginRequest(email="ghost@example.com", password="whatever1"))


class TestTokens:
    def test_expired_token_rejected(self, svc: AuthService) -> None:
        token = svc.issue_token("u1", expires_delta=timedelta(seconds=-5))
        with pytest.raises(AuthenticationError, match="expired"):
            svc.decode_token(token)

    def test_wrong_secret_rejected(self, svc: AuthService) -> None:
        forged = jwt.encode({"sub": "u1"}, "other-secret", algorithm="HS256")
        with pytest.raises(AuthenticationError):
            svc.decode_token(forged)

    def test_token_without_subject_rejected(self, svc: AuthService, settings: Settings) -> None:
        token = jwt.encode({"foo": "bar"}, settings.jwt_secret, algorithm="HS256")
        with pytest.raises(AuthenticationError):
            svc.decode_token(token)
