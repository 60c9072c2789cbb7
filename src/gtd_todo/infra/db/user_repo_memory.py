from __future__ import annotations
from typing import Dict, Optional

from gtd_todo.domain.user_models import UserRecord


class InMemoryUserRepo:
    def __init__(self):
        self._users: Dict[str, UserRecord] = {}

    async def add(self, user: UserRecord) -> UserRecord:
        self._users[user.id] = user
        return user

    async def get(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        email = email.lower()
        return next((u for u in self._users.values() if u.email == email), None)
