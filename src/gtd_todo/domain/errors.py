from __future__ import annotations

from typing import Iterable


class TodoAppError(Exception):
    """Base for errors the caller can fix by changing its request."""


class InvalidReorderRequestError(TodoAppError):
    pass


class TaskNotFoundError(TodoAppError):
    def __init__(self, task_id: str):
        super().__init__(f"Task with ID '{task_id}' not found.")
        self.task_id = task_id


class TasksNotFoundError(TodoAppError):
    def __init__(self, missing_ids: Iterable[str]):
        self.missing_ids = list(missing_ids)
        super().__init__(f"Tasks not found: {', '.join(self.missing_ids)}")


class TaskOwnershipError(TodoAppError):
    # Deliberately does not say which task failed the check.
    def __init__(self):
        super().__init__("One or more tasks do not belong to the authenticated user.")


class SystemListMismatchError(TodoAppError):
    def __init__(self, system_list: str):
        super().__init__(f"One or more tasks do not belong to the {system_list} system list.")
        self.system_list = system_list


class EmailAlreadyRegisteredError(TodoAppError):
    def __init__(self, email: str):
        super().__init__(f"A user with email '{email}' already exists.")
        self.email = email


class AuthenticationError(TodoAppError):
    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message)
