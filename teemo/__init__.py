"""
TEEMO - Personal Task Manager
=============================

Accounts, password recovery and per-user task lists, persisted to a
single local JSON document.

Usage:
    from teemo import RecordStore, TaskService

    service = TaskService(RecordStore(".teemo"))

    service.register("a@x.com", "password1", "password1")
    service.add_task("Buy milk", "", "2026-01-28T09:00")
    task = service.get_visible_tasks()[0]
    service.toggle_task(task.id)

    service.logout()
    service.forgot_password("a@x.com")   # code goes to the CodeSender
"""

from .schema import (
    Screen,
    Session,
    Store,
    Task,
    User
)

from .errors import (
    TeemoError,
    NavigationError,
    NotAuthenticatedError,
    UnknownUserError
)

from .validation import (
    Email,
    Match,
    MaxLength,
    MinLength,
    Required,
    ValidationResult,
    validate
)

from .store import RecordStore
from .navigation import Navigator
from .session import TaskService

__version__ = "1.0.0"
__all__ = [
    "TaskService",
    "RecordStore",
    "Navigator",
    "Screen",
    "Session",
    "Store",
    "Task",
    "User",
    "TeemoError",
    "NavigationError",
    "NotAuthenticatedError",
    "UnknownUserError",
    "Email",
    "Match",
    "MaxLength",
    "MinLength",
    "Required",
    "ValidationResult",
    "validate"
]
