"""
TEEMO - Record Schema
=====================
Users, tasks and the single persisted aggregate that holds them,
plus the transient session state the UI renders.

Persisted keys keep their camelCase names (userId, createdAt,
nextUserId...) so an existing teemo_db document loads unchanged.
"""

from enum import Enum
from typing import Optional, List
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a stored timestamp into an aware datetime.

    Date-times without an offset (what a datetime-local input produces)
    are read as local time; bare dates are read as UTC midnight.
    Returns None for empty or unparseable values.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        if "T" in value or " " in value:
            parsed = parsed.astimezone()
        else:
            parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Screen(str, Enum):
    """Navigation states"""
    LOGIN = "login"
    REGISTER = "register"
    FORGOT_PASSWORD = "forgotPassword"
    VERIFY_CODE = "verifyCode"       # Waiting for the recovery code
    RESET_PASSWORD = "resetPassword" # Code accepted, choosing a new password
    PROFILE = "profile"
    LIST = "list"
    NEW = "new"


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class User(Record):
    """Registered account"""
    id: int = Field(gt=0)
    email: str
    password: str                   # Stored in the clear
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")


class Task(Record):
    """Task owned by a single user"""
    id: int = Field(gt=0)
    user_id: int = Field(gt=0, alias="userId")
    title: str
    content: Optional[str] = None
    completion_time: Optional[str] = Field(default=None, alias="completionTime")
    completed: bool = False
    created_at: str = Field(default_factory=utc_now_iso, alias="createdAt")

    @property
    def sort_time(self) -> datetime:
        """Due time when set, creation time otherwise"""
        return (
            parse_timestamp(self.completion_time)
            or parse_timestamp(self.created_at)
            or datetime.min.replace(tzinfo=timezone.utc)
        )


class Store(Record):
    """The persisted aggregate - THE SINGLE SOURCE OF TRUTH"""
    users: List[User] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    next_user_id: int = Field(default=1, gt=0, alias="nextUserId")
    next_task_id: int = Field(default=1, gt=0, alias="nextTaskId")

    # Bumped on every save; hook for compare-and-swap persistence
    version: int = 0

    @model_validator(mode="after")
    def _counters_ahead_of_ids(self) -> "Store":
        # Counters must stay ahead of every stored id, even for hand-edited files
        if self.users:
            self.next_user_id = max(self.next_user_id, max(u.id for u in self.users) + 1)
        if self.tasks:
            self.next_task_id = max(self.next_task_id, max(t.id for t in self.tasks) + 1)
        return self


class Session(BaseModel):
    """Transient per-process state, never persisted"""
    current_user: Optional[User] = None
    screen: Screen = Screen.LOGIN
    search_keyword: str = ""
    error: str = ""
    success: str = ""

    # Password recovery flow
    recovery_email: str = ""
    recovery_code: str = ""
    code_verified: bool = False     # Set by a correct verify_code

    @property
    def logged_in(self) -> bool:
        return self.current_user is not None
