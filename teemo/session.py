"""
TEEMO - Session & Task Service
==============================
Everything a user can do: log in, register, recover a password, edit
the profile, and manage their tasks.

Each operation clears the previous error, validates its input, checks
it against the store, and only then mutates the store and/or session.
User-facing failures land in session.error (one message at a time) and
leave the screen unchanged; the return value says whether it worked.

Usage:
    store = RecordStore(".teemo")
    service = TaskService(store)

    service.register("a@x.com", "password1", "password1")
    service.add_task("Buy milk", "", "")
    for task in service.get_visible_tasks():
        print(task.title)
"""

import logging
import random
from typing import Callable, List, Optional, Union

from .errors import NavigationError, NotAuthenticatedError
from .navigation import Navigator
from .schema import Screen, Session, Task, User
from .store import RecordStore
from .validation import Email, Match, MaxLength, MinLength, Required, validate

logger = logging.getLogger("teemo.session")

# (email, code) -> delivers the recovery code out of band
CodeSender = Callable[[str, str], None]
# Asked before deleting a task; False aborts
Confirm = Callable[[], bool]

DELETE_PROMPT = "Are you sure you want to delete this task?"

LOGIN_RULES = {
    "email": [Required(), Email()],
    "password": [Required()],
}
REGISTER_RULES = {
    "email": [Required(), Email()],
    "password": [Required(), MinLength(8)],
    "password_confirmation": [Required(), Match("password")],
}
FORGOT_PASSWORD_RULES = {
    "email": [Required(), Email()],
}
RESET_PASSWORD_RULES = {
    "password": [Required(), MinLength(8)],
    "password_confirmation": [Required(), Match("password")],
}
# Password is optional here: empty keeps the current one
PROFILE_RULES = {
    "email": [Required(), Email()],
    "password": [MinLength(8)],
}
TASK_RULES = {
    "title": [Required(), MaxLength(50)],
}


def log_recovery_code(email: str, code: str) -> None:
    """Default delivery channel: the log"""
    logger.info(f"Recovery code for {email}: {code}")


class TaskService:
    """
    Session-scoped operations over a RecordStore

    The session is an explicit context object: pass one in to resume a
    UI's state, or let the service start a fresh logged-out one.
    """

    def __init__(
        self,
        store: RecordStore,
        session: Optional[Session] = None,
        send_code: CodeSender = log_recovery_code,
        confirm_delete: Optional[Confirm] = None,
        rng: Optional[random.Random] = None
    ):
        self.store = store
        self.session = session if session is not None else Session()
        self.nav = Navigator(self.session)
        self.send_code = send_code
        self.confirm_delete = confirm_delete
        self.rng = rng or random.Random()

    # ========================================
    # SESSION STATE
    # ========================================

    @property
    def screen(self) -> Screen:
        return self.session.screen

    @property
    def current_user(self) -> Optional[User]:
        return self.session.current_user

    @property
    def error(self) -> str:
        return self.session.error

    @property
    def success(self) -> str:
        return self.session.success

    def _fail(self, message: Optional[str]) -> bool:
        self.session.error = message or ""
        return False

    def _require_user(self) -> User:
        if not self.session.current_user:
            raise NotAuthenticatedError("No user is logged in")
        return self.session.current_user

    # ========================================
    # AUTHENTICATION
    # ========================================

    def login(self, email: str, password: str) -> bool:
        self.session.error = ""
        result = validate({"email": email, "password": password}, LOGIN_RULES)
        if not result.success:
            return self._fail(result.first_error)

        user = self.store.find_user_by_credentials(email, password)
        if not user:
            logger.warning(f"Failed login for {email}")
            return self._fail("Email or password incorrect")

        self.session.current_user = user
        self.nav.enter(Screen.LIST)
        logger.info(f"🔓 User {user.id} logged in")
        return True

    def register(self, email: str, password: str, password_confirm: str) -> bool:
        self.session.error = ""
        result = validate(
            {"email": email, "password": password, "password_confirmation": password_confirm},
            REGISTER_RULES
        )
        if not result.success:
            return self._fail(result.first_error)

        if self.store.find_user_by_email(email):
            return self._fail("This email is already in use")

        self.session.current_user = self.store.create_user(email, password)
        self.nav.enter(Screen.LIST)
        return True

    def logout(self) -> None:
        s = self.session
        if s.current_user:
            logger.info(f"🔒 User {s.current_user.id} logged out")
        s.current_user = None
        s.search_keyword = ""
        s.error = ""
        s.success = ""
        self.nav.enter(Screen.LOGIN)

    # ========================================
    # PASSWORD RECOVERY
    # ========================================

    def forgot_password(self, email: str) -> bool:
        """Issue a 4-digit recovery code for a registered email"""
        self.session.error = ""
        result = validate({"email": email}, FORGOT_PASSWORD_RULES)
        if not result.success:
            return self._fail(result.first_error)

        if not self.store.find_user_by_email(email):
            return self._fail("Email not found")

        code = str(self.rng.randint(1000, 9999))
        self.session.recovery_code = code
        self.session.recovery_email = email
        self.session.code_verified = False
        self.send_code(email, code)

        self.nav.enter(Screen.VERIFY_CODE)
        return True

    def resend_code(self) -> bool:
        """Replace the pending code with a fresh one for the same email"""
        if not self.session.recovery_email:
            raise NavigationError("No password recovery in progress")
        return self.forgot_password(self.session.recovery_email)

    def verify_code(self, code: str) -> bool:
        # Exact match: no trimming, no expiry, reusable until replaced
        self.session.error = ""
        if not self.session.recovery_code or code != self.session.recovery_code:
            return self._fail("Invalid code")

        self.session.code_verified = True
        self.nav.enter(Screen.RESET_PASSWORD)
        return True

    def reset_password(self, password: str, password_confirm: str) -> bool:
        s = self.session
        s.error = ""
        if not s.recovery_email or not s.code_verified:
            raise NavigationError("Recovery code has not been verified")

        result = validate(
            {"password": password, "password_confirmation": password_confirm},
            RESET_PASSWORD_RULES
        )
        if not result.success:
            return self._fail(result.first_error)

        self.store.update_password_by_email(s.recovery_email, password)
        logger.info("🔑 Password reset completed")

        s.success = "Password reset successfully. Please login."
        s.recovery_email = ""
        s.recovery_code = ""
        s.code_verified = False
        self.nav.enter(Screen.LOGIN)
        return True

    # ========================================
    # PROFILE
    # ========================================

    def update_profile(self, email: str, password: str = "") -> bool:
        """Change email and, if given, password; the screen is left alone"""
        user = self._require_user()
        self.session.error = ""
        self.session.success = ""
        result = validate({"email": email, "password": password}, PROFILE_RULES)
        if not result.success:
            return self._fail(result.first_error)

        if self.store.find_user_by_email(email, exclude_id=user.id):
            return self._fail("Email already in use")

        updated = self.store.update_user(user.id, email=email, password=password)
        if updated:
            self.session.current_user = updated
        self.session.success = "Profile updated successfully"
        return True

    # ========================================
    # TASKS
    # ========================================

    def add_task(
        self,
        title: str,
        content: Optional[str] = "",
        completion_time: Optional[str] = ""
    ) -> Optional[Task]:
        user = self._require_user()
        self.session.error = ""
        result = validate({"title": title}, TASK_RULES)
        if not result.success:
            self._fail(result.first_error)
            return None

        task = self.store.create_task(
            user.id,
            title,
            content=content or "",
            completion_time=completion_time or None
        )
        self.nav.enter(Screen.LIST)
        return task

    def toggle_task(self, task_id: int) -> Optional[Task]:
        user = self._require_user()
        self.session.error = ""
        return self.store.toggle_task_completion(task_id, user.id)

    def delete_task(self, task_id: int, confirm: Optional[Confirm] = None) -> bool:
        """Delete after confirmation; declining makes no store call at all"""
        user = self._require_user()
        self.session.error = ""
        confirm = confirm or self.confirm_delete
        if confirm is not None and not confirm():
            logger.debug(f"Deletion of task {task_id} cancelled")
            return False
        return self.store.delete_task(task_id, user.id)

    def search(self, keyword: str) -> None:
        self.session.error = ""
        self.session.search_keyword = keyword or ""

    def get_visible_tasks(self) -> List[Task]:
        """
        The current user's tasks, filtered by the search keyword
        (case-insensitive, title or content) and ordered by due time,
        or creation time when no due time is set.
        """
        user = self.session.current_user
        if not user:
            return []

        tasks = self.store.list_tasks_for_user(user.id)

        keyword = self.session.search_keyword.lower()
        if keyword:
            tasks = [
                t for t in tasks
                if keyword in t.title.lower() or keyword in (t.content or "").lower()
            ]

        # sorted() is stable: equal times keep insertion order
        return sorted(tasks, key=lambda t: t.sort_time)

    # ========================================
    # NAVIGATION
    # ========================================

    def navigate(self, screen: Union[Screen, str]) -> Screen:
        """UI-initiated screen change; clears any shown message"""
        target = self.nav.go(screen)
        self.session.error = ""
        self.session.success = ""
        return target
