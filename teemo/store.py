"""
TEEMO - Record Store
====================
Handles persistence of users and tasks.
One JSON document per store key is the single source of truth; it is
read once at startup and rewritten after every mutation.
"""

import json
import os
import logging
from pathlib import Path
from typing import Optional, List

from .errors import UnknownUserError
from .schema import Store, Task, User, utc_now_iso

logger = logging.getLogger("teemo.store")


class RecordStore:
    """
    Durable store for the users/tasks aggregate

    Storage: {data_dir}/{key}.json

    Every public method is atomic per call: mutations are written to disk
    before the method returns. Records handed out are copies, so the only
    way to change the collections is through the methods below.
    Not-found and not-owned cases are silent no-ops.
    """

    def __init__(self, data_dir: str = ".teemo", key: str = "teemo_db"):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.key = key
        self._dirty = False
        self._db = self.load()

    # ========================================
    # PERSISTENCE OPERATIONS
    # ========================================

    @property
    def path(self) -> Path:
        return self.data_dir / f"{self.key}.json"

    def load(self) -> Store:
        """Read the aggregate, falling back to an empty one"""
        if not self.path.exists():
            logger.info(f"No store at {self.path}, starting empty")
            return Store()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                db = Store.model_validate(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable store {self.path}, starting empty: {e}")
            return Store()

        logger.info(f"📂 Loaded store: {len(db.users)} users, {len(db.tasks)} tasks (v{db.version})")
        return db

    def save(self) -> None:
        """Persist the aggregate after a mutation"""
        self._db.version += 1
        self._dirty = True
        self.flush()
        self._dirty = False
        logger.info(f"✅ Saved store v{self._db.version}")

    def flush(self) -> None:
        """Write the aggregate to disk via a temp file and atomic rename"""
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._db.model_dump(mode="json", by_alias=True), f, indent=2)
        os.replace(tmp_path, self.path)

    def close(self) -> None:
        """Write out any unsaved changes; an untouched file is left alone"""
        if self._dirty:
            self.flush()
        logger.debug(f"Closed store {self.path}")

    def snapshot(self) -> Store:
        """Deep copy of the whole aggregate for read-only reporting"""
        return self._db.model_copy(deep=True)

    # ========================================
    # USER OPERATIONS
    # ========================================

    def get_user(self, user_id: int) -> Optional[User]:
        user = self._find_user(user_id)
        return user.model_copy() if user else None

    def find_user_by_credentials(self, email: str, password: str) -> Optional[User]:
        for user in self._db.users:
            if user.email == email and user.password == password:
                return user.model_copy()
        return None

    def find_user_by_email(self, email: str, exclude_id: Optional[int] = None) -> Optional[User]:
        """Exact (case-sensitive) email lookup, optionally ignoring one user"""
        for user in self._db.users:
            if user.email == email and user.id != exclude_id:
                return user.model_copy()
        return None

    def create_user(self, email: str, password: str) -> User:
        """Append a user; caller has already validated and checked uniqueness"""
        user = User(id=self._db.next_user_id, email=email, password=password, created_at=utc_now_iso())
        self._db.users.append(user)
        self._db.next_user_id += 1
        self.save()

        logger.info(f"👤 Created user {user.id}")
        return user.model_copy()

    def update_user(
        self,
        user_id: int,
        email: Optional[str] = None,
        password: Optional[str] = None
    ) -> Optional[User]:
        """Patch email and/or password; an empty password keeps the current one"""
        user = self._find_user(user_id)
        if not user:
            logger.debug(f"update_user: no user {user_id}")
            return None

        if email is not None:
            user.email = email
        if password:
            user.password = password
        self.save()
        return user.model_copy()

    def update_password_by_email(self, email: str, password: str) -> Optional[User]:
        """Set a new password for the account owning `email` (recovery flow)"""
        for user in self._db.users:
            if user.email == email:
                return self.update_user(user.id, password=password)
        logger.debug("update_password_by_email: no matching user")
        return None

    # ========================================
    # TASK OPERATIONS
    # ========================================

    def list_tasks_for_user(self, user_id: int) -> List[Task]:
        return [t.model_copy() for t in self._db.tasks if t.user_id == user_id]

    def create_task(
        self,
        user_id: int,
        title: str,
        content: Optional[str] = None,
        completion_time: Optional[str] = None
    ) -> Task:
        if not self._find_user(user_id):
            raise UnknownUserError(f"Cannot create task for unknown user {user_id}")

        task = Task(
            id=self._db.next_task_id,
            user_id=user_id,
            title=title,
            content=content,
            completion_time=completion_time,
            completed=False,
            created_at=utc_now_iso()
        )
        self._db.tasks.append(task)
        self._db.next_task_id += 1
        self.save()

        logger.info(f"📝 Created task {task.id} for user {user_id}")
        return task.model_copy()

    def toggle_task_completion(self, task_id: int, user_id: int) -> Optional[Task]:
        """Flip `completed` on a task owned by `user_id`"""
        task = self._find_task(task_id, user_id)
        if not task:
            logger.debug(f"toggle: task {task_id} not found for user {user_id}")
            return None

        task.completed = not task.completed
        self.save()
        return task.model_copy()

    def delete_task(self, task_id: int, user_id: int) -> bool:
        """Remove a task owned by `user_id`; returns whether anything was removed"""
        task = self._find_task(task_id, user_id)
        if not task:
            logger.debug(f"delete: task {task_id} not found for user {user_id}")
            return False

        self._db.tasks.remove(task)
        self.save()
        logger.info(f"🗑️ Deleted task {task_id}")
        return True

    # ========================================
    # HELPER METHODS
    # ========================================

    def _find_user(self, user_id: int) -> Optional[User]:
        for user in self._db.users:
            if user.id == user_id:
                return user
        return None

    def _find_task(self, task_id: int, user_id: int) -> Optional[Task]:
        for task in self._db.tasks:
            if task.id == task_id and task.user_id == user_id:
                return task
        return None
