#!/usr/bin/env python3
"""
TEEMO - CLI Interface
=====================
Console front end for the task manager.

Usage:
    teemo shell                 Interactive session (login, tasks, profile...)
    teemo status                Show user and task counts
    teemo status --json         Dump the store (passwords redacted)
"""

import argparse
import json
import logging
import shlex
import sys
from typing import Callable, List, Optional, TextIO

from .config import get_settings
from .errors import TeemoError
from .schema import Screen
from .session import DELETE_PROMPT, TaskService, log_recovery_code
from .store import RecordStore

logger = logging.getLogger("teemo.cli")


SCREEN_TITLES = {
    Screen.LOGIN: "TEEMO Login",
    Screen.REGISTER: "Create Account",
    Screen.FORGOT_PASSWORD: "Forgot Password",
    Screen.VERIFY_CODE: "Verify Code",
    Screen.RESET_PASSWORD: "Reset Password",
    Screen.PROFILE: "Profile",
    Screen.LIST: "TEEMO Tasks",
    Screen.NEW: "New Task",
}

SCREEN_COMMANDS = {
    Screen.LOGIN: ["login EMAIL PASSWORD", "open register", "open forgotPassword"],
    Screen.REGISTER: ["register EMAIL PASSWORD CONFIRM", "back"],
    Screen.FORGOT_PASSWORD: ["forgot EMAIL", "back"],
    Screen.VERIFY_CODE: ["verify CODE", "resend", "back"],
    Screen.RESET_PASSWORD: ["reset PASSWORD CONFIRM"],
    Screen.LIST: [
        "search [KEYWORD]", "toggle ID", "delete ID",
        "open new", "open profile", "logout",
    ],
    Screen.PROFILE: ["update EMAIL [PASSWORD]", "back"],
    Screen.NEW: ["add TITLE [CONTENT] [DUE]", "back"],
}

BACK_TARGETS = {
    Screen.REGISTER: Screen.LOGIN,
    Screen.FORGOT_PASSWORD: Screen.LOGIN,
    Screen.VERIFY_CODE: Screen.FORGOT_PASSWORD,
    Screen.PROFILE: Screen.LIST,
    Screen.NEW: Screen.LIST,
}


class UsageError(Exception):
    pass


class ConsoleUI:
    """
    Line-oriented UI over a TaskService.

    Renders the current screen, reads one command per line and maps it
    to a service operation. Only the commands listed for the current
    screen are accepted.
    """

    def __init__(
        self,
        store: RecordStore,
        out: Optional[TextIO] = None,
        read_line: Callable[[str], str] = input
    ):
        self.out = out or sys.stdout
        self.read_line = read_line
        self.service = TaskService(
            store,
            send_code=self.show_recovery_code,
            confirm_delete=self.confirm_delete
        )

    def say(self, text: str = "") -> None:
        print(text, file=self.out)

    # ========================================
    # COLLABORATORS
    # ========================================

    def show_recovery_code(self, email: str, code: str) -> None:
        # Stand-in for sending an email
        log_recovery_code(email, code)
        self.say(f"📧 Your recovery code is: {code}")

    def confirm_delete(self) -> bool:
        answer = self.read_line(f"{DELETE_PROMPT} [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    # ========================================
    # RENDERING
    # ========================================

    def render(self) -> None:
        session = self.service.session
        screen = session.screen

        self.say("")
        self.say(f"== {SCREEN_TITLES[screen]} ==")
        if session.error:
            self.say(f"❌ {session.error}")
        if session.success:
            self.say(f"✅ {session.success}")

        if screen == Screen.LIST:
            self._render_tasks()
        elif screen == Screen.PROFILE and session.current_user:
            self.say(f"Email: {session.current_user.email}")
            self.say("Password: ******")

        self.say("Commands: " + " | ".join(SCREEN_COMMANDS[screen] + ["quit"]))

    def _render_tasks(self) -> None:
        keyword = self.service.session.search_keyword
        if keyword:
            self.say(f"Search: {keyword}")

        tasks = self.service.get_visible_tasks()
        if not tasks:
            self.say("No matching tasks found" if keyword else "No tasks yet...")
            return

        for task in tasks:
            mark = "✅" if task.completed else "⬜"
            due = f" (due {task.completion_time})" if task.completion_time else ""
            self.say(f"  {mark} [{task.id}] {task.title}{due}")
            if task.content:
                self.say(f"        {task.content}")

    # ========================================
    # COMMAND LOOP
    # ========================================

    def handle(self, line: str) -> bool:
        """Run one command line; returns False when the user quits"""
        try:
            words = shlex.split(line)
        except ValueError as e:
            self.say(f"❌ {e}")
            return True
        if not words:
            return True

        command, args = words[0].lower(), words[1:]
        if command in ("quit", "exit"):
            return False
        if command == "help":
            return True

        screen = self.service.screen
        available = {usage.split()[0] for usage in SCREEN_COMMANDS[screen]}
        if command not in available:
            self.say(f"'{command}' is not available on the {screen.value} screen")
            return True

        try:
            getattr(self, f"_cmd_{command}")(args)
        except UsageError as e:
            self.say(f"Usage: {e}")
        except TeemoError as e:
            logger.debug(f"Command {command!r} rejected: {e}")
            self.say(f"❌ {e}")
        return True

    def run(self) -> None:
        self.render()
        while True:
            try:
                line = self.read_line(f"[{self.service.screen.value}]> ")
            except EOFError:
                break
            if not self.handle(line):
                break
            self.render()

    # ========================================
    # COMMANDS
    # ========================================

    @staticmethod
    def _expect(args: List[str], low: int, high: int, usage: str) -> List[str]:
        if not low <= len(args) <= high:
            raise UsageError(usage)
        return args + [""] * (high - len(args))

    @staticmethod
    def _task_id(args: List[str], usage: str) -> int:
        if len(args) != 1:
            raise UsageError(usage)
        try:
            return int(args[0])
        except ValueError:
            raise UsageError(usage) from None

    def _cmd_open(self, args: List[str]) -> None:
        (target,) = self._expect(args, 1, 1, "open SCREEN")
        self.service.navigate(target)

    def _cmd_back(self, args: List[str]) -> None:
        self.service.navigate(BACK_TARGETS[self.service.screen])

    def _cmd_login(self, args: List[str]) -> None:
        email, password = self._expect(args, 0, 2, "login EMAIL PASSWORD")
        self.service.login(email, password)

    def _cmd_register(self, args: List[str]) -> None:
        email, password, confirm = self._expect(args, 0, 3, "register EMAIL PASSWORD CONFIRM")
        self.service.register(email, password, confirm)

    def _cmd_forgot(self, args: List[str]) -> None:
        (email,) = self._expect(args, 0, 1, "forgot EMAIL")
        self.service.forgot_password(email)

    def _cmd_verify(self, args: List[str]) -> None:
        (code,) = self._expect(args, 0, 1, "verify CODE")
        self.service.verify_code(code)

    def _cmd_resend(self, args: List[str]) -> None:
        self.service.resend_code()

    def _cmd_reset(self, args: List[str]) -> None:
        password, confirm = self._expect(args, 0, 2, "reset PASSWORD CONFIRM")
        self.service.reset_password(password, confirm)

    def _cmd_update(self, args: List[str]) -> None:
        email, password = self._expect(args, 0, 2, "update EMAIL [PASSWORD]")
        self.service.update_profile(email, password)

    def _cmd_add(self, args: List[str]) -> None:
        title, content, due = self._expect(args, 0, 3, "add TITLE [CONTENT] [DUE]")
        task = self.service.add_task(title, content, due)
        if task:
            self.say(f"📝 Added: {task.title}")

    def _cmd_toggle(self, args: List[str]) -> None:
        self.service.toggle_task(self._task_id(args, "toggle ID"))

    def _cmd_delete(self, args: List[str]) -> None:
        task_id = self._task_id(args, "delete ID")
        if self.service.delete_task(task_id):
            self.say(f"🗑️ Deleted task {task_id}")

    def _cmd_search(self, args: List[str]) -> None:
        self.service.search(" ".join(args))

    def _cmd_logout(self, args: List[str]) -> None:
        self.service.logout()


def status_report(store: RecordStore, as_json: bool = False) -> str:
    db = store.snapshot()

    if as_json:
        data = db.model_dump(mode="json", by_alias=True)
        for user in data["users"]:
            user["password"] = "***"
        return json.dumps(data, indent=2)

    lines = [
        f"📋 {store.path}",
        f"Users: {len(db.users)} | Tasks: {len(db.tasks)} | Version: {db.version}",
    ]
    for user in db.users:
        tasks = [t for t in db.tasks if t.user_id == user.id]
        done = sum(1 for t in tasks if t.completed)
        lines.append(f"  [{user.id}] {user.email}: {done}/{len(tasks)} done")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="teemo",
        description="TEEMO - personal task manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  teemo shell                     Start an interactive session
  teemo shell --dir ~/.teemo      Use another data directory
  teemo status                    Show user and task counts
  teemo status --json             Dump the store as JSON
        """
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # SHELL command
    shell_parser = subparsers.add_parser("shell", help="Start an interactive session")
    shell_parser.add_argument("--dir", default=settings.data_dir, help="Data directory")

    # STATUS command
    status_parser = subparsers.add_parser("status", help="Show store contents")
    status_parser.add_argument("--dir", default=settings.data_dir, help="Data directory")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    store = RecordStore(data_dir=args.dir, key=settings.store_key)
    try:
        if args.command == "shell":
            ConsoleUI(store).run()
        elif args.command == "status":
            print(status_report(store, as_json=args.json))
    finally:
        store.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
