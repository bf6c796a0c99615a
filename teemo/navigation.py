"""
TEEMO - Navigation
==================
Screen state machine.

Two kinds of transition:
- go(): a UI event (a "back" or "open" button), limited to UI_TRANSITIONS
- enter(): the outcome of a service operation (login -> list, ...)

Both enforce the session guards: profile/list/new need a logged-in
user, verifyCode needs a recovery code in flight, and resetPassword
also needs that code to have been verified.
"""

import logging
from typing import Dict, FrozenSet, Union

from .errors import NavigationError
from .schema import Screen, Session

logger = logging.getLogger("teemo.navigation")


UI_TRANSITIONS: Dict[Screen, FrozenSet[Screen]] = {
    Screen.LOGIN: frozenset({Screen.REGISTER, Screen.FORGOT_PASSWORD}),
    Screen.REGISTER: frozenset({Screen.LOGIN}),
    Screen.FORGOT_PASSWORD: frozenset({Screen.LOGIN}),
    Screen.VERIFY_CODE: frozenset({Screen.FORGOT_PASSWORD}),
    Screen.RESET_PASSWORD: frozenset(),
    Screen.LIST: frozenset({Screen.PROFILE, Screen.NEW}),
    Screen.PROFILE: frozenset({Screen.LIST}),
    Screen.NEW: frozenset({Screen.LIST}),
}

AUTHENTICATED_SCREENS = frozenset({Screen.PROFILE, Screen.LIST, Screen.NEW})
RECOVERY_SCREENS = frozenset({Screen.VERIFY_CODE, Screen.RESET_PASSWORD})


def as_screen(value: Union[Screen, str]) -> Screen:
    try:
        return Screen(value)
    except ValueError:
        raise NavigationError(f"Unknown screen: {value!r}") from None


class Navigator:
    def __init__(self, session: Session):
        self.session = session

    @property
    def screen(self) -> Screen:
        return self.session.screen

    def guard_error(self, target: Screen) -> str:
        """Why `target` cannot be entered right now ("" if it can)"""
        if target in AUTHENTICATED_SCREENS and not self.session.logged_in:
            return f"{target.value} requires a logged-in user"
        if target in RECOVERY_SCREENS and not self.session.recovery_code:
            return f"{target.value} requires a pending recovery code"
        if target == Screen.RESET_PASSWORD and not self.session.code_verified:
            return f"{target.value} requires a verified recovery code"
        return ""

    def can_go(self, target: Union[Screen, str]) -> bool:
        target = as_screen(target)
        return target in UI_TRANSITIONS[self.screen] and not self.guard_error(target)

    def go(self, target: Union[Screen, str]) -> Screen:
        """Follow a UI transition from the current screen"""
        target = as_screen(target)
        if target not in UI_TRANSITIONS[self.screen]:
            raise NavigationError(f"Cannot go from {self.screen.value} to {target.value}")
        return self.enter(target)

    def enter(self, target: Union[Screen, str]) -> Screen:
        """Switch screens after a service operation; re-entering the same screen is allowed"""
        target = as_screen(target)
        reason = self.guard_error(target)
        if reason:
            raise NavigationError(reason)

        if target != self.screen:
            logger.debug(f"Screen {self.screen.value} -> {target.value}")
        self.session.screen = target
        return target
