# tests/test_navigation.py

from __future__ import annotations

import pytest

from teemo.errors import NavigationError
from teemo.navigation import Navigator
from teemo.schema import Screen, Session, User


def _logged_in_session(screen: Screen = Screen.LIST) -> Session:
    return Session(current_user=User(id=1, email="a@x.com", password="password1"), screen=screen)


def test_starts_on_login() -> None:
    assert Navigator(Session()).screen == Screen.LOGIN


def test_ui_transitions_from_login() -> None:
    nav = Navigator(Session())
    assert nav.go("register") == Screen.REGISTER
    assert nav.go(Screen.LOGIN) == Screen.LOGIN
    assert nav.go("forgotPassword") == Screen.FORGOT_PASSWORD


def test_ui_cannot_skip_to_unlisted_screen() -> None:
    nav = Navigator(Session())
    with pytest.raises(NavigationError):
        nav.go(Screen.RESET_PASSWORD)
    assert nav.screen == Screen.LOGIN


def test_authenticated_screens_need_a_user() -> None:
    nav = Navigator(Session())
    for screen in (Screen.LIST, Screen.PROFILE, Screen.NEW):
        with pytest.raises(NavigationError):
            nav.enter(screen)
    assert nav.screen == Screen.LOGIN


def test_logged_in_user_moves_between_list_profile_new() -> None:
    nav = Navigator(_logged_in_session())
    assert nav.go("profile") == Screen.PROFILE
    assert nav.go("list") == Screen.LIST
    assert nav.go("new") == Screen.NEW
    assert not nav.can_go("profile")


def test_recovery_screens_need_a_pending_code() -> None:
    session = Session(screen=Screen.FORGOT_PASSWORD)
    nav = Navigator(session)
    with pytest.raises(NavigationError):
        nav.enter(Screen.VERIFY_CODE)

    session.recovery_code = "1234"
    session.recovery_email = "a@x.com"
    assert nav.enter(Screen.VERIFY_CODE) == Screen.VERIFY_CODE
    # resend re-enters the same screen
    assert nav.enter(Screen.VERIFY_CODE) == Screen.VERIFY_CODE
    with pytest.raises(NavigationError):
        nav.enter(Screen.RESET_PASSWORD)

    session.code_verified = True
    assert nav.enter(Screen.RESET_PASSWORD) == Screen.RESET_PASSWORD


def test_reset_screen_has_no_ui_exit() -> None:
    session = Session(
        screen=Screen.RESET_PASSWORD, recovery_code="1234", recovery_email="a@x.com", code_verified=True
    )
    nav = Navigator(session)
    assert not nav.can_go(Screen.LOGIN)
    with pytest.raises(NavigationError):
        nav.go(Screen.LOGIN)


def test_unknown_screen_name() -> None:
    with pytest.raises(NavigationError):
        Navigator(Session()).go("dashboard")
