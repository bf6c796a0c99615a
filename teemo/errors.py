"""
TEEMO - Exceptions
==================
Caller mistakes only. Anything the user should see (bad input, taken
email, wrong code) is reported through Session.error instead.
"""


class TeemoError(Exception):
    """Base class for TEEMO exceptions"""


class NotAuthenticatedError(TeemoError):
    """Operation needs a logged-in user"""


class NavigationError(TeemoError):
    """Screen change not allowed from the current state"""


class UnknownUserError(TeemoError):
    """Record refers to a user id that does not exist"""
