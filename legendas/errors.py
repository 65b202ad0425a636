"""
Exception taxonomy for the study subsystem.

An empty deck is not an error: get_due_cards returns an empty list.
"""

from __future__ import annotations


class LegendasError(Exception):
    """Base class for all study errors."""


class InvalidRating(LegendasError, ValueError):
    """A rating outside Again/Hard/Good/Easy (1-4). Indicates a caller bug."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid rating: {value!r}. Must be 1, 2, 3 or 4.")


class AuthenticationRequired(LegendasError):
    """The operation needs an authenticated user."""

    def __init__(self, operation: str = "this operation"):
        self.operation = operation
        super().__init__(f"User must be authenticated for {operation}")


class StoreUnavailable(LegendasError):
    """The backing store failed (connection, query or write error)."""


class SessionNotFound(LegendasError, LookupError):
    """A study session id that the store does not know."""

    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"Study session not found: {session_id}")
