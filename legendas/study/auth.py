"""
Authentication context consumed by the study service.

Sign-in itself happens elsewhere; the study subsystem only needs to know
whether there is a user and, if so, which one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


GUEST_USER_ID = "guest"


class AuthContext(Protocol):
    async def current_user_id(self) -> Optional[str]:
        """The authenticated user's id, or None for a guest."""
        ...


@dataclass(frozen=True)
class StaticAuthContext:
    """
    Auth context with a fixed identity (None means guest).
    """
    user_id: Optional[str] = None

    async def current_user_id(self) -> Optional[str]:
        return self.user_id

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


def auth_for_user(user_id: Optional[str]) -> StaticAuthContext:
    """Build an auth context; empty ids and the guest id map to a guest."""
    if not user_id or user_id == GUEST_USER_ID:
        return StaticAuthContext(None)
    return StaticAuthContext(user_id)


GUEST = StaticAuthContext(None)
