"""
Study - due-card decks, rating persistence and study sessions.
"""

from legendas.study.auth import GUEST, AuthContext, StaticAuthContext, auth_for_user
from legendas.study.service import StudyService, deck_session_type
from legendas.study.store import InMemoryStudyStore, StudyStore
from legendas.study.types import (
    CardProgress,
    CardStudy,
    Phrase,
    StudyCard,
    StudySession,
    StudyStats,
)

__all__ = [
    "GUEST",
    "AuthContext",
    "StaticAuthContext",
    "auth_for_user",
    "StudyService",
    "deck_session_type",
    "InMemoryStudyStore",
    "StudyStore",
    "CardProgress",
    "CardStudy",
    "Phrase",
    "StudyCard",
    "StudySession",
    "StudyStats",
]
