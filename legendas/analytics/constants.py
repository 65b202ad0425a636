"""
Constants for analytics dashboards.
"""

from __future__ import annotations

from typing import Final

from legendas.fsrs.constants import CardState, StudyDirection


# Display order of card states (least to most advanced)
STATE_ORDER: Final[list[CardState]] = [
    CardState.NEW,
    CardState.LEARNING,
    CardState.RELEARNING,
    CardState.REVIEW,
]

STATE_LABELS: Final[dict[CardState, str]] = {
    CardState.NEW: "New",
    CardState.LEARNING: "Learning",
    CardState.RELEARNING: "Relearning",
    CardState.REVIEW: "Review",
}

DIRECTION_LABELS: Final[dict[StudyDirection, str]] = {
    StudyDirection.RECOGNIZE: "Portuguese → English",
    StudyDirection.PRODUCE: "English → Portuguese",
}

# Upper bound on phrases loaded per scope when counting learned cards
SCOPE_PHRASE_LIMIT: Final[int] = 5000

SESSION_COLUMNS: Final[list[str]] = [
    "session_id",
    "scope_id",
    "created_at",
    "completed",
    "cards_studied",
    "cards_correct",
    "duration_seconds",
    "day_utc",
]
