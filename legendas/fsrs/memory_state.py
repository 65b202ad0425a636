"""
Memory State - Scheduling State and Retrievability

Defines the scheduling fields of a card and derived quantities.

Key concepts:
- Stability (S): Days until recall probability decays to 90%
- Difficulty (D): How hard the card is to learn (1-10 scale)
- Retrievability (R): Probability of successful recall at time t
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from legendas.fsrs.constants import CardState, DECAY, FACTOR


@dataclass(frozen=True)
class MemoryState:
    """
    Scheduling state of one card (phrase x direction) for one user.

    A fresh card has state NEW, zero counters and zero stability/difficulty;
    the first rating initializes stability and difficulty from the weights.
    """
    due: datetime
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: CardState = CardState.NEW
    last_review: Optional[datetime] = None

    @property
    def is_new(self) -> bool:
        return self.state == CardState.NEW

    def with_changes(self, **changes) -> "MemoryState":
        return replace(self, **changes)


def initialize_new_card(now: Optional[datetime] = None) -> MemoryState:
    """
    Initialize state for a card that has never been reviewed.

    The card is due immediately.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    return MemoryState(due=now)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (e.g. from SQLite) as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def forgetting_curve(elapsed_days: float, stability: float) -> float:
    """
    Power forgetting curve.

    Formula: R = (1 + FACTOR * t / S) ^ DECAY

    With FACTOR = 19/81 and DECAY = -0.5, R equals 0.9 exactly when t == S.
    """
    if elapsed_days <= 0 or stability <= 0:
        return 1.0
    return (1 + FACTOR * elapsed_days / stability) ** DECAY


def get_elapsed_days(last_review: Optional[datetime], now: datetime) -> int:
    """
    Whole days between the last review and now (0 if never reviewed).
    """
    if last_review is None:
        return 0
    delta = ensure_aware(now) - ensure_aware(last_review)
    return max(0, delta.days)


def calculate_retrievability(state: MemoryState, now: Optional[datetime] = None) -> float:
    """
    Current recall probability of a card.

    New cards have no memory yet and report 0.
    """
    if state.state == CardState.NEW or state.last_review is None:
        return 0.0
    if now is None:
        now = datetime.now(timezone.utc)
    elapsed = (ensure_aware(now) - ensure_aware(state.last_review)).total_seconds() / 86400.0
    return forgetting_curve(elapsed, state.stability)
