"""
Records exchanged between the study service, its store and the game.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal, Optional

from legendas.fsrs.constants import CardState, Rating, StudyDirection
from legendas.fsrs.memory_state import MemoryState, ensure_aware


SessionType = Literal["new", "review", "mixed"]


@dataclass(frozen=True)
class Phrase:
    """
    A learnable phrase extracted from an episode's subtitles.

    Read-only for the study subsystem. scope_id is the episode the
    phrase's extraction belongs to.
    """
    id: str
    scope_id: str
    phrase: str
    translation: str
    context: Optional[str] = None
    extraction_id: Optional[str] = None
    confidence_score: Optional[float] = None
    position_in_content: Optional[int] = None


@dataclass(frozen=True)
class CardStudy:
    """
    Persisted spaced-repetition state for one (user, phrase, direction).

    id is None for a card that has no row yet (an implicit New card).
    """
    user_id: str
    phrase_id: str
    direction: StudyDirection
    due_date: Optional[datetime]
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = 0
    scheduled_days: int = 0
    reps: int = 0
    lapses: int = 0
    state: CardState = CardState.NEW
    last_review: Optional[datetime] = None
    last_rating: Optional[Rating] = None
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple[str, str, StudyDirection]:
        return (self.user_id, self.phrase_id, self.direction)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def memory_state(self, now: datetime) -> MemoryState:
        """Scheduling fields as the scheduler's input."""
        return MemoryState(
            due=ensure_aware(self.due_date) or now,
            stability=self.stability,
            difficulty=self.difficulty,
            elapsed_days=self.elapsed_days,
            scheduled_days=self.scheduled_days,
            reps=self.reps,
            lapses=self.lapses,
            state=self.state,
            last_review=ensure_aware(self.last_review),
        )

    @classmethod
    def from_memory_state(
        cls,
        user_id: str,
        phrase_id: str,
        direction: StudyDirection,
        state: MemoryState,
        rating: Rating,
        previous: Optional["CardStudy"] = None,
    ) -> "CardStudy":
        return cls(
            user_id=user_id,
            phrase_id=phrase_id,
            direction=direction,
            due_date=state.due,
            stability=state.stability,
            difficulty=state.difficulty,
            elapsed_days=state.elapsed_days,
            scheduled_days=state.scheduled_days,
            reps=state.reps,
            lapses=state.lapses,
            state=state.state,
            last_review=state.last_review,
            last_rating=rating,
            id=previous.id if previous else None,
            created_at=previous.created_at if previous else None,
        )


@dataclass(frozen=True)
class StudyCard:
    """
    A phrase ready to be shown, joined with its scheduling state.

    Built fresh for every deck; never stored.
    """
    phrase: Phrase
    direction: StudyDirection
    card_study: Optional[CardStudy] = None
    is_new: bool = True
    is_due: bool = True

    @property
    def front(self) -> str:
        if self.direction == StudyDirection.PRODUCE:
            return self.phrase.translation
        return self.phrase.phrase

    @property
    def back(self) -> str:
        if self.direction == StudyDirection.PRODUCE:
            return self.phrase.phrase
        return self.phrase.translation

    @property
    def state(self) -> CardState:
        return self.card_study.state if self.card_study else CardState.NEW


@dataclass(frozen=True)
class StudySession:
    """
    One sitting of study for a user and scope.

    A session is mutated only by the game that created it; concurrent
    updates from several games (e.g. two browser tabs) would be
    last-write-wins.
    """
    id: str
    user_id: str
    scope_id: str
    direction: StudyDirection = StudyDirection.RECOGNIZE
    session_type: SessionType = "mixed"
    total_cards: int = 0
    cards_studied: int = 0
    cards_correct: int = 0
    session_duration_seconds: int = 0
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return self.completed_at is not None

    def with_changes(self, **changes) -> "StudySession":
        return replace(self, **changes)


SESSION_UPDATABLE_FIELDS = frozenset({
    "total_cards",
    "cards_studied",
    "cards_correct",
    "session_duration_seconds",
    "session_type",
    "completed_at",
})


@dataclass(frozen=True)
class StateCount:
    """One aggregate row: how many cards a user has in a state."""
    state: CardState
    count: int
    reps: int
    lapses: int


@dataclass(frozen=True)
class StudyStats:
    """Aggregate counts over a user's card studies."""
    total: int = 0
    new: int = 0
    learning: int = 0
    review: int = 0
    relearning: int = 0
    total_reviews: int = 0
    total_lapses: int = 0

    @classmethod
    def from_counts(cls, counts: list[StateCount]) -> "StudyStats":
        by_state = {c.state: c for c in counts}

        def _count(state: CardState) -> int:
            row = by_state.get(state)
            return row.count if row else 0

        return cls(
            total=sum(c.count for c in counts),
            new=_count(CardState.NEW),
            learning=_count(CardState.LEARNING),
            review=_count(CardState.REVIEW),
            relearning=_count(CardState.RELEARNING),
            total_reviews=sum(c.reps for c in counts),
            total_lapses=sum(c.lapses for c in counts),
        )


@dataclass(frozen=True)
class CardProgress:
    """Display progress of one phrase for one user and direction."""
    phrase_id: str
    state: CardState
    progress_percentage: float
    is_learned: bool
    card_study: Optional[CardStudy] = field(default=None, compare=False)
