"""
Scheduler - FSRS Algorithm Logic

Pure spaced-repetition scheduling (no database calls, no randomness).

Main workflow:
1. Caller loads the card's MemoryState (or passes None for a fresh card)
2. Counters and elapsed days are advanced
3. Stability/difficulty are updated according to the current state
4. Due dates are assigned per rating
5. The new MemoryState is returned; persisting it is the caller's job

Lifecycle:
    NEW -> LEARNING (Again/Hard/Good) or REVIEW (Easy)
    LEARNING/RELEARNING -> REVIEW on Good/Easy, else unchanged
    REVIEW -> RELEARNING on Again (lapse), else REVIEW
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from legendas.fsrs import updates
from legendas.fsrs.constants import (
    DEFAULT_WEIGHTS,
    MAXIMUM_INTERVAL,
    NEW_AGAIN_STEP,
    NEW_GOOD_STEP,
    NEW_HARD_STEP,
    RELEARN_AGAIN_STEP,
    RELEARN_HARD_STEP,
    REQUEST_RETENTION,
    WEIGHT_COUNT,
    CardState,
    Rating,
)
from legendas.fsrs.memory_state import (
    MemoryState,
    ensure_aware,
    forgetting_curve,
    get_elapsed_days,
    initialize_new_card,
)


class Scheduler:
    """
    Deterministic FSRS-4.5 scheduler.

    Identical (state, rating, now) inputs always yield identical outputs;
    no interval fuzz is applied.
    """

    def __init__(
        self,
        weights: Optional[Sequence[float]] = None,
        request_retention: float = REQUEST_RETENTION,
        maximum_interval: int = MAXIMUM_INTERVAL,
    ):
        weights = tuple(DEFAULT_WEIGHTS if weights is None else weights)
        if len(weights) != WEIGHT_COUNT:
            raise ValueError(f"FSRS-4.5 requires {WEIGHT_COUNT} weights, got {len(weights)}")
        if not 0 < request_retention < 1:
            raise ValueError(f"request_retention must be in (0, 1), got {request_retention}")
        if maximum_interval < 1:
            raise ValueError(f"maximum_interval must be >= 1, got {maximum_interval}")

        self.w = weights
        self.request_retention = request_retention
        self.maximum_interval = maximum_interval

    def schedule(
        self,
        state: Optional[MemoryState],
        rating,
        now: Optional[datetime] = None,
    ) -> MemoryState:
        """
        Compute the next state of a card for one rating.

        Args:
            state: Current state, or None for a card never reviewed
            rating: Rating (or raw 1-4 value)
            now: Review timestamp (defaults to now, UTC)

        Returns:
            Complete replacement MemoryState

        Raises:
            InvalidRating: if rating is not 1-4
        """
        rating = Rating.parse(rating)
        return self.repeat(state, now)[rating]

    def repeat(
        self,
        state: Optional[MemoryState],
        now: Optional[datetime] = None,
    ) -> dict[Rating, MemoryState]:
        """
        Compute the next state of a card for every possible rating.
        """
        now = ensure_aware(now) if now is not None else datetime.now(timezone.utc)
        if state is None:
            state = initialize_new_card(now)

        elapsed_days = 0 if state.state == CardState.NEW else get_elapsed_days(state.last_review, now)
        base = state.with_changes(
            elapsed_days=elapsed_days,
            last_review=now,
            reps=state.reps + 1,
        )

        if state.state == CardState.NEW:
            return self._schedule_new(base, now)
        if state.state in (CardState.LEARNING, CardState.RELEARNING):
            return self._schedule_learning(base, now)
        return self._schedule_review(base, state, elapsed_days, now)

    def next_interval(self, stability: float) -> int:
        return updates.next_interval(stability, self.request_retention, self.maximum_interval)

    # ---- Per-state scheduling ----

    def _schedule_new(self, base: MemoryState, now: datetime) -> dict[Rating, MemoryState]:
        outcomes = {}
        for rating in Rating:
            outcomes[rating] = base.with_changes(
                stability=updates.init_stability(self.w, rating),
                difficulty=updates.init_difficulty(self.w, rating),
                state=CardState.REVIEW if rating == Rating.EASY else CardState.LEARNING,
            )

        easy_interval = self.next_interval(outcomes[Rating.EASY].stability)
        outcomes[Rating.AGAIN] = outcomes[Rating.AGAIN].with_changes(
            due=now + NEW_AGAIN_STEP, scheduled_days=0
        )
        outcomes[Rating.HARD] = outcomes[Rating.HARD].with_changes(
            due=now + NEW_HARD_STEP, scheduled_days=0
        )
        outcomes[Rating.GOOD] = outcomes[Rating.GOOD].with_changes(
            due=now + NEW_GOOD_STEP, scheduled_days=0
        )
        outcomes[Rating.EASY] = outcomes[Rating.EASY].with_changes(
            due=now + timedelta(days=easy_interval), scheduled_days=easy_interval
        )
        return outcomes

    def _schedule_learning(self, base: MemoryState, now: datetime) -> dict[Rating, MemoryState]:
        # Short-term steps keep stability and difficulty; only graduation schedules days
        good_interval = self.next_interval(base.stability)
        easy_interval = max(self.next_interval(base.stability), good_interval + 1)

        lapsed = base.state == CardState.RELEARNING
        return {
            Rating.AGAIN: base.with_changes(
                due=now + RELEARN_AGAIN_STEP,
                scheduled_days=0,
                lapses=base.lapses + 1 if lapsed else base.lapses,
            ),
            Rating.HARD: base.with_changes(due=now + RELEARN_HARD_STEP, scheduled_days=0),
            Rating.GOOD: base.with_changes(
                due=now + timedelta(days=good_interval),
                scheduled_days=good_interval,
                state=CardState.REVIEW,
            ),
            Rating.EASY: base.with_changes(
                due=now + timedelta(days=easy_interval),
                scheduled_days=easy_interval,
                state=CardState.REVIEW,
            ),
        }

    def _schedule_review(
        self,
        base: MemoryState,
        previous: MemoryState,
        elapsed_days: int,
        now: datetime,
    ) -> dict[Rating, MemoryState]:
        last_d = previous.difficulty
        last_s = previous.stability
        retrievability = forgetting_curve(elapsed_days, last_s)

        stability = {
            Rating.AGAIN: updates.next_forget_stability(self.w, last_d, last_s, retrievability),
        }
        for rating in (Rating.HARD, Rating.GOOD, Rating.EASY):
            stability[rating] = updates.next_recall_stability(
                self.w, last_d, last_s, retrievability, rating
            )

        hard_interval = self.next_interval(stability[Rating.HARD])
        good_interval = self.next_interval(stability[Rating.GOOD])
        hard_interval = min(hard_interval, good_interval)
        good_interval = max(good_interval, hard_interval + 1)
        easy_interval = max(self.next_interval(stability[Rating.EASY]), good_interval + 1)
        intervals = {
            Rating.HARD: hard_interval,
            Rating.GOOD: good_interval,
            Rating.EASY: easy_interval,
        }

        outcomes = {
            Rating.AGAIN: base.with_changes(
                stability=stability[Rating.AGAIN],
                difficulty=updates.next_difficulty(self.w, last_d, Rating.AGAIN),
                state=CardState.RELEARNING,
                lapses=base.lapses + 1,
                due=now + RELEARN_AGAIN_STEP,
                scheduled_days=0,
            )
        }
        for rating, interval in intervals.items():
            outcomes[rating] = base.with_changes(
                stability=stability[rating],
                difficulty=updates.next_difficulty(self.w, last_d, rating),
                state=CardState.REVIEW,
                due=now + timedelta(days=interval),
                scheduled_days=interval,
            )
        return outcomes

