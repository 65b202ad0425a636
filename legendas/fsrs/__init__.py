"""
FSRS - Free Spaced Repetition Scheduler

Deterministic FSRS-4.5 scheduling for subtitle phrase cards.

This module implements the card lifecycle with:
- New -> Learning/Review on the first rating
- Short learning steps in minutes, review intervals in days
- Power forgetting curve: R = (1 + FACTOR * t/S) ^ DECAY
- Interpretable memory state (Stability, Difficulty, Retrievability)

Quick start:
    from legendas.fsrs import Scheduler, Rating

    scheduler = Scheduler()
    state = scheduler.schedule(None, Rating.GOOD, now)

Persistence lives in legendas.fsrs.database (SqlAlchemyStudyStore, init_db).
"""

# Core scheduler API (algorithm logic)
from legendas.fsrs.scheduler import Scheduler

# Constants and parameters
from legendas.fsrs.constants import (
    Rating,
    CardState,
    StudyDirection,
    DEFAULT_WEIGHTS,
    REQUEST_RETENTION,
    MAXIMUM_INTERVAL,
    DECAY,
    FACTOR,
    S_MIN,
    D_MIN,
    D_MAX,
)

# Memory state (for advanced usage)
from legendas.fsrs.memory_state import (
    MemoryState,
    calculate_retrievability,
    forgetting_curve,
    initialize_new_card,
)


__all__ = [
    # Core algorithm
    "Scheduler",

    # Enums
    "Rating",
    "CardState",
    "StudyDirection",

    # Memory state
    "MemoryState",
    "calculate_retrievability",
    "forgetting_curve",
    "initialize_new_card",

    # Parameters
    "DEFAULT_WEIGHTS",
    "REQUEST_RETENTION",
    "MAXIMUM_INTERVAL",
    "DECAY",
    "FACTOR",
    "S_MIN",
    "D_MIN",
    "D_MAX",
]
