"""
FSRS Constants and Parameters

All configurable parameters for the scheduling algorithm in one place.
Weights are the published FSRS-4.5 defaults.
"""

from __future__ import annotations

from datetime import timedelta
from enum import Enum, IntEnum

from legendas.errors import InvalidRating


# ---- Ratings ----

class Rating(IntEnum):
    """Learner's self-assessment after seeing the answer."""
    AGAIN = 1   # Forgot
    HARD = 2    # Recalled with serious effort
    GOOD = 3    # Recalled normally
    EASY = 4    # Recalled fluently

    @classmethod
    def parse(cls, value) -> "Rating":
        """
        Convert a raw value (int, numeric string or Rating) into a Rating.

        Raises:
            InvalidRating: if value is not one of 1, 2, 3, 4
        """
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise InvalidRating(value)
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise InvalidRating(value) from None


# ---- Card lifecycle ----

class CardState(str, Enum):
    """Lifecycle stage of a card. Values are the persisted strings."""
    NEW = "New"
    LEARNING = "Learning"
    REVIEW = "Review"
    RELEARNING = "Relearning"


# Lower value = studied first
STATE_PRIORITY = {
    CardState.RELEARNING: 0,
    CardState.LEARNING: 1,
    CardState.REVIEW: 2,
    CardState.NEW: 3,
}


# ---- Study directions ----

class StudyDirection(str, Enum):
    """Independent scheduling axis for the same phrase."""
    RECOGNIZE = "recognize"  # Portuguese shown, recall the translation
    PRODUCE = "produce"      # Translation shown, produce the Portuguese


# ---- Algorithm parameters ----

DEFAULT_WEIGHTS = (
    0.4872, 1.4003, 3.7145, 13.8206,  # w0-w3: initial stability per rating
    5.1618, 1.2298,                    # w4-w5: initial difficulty
    0.8975, 0.031,                     # w6-w7: difficulty step, mean reversion
    1.6474, 0.1367, 1.0461,            # w8-w10: recall stability
    2.1072, 0.0793, 0.3246, 1.587,     # w11-w14: forget stability
    0.2272,                            # w15: hard penalty
    2.8755,                            # w16: easy bonus
)
WEIGHT_COUNT = len(DEFAULT_WEIGHTS)

REQUEST_RETENTION = 0.9   # Target recall probability at the due date
MAXIMUM_INTERVAL = 36500  # Days

DECAY = -0.5
FACTOR = 0.9 ** (1 / DECAY) - 1  # 19/81, so R(t=S) == 0.9

S_MIN = 0.1   # Minimum stability (days)
D_MIN = 1.0   # Minimum difficulty
D_MAX = 10.0  # Maximum difficulty


# ---- Short-term steps ----

NEW_AGAIN_STEP = timedelta(minutes=1)
NEW_HARD_STEP = timedelta(minutes=5)
NEW_GOOD_STEP = timedelta(minutes=10)
RELEARN_AGAIN_STEP = timedelta(minutes=5)
RELEARN_HARD_STEP = timedelta(minutes=10)


# ---- Study defaults ----

DEFAULT_DECK_LIMIT = 20
CORRECT_RATING_THRESHOLD = Rating.GOOD  # Good or Easy counts as correct
