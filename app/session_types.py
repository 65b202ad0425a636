"""
Session types used by the game controller and the Streamlit pages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class GamePhase(str, Enum):
    LOADING = "loading"
    PRESENTING = "presenting"
    COMPLETE = "complete"
    ERROR = "error"
    CLOSED = "closed"


class ErrorKind(str, Enum):
    NO_CARDS = "no_cards"                    # Nothing due; not a failure
    STORE_UNAVAILABLE = "store_unavailable"  # Backend failed; retry may help


@dataclass(frozen=True)
class GameError:
    """
    Why a game could not start.
    """
    kind: ErrorKind
    message: str

    @property
    def is_empty_deck(self) -> bool:
        return self.kind == ErrorKind.NO_CARDS


@dataclass(frozen=True)
class GameProgress:
    """
    Running counters of the current game.
    """
    studied: int
    correct: int
    total: int

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.studied)


def accuracy_percentage(correct: int, studied: int) -> float:
    if studied == 0:
        return 0.0
    return correct / studied * 100.0


@dataclass(frozen=True)
class GameSummary:
    """
    Final figures shown on the completion screen.
    """
    studied: int
    correct: int
    total: int
    duration_seconds: int

    @property
    def accuracy(self) -> float:
        return accuracy_percentage(self.correct, self.studied)
