"""
Per-card progress shown next to phrases in episode listings.

Progress blends stability, review count and lapses into a 0-100 score.
"""

from __future__ import annotations

from typing import Optional

from legendas.fsrs.constants import CardState
from legendas.study.types import CardProgress, CardStudy


STABILITY_WEIGHT = 60.0   # Stability of 10+ days earns the full 60%
REVIEWS_WEIGHT = 30.0     # 10+ reviews earn the full 30%
LAPSE_PENALTY = 10.0      # 5+ lapses cost the full 10%
STATE_BONUS = {
    CardState.REVIEW: 10.0,
    CardState.LEARNING: 5.0,
}

LEARNED_MIN_STABILITY = 2.0
LEARNED_MIN_REPS = 3


def calculate_progress_percentage(card_study: Optional[CardStudy]) -> float:
    if card_study is None:
        return 0.0

    stability_progress = min(card_study.stability / 10, 1) * STABILITY_WEIGHT
    review_progress = min(card_study.reps / 10, 1) * REVIEWS_WEIGHT
    lapse_penalty = min(card_study.lapses / 5, 1) * LAPSE_PENALTY
    state_bonus = STATE_BONUS.get(card_study.state, 0.0)

    total = stability_progress + review_progress + state_bonus - lapse_penalty
    return min(100.0, max(0.0, total))


def is_card_learned(card_study: Optional[CardStudy]) -> bool:
    """A card is learned once it is in Review with some stability behind it."""
    if card_study is None:
        return False
    return (
        card_study.state == CardState.REVIEW
        and card_study.stability >= LEARNED_MIN_STABILITY
        and card_study.reps >= LEARNED_MIN_REPS
    )


def build_card_progress(phrase_id: str, card_study: Optional[CardStudy]) -> CardProgress:
    return CardProgress(
        phrase_id=phrase_id,
        state=card_study.state if card_study else CardState.NEW,
        progress_percentage=calculate_progress_percentage(card_study),
        is_learned=is_card_learned(card_study),
        card_study=card_study,
    )
