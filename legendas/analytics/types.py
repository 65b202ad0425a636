"""
Types for analytics dashboards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from legendas.study.types import StudyStats


@dataclass(frozen=True)
class ScopeDashboard:
    """
    Precomputed metrics and series for one user (optionally one episode).
    """
    user_id: str
    scope_id: Optional[str]
    stats: StudyStats
    learned_current: int
    sessions_total: int
    sessions_completed: int
    state_distribution: pd.Series
    cards_studied_daily: pd.Series
    accuracy_daily: pd.Series
    study_minutes_daily: pd.Series
    study_minutes_cumulative: pd.Series

    @property
    def overall_accuracy(self) -> float:
        studied = self.cards_studied_daily.sum()
        if studied == 0:
            return 0.0
        correct = (self.accuracy_daily * self.cards_studied_daily / 100.0).sum()
        return float(correct / studied * 100.0)
