"""
Service layer to assemble the analytics dashboard.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from legendas.analytics.metrics import (
    build_day_index,
    compute_accuracy_daily,
    compute_cards_studied_daily,
    compute_learned_count,
    compute_state_distribution,
    compute_study_minutes_daily,
)
from legendas.analytics.queries import load_card_progress_df, load_sessions_df
from legendas.analytics.types import ScopeDashboard
from legendas.study.service import StudyService


async def build_scope_dashboard(
    service: StudyService,
    user_id: str,
    scope_id: Optional[str] = None,
) -> ScopeDashboard:
    """
    Build all KPI values and series needed by the analytics page.

    Without a scope, learned cards are counted over every episode the
    user has a session for.
    """
    stats = await service.get_study_stats(user_id, scope_id)
    sessions_df = await load_sessions_df(service, user_id, scope_id)
    day_index = build_day_index(sessions_df)

    if scope_id is not None:
        scope_ids = [scope_id]
    else:
        scope_ids = sorted(sessions_df["scope_id"].dropna().unique().tolist())
    progress_df = await load_card_progress_df(service, user_id, scope_ids)

    minutes_daily = compute_study_minutes_daily(sessions_df, day_index)
    minutes_cumulative = minutes_daily.cumsum() if not minutes_daily.empty else pd.Series(dtype="float64")

    return ScopeDashboard(
        user_id=user_id,
        scope_id=scope_id,
        stats=stats,
        learned_current=compute_learned_count(progress_df),
        sessions_total=len(sessions_df),
        sessions_completed=int(sessions_df["completed"].astype(bool).sum()) if not sessions_df.empty else 0,
        state_distribution=compute_state_distribution(stats),
        cards_studied_daily=compute_cards_studied_daily(sessions_df, day_index),
        accuracy_daily=compute_accuracy_daily(sessions_df, day_index),
        study_minutes_daily=minutes_daily,
        study_minutes_cumulative=minutes_cumulative,
    )
