"""
Data-loading helpers for analytics.
"""

from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from legendas.analytics.constants import SCOPE_PHRASE_LIMIT, SESSION_COLUMNS
from legendas.fsrs.constants import StudyDirection
from legendas.study.service import StudyService


async def load_sessions_df(
    service: StudyService,
    user_id: str,
    scope_id: Optional[str] = None,
) -> pd.DataFrame:
    """
    Load a user's study sessions into a dataframe.
    """
    sessions = await service.get_sessions(user_id, scope_id)
    if not sessions:
        return pd.DataFrame(columns=SESSION_COLUMNS)

    df = pd.DataFrame([
        {
            "session_id": s.id,
            "scope_id": s.scope_id,
            "created_at": s.created_at,
            "completed": s.is_complete,
            "cards_studied": s.cards_studied,
            "cards_correct": s.cards_correct,
            "duration_seconds": s.session_duration_seconds,
        }
        for s in sessions
    ])
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce")
    df = df.dropna(subset=["created_at"])
    df["day_utc"] = df["created_at"].dt.floor("D")
    df = df.sort_values("created_at").reset_index(drop=True)
    return df


async def load_card_progress_df(
    service: StudyService,
    user_id: str,
    scope_ids: Iterable[str],
) -> pd.DataFrame:
    """
    Load per-card progress for every phrase of the given scopes, in both
    directions. Phrases never studied are left out.
    """
    rows = []
    for scope_id in scope_ids:
        phrases = await service.get_scope_phrases(scope_id, SCOPE_PHRASE_LIMIT)
        phrase_ids = [p.id for p in phrases]
        for direction in StudyDirection:
            progress = await service.get_card_progress(user_id, phrase_ids, direction)
            for phrase_id, item in progress.items():
                if item.card_study is None:
                    continue
                rows.append({
                    "phrase_id": phrase_id,
                    "scope_id": scope_id,
                    "direction": direction.value,
                    "state": item.state.value,
                    "progress_percentage": item.progress_percentage,
                    "is_learned": item.is_learned,
                })

    if not rows:
        return pd.DataFrame(
            columns=["phrase_id", "scope_id", "direction", "state", "progress_percentage", "is_learned"]
        )
    return pd.DataFrame(rows)
