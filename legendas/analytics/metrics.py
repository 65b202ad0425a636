"""
Metric computations for analytics dashboards.
"""

from __future__ import annotations

import pandas as pd

from legendas.analytics.constants import STATE_LABELS, STATE_ORDER
from legendas.study.types import StudyStats


def build_day_index(sessions_df: pd.DataFrame) -> pd.DatetimeIndex:
    """
    Build a dense UTC day index spanning the session range.
    """
    if sessions_df.empty:
        return pd.DatetimeIndex([], tz="UTC")
    start = sessions_df["day_utc"].min()
    end = sessions_df["day_utc"].max()
    return pd.date_range(start=start, end=end, freq="D", tz="UTC")


def zero_series(day_index: pd.DatetimeIndex, dtype: str = "float64") -> pd.Series:
    """
    Convenience zero-valued series aligned to day index.
    """
    return pd.Series(0, index=day_index, dtype=dtype)


def compute_state_distribution(stats: StudyStats) -> pd.Series:
    """
    Card counts per state, in lifecycle order, labelled for display.
    """
    counts = {
        "New": stats.new,
        "Learning": stats.learning,
        "Relearning": stats.relearning,
        "Review": stats.review,
    }
    labels = [STATE_LABELS[state] for state in STATE_ORDER]
    return pd.Series([counts[label] for label in labels], index=labels, dtype="int64")


def compute_cards_studied_daily(sessions_df: pd.DataFrame, day_index: pd.DatetimeIndex) -> pd.Series:
    if sessions_df.empty or len(day_index) == 0:
        return pd.Series(dtype="int64")
    daily = sessions_df.groupby("day_utc")["cards_studied"].sum()
    return daily.reindex(day_index, fill_value=0).astype("int64")


def compute_accuracy_daily(sessions_df: pd.DataFrame, day_index: pd.DatetimeIndex) -> pd.Series:
    """
    Percentage of Good/Easy ratings per day (0 on days without study).
    """
    if sessions_df.empty or len(day_index) == 0:
        return pd.Series(dtype="float64")

    daily = sessions_df.groupby("day_utc")[["cards_studied", "cards_correct"]].sum()
    daily = daily.reindex(day_index, fill_value=0)
    studied = daily["cards_studied"].astype("float64")
    correct = daily["cards_correct"].astype("float64")
    accuracy = (correct / studied.where(studied > 0)) * 100.0
    return accuracy.fillna(0.0)


def compute_study_minutes_daily(sessions_df: pd.DataFrame, day_index: pd.DatetimeIndex) -> pd.Series:
    """
    Daily study time as the sum of recorded session durations.
    """
    if sessions_df.empty or len(day_index) == 0:
        return pd.Series(dtype="float64")
    minutes = sessions_df.assign(minutes=sessions_df["duration_seconds"] / 60.0)
    daily = minutes.groupby("day_utc")["minutes"].sum()
    return daily.reindex(day_index, fill_value=0.0).astype("float64")


def compute_learned_count(progress_df: pd.DataFrame) -> int:
    """
    Learned cards (phrase x direction) among those with a card study.
    """
    if progress_df.empty:
        return 0
    return int(progress_df["is_learned"].astype(bool).sum())
