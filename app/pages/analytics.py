"""
Analytics page rendering.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from app.state import get_store, get_study_service, is_signed_in, load_scopes, run_async
from legendas.analytics import build_scope_dashboard
from legendas.study.progress import LEARNED_MIN_REPS, LEARNED_MIN_STABILITY


ALL_EPISODES = "All episodes"


@st.cache_data(show_spinner=False)
def _cached_dashboard(user_id: str, scope_id: Optional[str]):
    return run_async(build_scope_dashboard(get_study_service(), user_id, scope_id))


def render_analytics_page(user_options: dict[str, str]) -> None:
    del user_options  # reserved for future sign-in integration

    st.subheader("Learning Analytics")
    st.caption(f"User: {st.session_state.user_label} ({st.session_state.user_id})")

    if not is_signed_in(st.session_state.user_id_active):
        st.info("Guests have no saved progress. Pick a user in the sidebar to see analytics.")
        return

    scopes = load_scopes(get_store())
    if scopes is None:
        st.error("Could not load episodes: the database is unavailable.")
        if st.button("Retry", key="analytics_retry"):
            st.rerun()
        return

    scope_labels = [ALL_EPISODES] + [episode_id for episode_id, _ in scopes]
    selected = st.selectbox("Episode", scope_labels)
    scope_id = None if selected == ALL_EPISODES else selected

    if st.button("Refresh Analytics", use_container_width=False):
        _cached_dashboard.clear()
        st.rerun()

    dashboard = _cached_dashboard(st.session_state.user_id, scope_id)
    stats = dashboard.stats

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Cards Studied", f"{stats.total:,}")
    with col2:
        st.metric(
            "Learned",
            f"{dashboard.learned_current:,}",
            help=f"Review cards with stability >= {LEARNED_MIN_STABILITY:.0f} days and {LEARNED_MIN_REPS}+ reviews",
        )
    with col3:
        st.metric("Reviews", f"{stats.total_reviews:,}")
    with col4:
        st.metric("Lapses", f"{stats.total_lapses:,}")

    st.markdown("### Cards by State")
    if stats.total == 0:
        st.info("No cards studied yet.")
    else:
        st.bar_chart(dashboard.state_distribution.rename("cards").to_frame())

    st.markdown("### Sessions")
    if dashboard.cards_studied_daily.empty:
        st.info("No study sessions yet.")
        return

    st.caption(
        f"{dashboard.sessions_completed} of {dashboard.sessions_total} sessions completed · "
        f"overall accuracy {dashboard.overall_accuracy:.0f}%"
    )
    day_col1, day_col2 = st.columns(2)
    with day_col1:
        st.caption("Cards studied per day")
        st.bar_chart(dashboard.cards_studied_daily.rename("cards").to_frame())
    with day_col2:
        st.caption("Accuracy per day (%)")
        st.line_chart(dashboard.accuracy_daily.rename("accuracy").to_frame())

    st.markdown("### Study Time")
    time_col1, time_col2 = st.columns(2)
    with time_col1:
        st.caption("Daily study time (minutes)")
        st.bar_chart(dashboard.study_minutes_daily.rename("daily_minutes").to_frame())
    with time_col2:
        st.caption("Cumulative study time (minutes)")
        st.line_chart(dashboard.study_minutes_cumulative.rename("cumulative_minutes").to_frame())
