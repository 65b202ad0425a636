"""
Session Statistics UI

Renders progress metrics and controls.
"""

import streamlit as st

from app.session_types import GameProgress, GameSummary, accuracy_percentage


def render_session_stats(progress: GameProgress, position: int) -> bool:
    """
    Render session progress metrics and exit button.

    Returns:
        True if quit button was clicked, False otherwise
    """
    col1, col2, col3, col4 = st.columns([2, 2, 2, 1])

    with col1:
        st.metric("Progress", f"{position}/{progress.total}")

    with col2:
        st.metric("Reviewed", progress.studied)

    with col3:
        if progress.studied > 0:
            accuracy = accuracy_percentage(progress.correct, progress.studied)
            st.metric("Accuracy", f"{accuracy:.0f}%")

    with col4:
        st.markdown("<br>", unsafe_allow_html=True)  # Align with metrics
        if st.button("❌", help="Quit session (Esc)", use_container_width=True):
            return True

    st.divider()
    return False


def render_session_complete(summary: GameSummary):
    """Render session completion message."""
    st.success(f"🎉 Session complete! You reviewed {summary.studied} phrases.")
    minutes, seconds = divmod(summary.duration_seconds, 60)
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Accuracy", f"{summary.accuracy:.1f}%")
    with col2:
        st.metric("Time", f"{minutes}m {seconds:02d}s")
