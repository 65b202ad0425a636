"""
Feedback Button UI

Renders the four rating buttons shown once the answer is revealed.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from legendas.fsrs import Rating


RATING_BUTTONS = [
    (Rating.AGAIN, "❌ Again", "Forgot it (1)"),
    (Rating.HARD, "😰 Hard", "Remembered with effort (2)"),
    (Rating.GOOD, "👍 Good", "Remembered (3)"),
    (Rating.EASY, "✨ Easy", "Instant recall (4)"),
]


def render_feedback_buttons(key_suffix: str = "", disabled: bool = False) -> Optional[Rating]:
    """
    Render feedback rating buttons.

    Args:
        key_suffix: Makes widget keys unique per card
        disabled: Disable input while a rating is being saved

    Returns:
        Rating selected by user, or None if no button clicked
    """
    st.markdown("**How well did you remember this phrase?**")

    selected = None
    columns = st.columns(len(RATING_BUTTONS))
    for column, (rating, label, help_text) in zip(columns, RATING_BUTTONS):
        with column:
            if st.button(
                label,
                key=f"rate_{rating.value}_{key_suffix}",
                help=help_text,
                disabled=disabled,
                use_container_width=True,
            ):
                selected = rating
    return selected
