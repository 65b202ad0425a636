"""
Phrase Details UI

Renders where a phrase came from and how its card is progressing.
"""

import streamlit as st

from legendas.study.types import StudyCard


def render_phrase_details(card: StudyCard):
    """
    Render phrase details expander: subtitle context and scheduling state.
    """
    with st.expander("📖 Details"):
        phrase = card.phrase
        if phrase.context:
            st.markdown(f"_{phrase.context}_")
        else:
            st.caption("No subtitle context recorded for this phrase.")

        study = card.card_study
        col1, col2, col3 = st.columns(3)
        with col1:
            st.caption(f"**State:** {card.state.value}")
        with col2:
            st.caption(f"**Reviews:** {study.reps if study else 0}")
        with col3:
            if phrase.confidence_score is not None:
                st.caption(f"**Confidence:** {phrase.confidence_score:.0%}")

        if study is not None and study.stability > 0:
            st.caption(f"Stability {study.stability:.1f} days · difficulty {study.difficulty:.1f}")
