"""
Flashcard UI Component

Renders a phrase card (front or back) for the study page.
"""

from __future__ import annotations

import html

import streamlit as st

from app.ui.flashcard_style import (
    CARD_MIN_HEIGHT,
    CARD_PADDING,
    PHRASE_BACK_STYLE,
    PHRASE_FRONT_STYLE,
    FlashcardStyle,
)
from legendas.study.types import StudyCard


def render_flashcard(
    main_text: str,
    subtitle: str = "",
    corner_text: str = "",
    style: FlashcardStyle | None = None,
) -> None:
    """
    Render a flashcard.

    Args:
        main_text: Primary text (center, large)
        subtitle: Optional secondary text (below main, smaller)
        corner_text: Optional text in top-right corner
        style: Style preset (defaults to the front style)
    """
    style = style or PHRASE_FRONT_STYLE

    corner_html = ""
    if corner_text:
        corner_html = (
            f'<div style="position: absolute; top: 15px; right: 20px; '
            f'font-size: {style.corner_font_size}; color: {style.corner_color}; '
            f'font-style: {style.corner_style};">{html.escape(corner_text)}</div>'
        )

    main_html = (
        f'<h1 style="font-size: {style.main_font_size}; color: {style.main_color}; '
        f'font-weight: {style.main_weight}; margin: 0; white-space: normal; '
        'text-align: center; line-height: 1.4; max-width: 100%; '
        'overflow-wrap: anywhere; word-break: break-word;">'
        f"{html.escape(main_text)}</h1>"
    )

    subtitle_html = ""
    if subtitle:
        subtitle_html = (
            f'<p style="font-size: {style.subtitle_font_size}; color: {style.subtitle_color}; '
            f'font-style: {style.subtitle_style}; margin: 15px 0 0 0; text-align: center; '
            'line-height: 1.4; max-width: 100%; overflow-wrap: anywhere; '
            f'word-break: break-word;">{html.escape(subtitle)}</p>'
        )

    card_html = (
        f'<div style="background-color: {style.bg_color}; padding: {CARD_PADDING}; '
        'border-radius: 15px; text-align: center; box-shadow: 0 4px 6px '
        f'rgba(0, 0, 0, 0.1); min-height: {CARD_MIN_HEIGHT}; display: flex; '
        'flex-direction: column; align-items: center; justify-content: center; '
        f'position: relative;">{corner_html}{main_html}{subtitle_html}</div>'
    )

    st.markdown(card_html, unsafe_allow_html=True)


def render_card_front(card: StudyCard) -> None:
    corner = "New" if card.is_new else card.state.value
    render_flashcard(card.front, corner_text=corner, style=PHRASE_FRONT_STYLE)


def render_card_back(card: StudyCard) -> None:
    render_flashcard(card.back, subtitle=card.front, style=PHRASE_BACK_STYLE)
