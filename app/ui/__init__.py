"""UI Components for the subtitle phrase trainer"""

from app.ui.flashcard import render_flashcard, render_card_front, render_card_back
from app.ui.session_stats import render_session_stats, render_session_complete
from app.ui.feedback_buttons import render_feedback_buttons
from app.ui.details import render_phrase_details

__all__ = [
    "render_flashcard",
    "render_card_front",
    "render_card_back",
    "render_session_stats",
    "render_session_complete",
    "render_feedback_buttons",
    "render_phrase_details",
]
