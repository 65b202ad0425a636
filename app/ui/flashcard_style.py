"""
Flashcard style presets and constants.
"""

from __future__ import annotations

from dataclasses import dataclass


# ---- Shared Card Layout ----

CARD_PADDING = "35px 24px"
CARD_MIN_HEIGHT = "210px"
FRONT_BG_COLOR = "#f0f2f6"
BACK_BG_COLOR = "#e8f4f8"


# ---- Shared Typography Defaults ----

DEFAULT_MAIN_FONT_SIZE = "2.2em"
DEFAULT_MAIN_COLOR = "#1f1f1f"
DEFAULT_MAIN_WEIGHT = "normal"
DEFAULT_SUBTITLE_FONT_SIZE = "1.1em"
DEFAULT_SUBTITLE_COLOR = "#666"
DEFAULT_SUBTITLE_STYLE = "italic"
DEFAULT_CORNER_FONT_SIZE = "0.85em"
DEFAULT_CORNER_COLOR = "#666"
DEFAULT_CORNER_STYLE = "italic"


@dataclass(frozen=True)
class FlashcardStyle:
    """
    Visual style preset for flashcards.
    """
    main_font_size: str = DEFAULT_MAIN_FONT_SIZE
    main_color: str = DEFAULT_MAIN_COLOR
    main_weight: str = DEFAULT_MAIN_WEIGHT
    subtitle_font_size: str = DEFAULT_SUBTITLE_FONT_SIZE
    subtitle_color: str = DEFAULT_SUBTITLE_COLOR
    subtitle_style: str = DEFAULT_SUBTITLE_STYLE
    corner_font_size: str = DEFAULT_CORNER_FONT_SIZE
    corner_color: str = DEFAULT_CORNER_COLOR
    corner_style: str = DEFAULT_CORNER_STYLE
    bg_color: str = FRONT_BG_COLOR


# ---- Phrase Card Presets ----

# Subtitle phrases are often whole sentences, so the front wraps
PHRASE_FRONT_STYLE = FlashcardStyle(
    bg_color=FRONT_BG_COLOR,
)

PHRASE_BACK_STYLE = FlashcardStyle(
    main_font_size="1.9em",
    subtitle_font_size="1.0em",
    subtitle_style="normal",
    bg_color=BACK_BG_COLOR,
)
