"""
Study page rendering.
"""

from __future__ import annotations

import streamlit as st

from app.game_controller import GameController
from app.session_types import GamePhase
from app.state import get_store, get_study_service, is_signed_in, load_scopes, run_async
from app.ui import (
    render_card_back,
    render_card_front,
    render_feedback_buttons,
    render_phrase_details,
    render_session_complete,
    render_session_stats,
)
from legendas.analytics import DIRECTION_LABELS
from legendas.fsrs import StudyDirection
from legendas.fsrs.database import is_test_mode


def render_study_page(user_options: dict[str, str]) -> None:
    """
    Render the study flow (intro, active game, completion or error).
    """
    del user_options  # user is picked in the sidebar

    game: GameController | None = st.session_state.game
    if game is None or game.phase in (GamePhase.CLOSED, GamePhase.LOADING):
        _render_intro_screen()
    elif game.phase == GamePhase.PRESENTING:
        _render_active_session(game)
    elif game.phase == GamePhase.COMPLETE:
        _render_complete_screen(game)
    else:
        _render_error_screen(game)

    if is_test_mode():
        st.caption("TEST MODE - Using the test database")


def _start_game(scope_id: str, direction: StudyDirection) -> None:
    game = GameController(get_study_service(), scope_id, direction)
    with st.spinner("Loading cards..."):
        run_async(game.start())
    st.session_state.game = game


def _render_intro_screen() -> None:
    st.markdown("<style>.stApp h1 { font-size: 1.6rem; }</style>", unsafe_allow_html=True)
    st.title("🇵🇹 Legendas")
    if is_test_mode():
        st.warning("⚠️ **TEST MODE** - Using the test database (set TEST_MODE=false in .env for production)")
    st.markdown(f"**Welcome {st.session_state.user_label}**")

    scopes = load_scopes(get_store())
    if scopes is None:
        st.error("Could not load episodes: the database is unavailable.")
        if st.button("Retry", type="primary"):
            st.rerun()
        return
    if not scopes:
        st.info("No phrases imported yet. Run `python -m scripts.data.import_phrases` first.")
        return

    labels = {f"{episode_id} ({count} phrases)": episode_id for episode_id, count in scopes}
    current = next(
        (label for label, episode_id in labels.items() if episode_id == st.session_state.scope_id),
        None,
    )
    options = list(labels)
    selected = st.selectbox("Episode", options, index=options.index(current) if current else 0)
    st.session_state.scope_id = labels[selected]

    directions = list(StudyDirection)
    direction = st.radio(
        "Direction",
        directions,
        index=directions.index(st.session_state.direction),
        format_func=lambda d: DIRECTION_LABELS[d],
        horizontal=True,
    )
    st.session_state.direction = direction

    if not is_signed_in(st.session_state.user_id_active):
        st.info("Studying as a guest: sign in to save your progress.")

    if st.button("Start Studying", type="primary", use_container_width=True):
        _start_game(st.session_state.scope_id, direction)
        st.rerun()


def _render_active_session(game: GameController) -> None:
    if render_session_stats(game.progress, game.current_index):
        game.close()
        st.session_state.game = None
        st.rerun()

    if game.requires_sign_in:
        st.caption("Guest mode - ratings are not saved.")
    if game.persistence_failures:
        st.warning(f"{game.persistence_failures} update(s) could not be saved.")

    card = game.current_card
    st.markdown("<br>", unsafe_allow_html=True)

    if not game.show_answer:
        render_card_front(card)
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("Show Answer", use_container_width=True, type="primary"):
            game.flip()
            st.rerun()
        return

    render_card_back(card)
    st.markdown("<br>", unsafe_allow_html=True)

    rating = render_feedback_buttons(
        key_suffix=f"{game.session.id if game.session else 'guest'}_{game.current_index}",
        disabled=game.is_busy,
    )
    if rating is not None:
        run_async(game.rate(rating))
        st.rerun()

    st.markdown("<br>", unsafe_allow_html=True)
    render_phrase_details(card)


def _render_complete_screen(game: GameController) -> None:
    render_session_complete(game.summary)
    if game.requires_sign_in:
        st.info("Sign in to keep this progress next time.")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Study Again", type="primary", use_container_width=True):
            run_async(game.restart())
            st.rerun()
    with col2:
        if st.button("Back", use_container_width=True):
            game.close()
            st.session_state.game = None
            st.rerun()


def _render_error_screen(game: GameController) -> None:
    error = game.error
    if error is not None and error.is_empty_deck:
        st.info(error.message)
    elif error is not None:
        st.error(error.message)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Retry", type="primary", use_container_width=True):
            run_async(game.retry())
            st.rerun()
    with col2:
        if st.button("Back", use_container_width=True):
            game.close()
            st.session_state.game = None
            st.rerun()
