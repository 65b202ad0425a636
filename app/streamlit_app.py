"""
Legendas - Main App

Streamlit UI for studying phrases extracted from Portuguese subtitles.
"""

import logging

import streamlit as st

from app.router import PAGES
from app.state import ensure_session_state, get_store, reset_game_on_user_change


# ---- User Configuration ----

USER_OPTIONS = {
    "Guest": "guest",
    "Ana": "ana",
    "Test": "test",
}


# ---- Page Setup ----

st.set_page_config(
    page_title="Legendas",
    page_icon="🇵🇹",
    layout="centered"
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


# ---- Database Initialization ----

get_store()


# ---- Session State Initialization ----

ensure_session_state(USER_OPTIONS)


# ---- Sidebar ----

def render_user_selector():
    """Pick who is studying; 'Guest' studies without saving."""
    user_labels = list(USER_OPTIONS.keys())
    selected_label = st.sidebar.selectbox(
        "User",
        user_labels,
        index=user_labels.index(st.session_state.user_label)
        if st.session_state.user_label in user_labels
        else 0
    )
    st.session_state.user_label = selected_label
    st.session_state.user_id = USER_OPTIONS[selected_label]
    reset_game_on_user_change()


# ---- Main App ----

def main():
    """Main app entry point."""
    render_user_selector()

    tabs = st.tabs([page.title for page in PAGES])
    for tab, page in zip(tabs, PAGES):
        with tab:
            page.render(USER_OPTIONS)


if __name__ == "__main__":
    main()
