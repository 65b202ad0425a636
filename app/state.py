"""
Streamlit session state, store wiring and the async bridge.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

import streamlit as st

from legendas.errors import StoreUnavailable
from legendas.fsrs import Scheduler, StudyDirection
from legendas.fsrs.database import (
    SqlAlchemyStudyStore,
    get_default_user_id,
    get_engine,
    get_session_factory,
    init_db,
)
from legendas.study import StudyService, auth_for_user

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_async(awaitable: Awaitable[T]) -> T:
    """
    Run one service call to completion.

    Streamlit reruns the script synchronously, so every action gets its
    own event loop; the engine uses NullPool for that reason.
    """
    async def _run() -> T:
        return await awaitable

    return asyncio.run(_run())


@st.cache_resource
def get_store() -> SqlAlchemyStudyStore:
    """
    Create the store and initialize the schema (once per server process).
    """
    engine = get_engine(null_pool=True)
    run_async(init_db(engine))
    return SqlAlchemyStudyStore(get_session_factory(engine))


@st.cache_resource
def get_scheduler() -> Scheduler:
    return Scheduler()


def load_scopes(store: SqlAlchemyStudyStore) -> Optional[list[tuple[str, int]]]:
    """
    Episodes with their phrase counts, or None when the store is down.
    """
    try:
        return run_async(store.list_scopes())
    except StoreUnavailable as exc:
        logger.error("Could not list episodes: %s", exc)
        return None


def is_signed_in(user_id: Optional[str]) -> bool:
    return auth_for_user(user_id).is_authenticated


def get_study_service() -> StudyService:
    """Service bound to the user picked in the sidebar."""
    return StudyService(
        store=get_store(),
        scheduler=get_scheduler(),
        auth=auth_for_user(st.session_state.user_id),
    )


def ensure_session_state(user_options: dict[str, str]) -> None:
    """
    Populate Streamlit session_state with defaults.
    """
    if "user_id" not in st.session_state:
        default_user_id = get_default_user_id()
        st.session_state.user_id = default_user_id
        st.session_state.user_label = next(
            (label for label, uid in user_options.items() if uid == default_user_id),
            "Guest"
        )
    if "scope_id" not in st.session_state:
        st.session_state.scope_id = None
    if "direction" not in st.session_state:
        st.session_state.direction = StudyDirection.RECOGNIZE
    if "game" not in st.session_state:
        st.session_state.game = None
    if "user_id_active" not in st.session_state:
        st.session_state.user_id_active = st.session_state.user_id


def reset_game_on_user_change() -> None:
    """
    Drop a running game when the user switches; it belongs to the old
    identity.
    """
    if st.session_state.user_id != st.session_state.user_id_active:
        game = st.session_state.game
        if game is not None:
            game.close()
        st.session_state.game = None
        st.session_state.user_id_active = st.session_state.user_id
