"""Tests for the Streamlit state helpers that need no running app."""

from app.state import is_signed_in, load_scopes
from legendas.errors import StoreUnavailable


class ScopeStore:
    def __init__(self, scopes=None, failure=None):
        self.scopes = scopes or []
        self.failure = failure

    async def list_scopes(self):
        if self.failure is not None:
            raise self.failure
        return self.scopes


def test_load_scopes_returns_episode_counts():
    store = ScopeStore([("rtp-ep-01", 3), ("rtp-ep-02", 1)])
    assert load_scopes(store) == [("rtp-ep-01", 3), ("rtp-ep-02", 1)]


def test_load_scopes_reports_unavailable_store_as_none():
    store = ScopeStore(failure=StoreUnavailable("list_scopes failed: disk I/O error"))
    assert load_scopes(store) is None


def test_empty_store_is_not_a_failure():
    assert load_scopes(ScopeStore()) == []


def test_guest_ids_are_not_signed_in():
    assert not is_signed_in(None)
    assert not is_signed_in("")
    assert not is_signed_in("guest")
    assert is_signed_in("ana")
