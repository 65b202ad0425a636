"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from legendas.errors import StoreUnavailable
from legendas.fsrs import Scheduler
from legendas.study import GUEST, InMemoryStudyStore, StaticAuthContext, StudyService
from legendas.study.types import Phrase


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
SCOPE = "rtp-ep-01"
USER = "ana"

EPISODE_PHRASES = [
    ("Bom dia, tudo bem?", "Good morning, how are you?"),
    ("Não faz mal.", "It doesn't matter."),
    ("Até amanhã!", "See you tomorrow!"),
]


class FakeClock:
    """Settable clock; call it to read the current time."""

    def __init__(self, start: datetime = NOW):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FlakyStore(InMemoryStudyStore):
    """In-memory store whose reads or writes can be switched to fail."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_reads = False
        self.fail_writes = False
        self.failure: Exception = StoreUnavailable("database is unreachable")

    def _check(self, failing: bool):
        if failing:
            raise self.failure

    async def fetch_due_card_states(self, *args, **kwargs):
        self._check(self.fail_reads)
        return await super().fetch_due_card_states(*args, **kwargs)

    async def fetch_scope_phrases(self, *args, **kwargs):
        self._check(self.fail_reads)
        return await super().fetch_scope_phrases(*args, **kwargs)

    async def upsert_card_study(self, record):
        self._check(self.fail_writes)
        return await super().upsert_card_study(record)

    async def insert_session(self, record):
        self._check(self.fail_writes)
        return await super().insert_session(record)

    async def update_session(self, session_id, fields):
        self._check(self.fail_writes)
        return await super().update_session(session_id, fields)


def make_phrases(scope_id: str = SCOPE, prefix: str = "p") -> list[Phrase]:
    return [
        Phrase(
            id=f"{prefix}{i}",
            scope_id=scope_id,
            phrase=pt,
            translation=en,
            context=f"[00:0{i}:10] {pt}",
            position_in_content=i,
        )
        for i, (pt, en) in enumerate(EPISODE_PHRASES)
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def phrases() -> list[Phrase]:
    return make_phrases()


@pytest.fixture
def store(phrases, clock) -> FlakyStore:
    return FlakyStore(phrases, clock=clock)


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def user_service(store, scheduler, clock) -> StudyService:
    return StudyService(store, scheduler, StaticAuthContext(USER), clock=clock)


@pytest.fixture
def guest_service(store, scheduler, clock) -> StudyService:
    return StudyService(store, scheduler, GUEST, clock=clock)
