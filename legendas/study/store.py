"""
Store interface used by the study service, plus an in-memory store.

The service never talks to a database directly: anything that implements
StudyStore can back it (SQLAlchemy, a REST API, the in-memory store used
by tests and demos). A single upsert per card key is assumed atomic.
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Protocol, Sequence

from legendas.errors import SessionNotFound
from legendas.fsrs.constants import STATE_PRIORITY, CardState, StudyDirection
from legendas.fsrs.memory_state import ensure_aware
from legendas.study.types import (
    SESSION_UPDATABLE_FIELDS,
    CardStudy,
    Phrase,
    StateCount,
    StudySession,
)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class StudyStore(Protocol):
    """Query interface the study service consumes."""

    async def fetch_due_card_states(
        self,
        user_id: str,
        scope_id: str,
        direction: StudyDirection,
        limit: int,
        now: datetime,
    ) -> list[CardStudy]:
        """
        Cards in scope with due <= now or state New, in study order.

        Phrases without a row are returned as implicit New CardStudy
        records (id None). Order: Relearning, Learning, Review, New, then
        earliest due first.
        """
        ...

    async def fetch_phrases_by_ids(self, ids: Sequence[str]) -> list[Phrase]: ...

    async def fetch_scope_phrases(self, scope_id: str, limit: int) -> list[Phrase]: ...

    async def fetch_card_study(
        self, user_id: str, phrase_id: str, direction: StudyDirection
    ) -> Optional[CardStudy]: ...

    async def fetch_card_studies(
        self, user_id: str, phrase_ids: Sequence[str], direction: StudyDirection
    ) -> list[CardStudy]: ...

    async def upsert_card_study(self, record: CardStudy) -> CardStudy: ...

    async def insert_session(self, record: StudySession) -> StudySession: ...

    async def update_session(self, session_id: str, fields: dict) -> StudySession: ...

    async def fetch_session(self, session_id: str) -> Optional[StudySession]: ...

    async def fetch_sessions(
        self, user_id: str, scope_id: Optional[str] = None
    ) -> list[StudySession]: ...

    async def count_card_studies_by_state(
        self, user_id: str, scope_id: Optional[str] = None
    ) -> list[StateCount]: ...


def due_sort_key(card: CardStudy) -> tuple:
    """Study order: state priority, then earliest due (implicit New last)."""
    due = ensure_aware(card.due_date)
    return (STATE_PRIORITY[card.state], due is None, due or _EPOCH)


def is_eligible(card: CardStudy, now: datetime) -> bool:
    """A card can be studied now if it is New or its due date has passed."""
    if card.state == CardState.NEW or card.due_date is None:
        return True
    return ensure_aware(card.due_date) <= now


def implicit_new_card(user_id: str, phrase_id: str, direction: StudyDirection) -> CardStudy:
    return CardStudy(user_id=user_id, phrase_id=phrase_id, direction=direction, due_date=None)


def check_session_fields(fields: dict) -> dict:
    unknown = set(fields) - SESSION_UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update session fields: {sorted(unknown)}")
    return fields


class InMemoryStudyStore:
    """
    Dict-backed StudyStore.

    Useful for tests and for running the game without a database.
    """

    def __init__(
        self,
        phrases: Iterable[Phrase] = (),
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.phrases: dict[str, Phrase] = {}
        self.card_studies: dict[tuple[str, str, StudyDirection], CardStudy] = {}
        self.sessions: dict[str, StudySession] = {}
        self._ids = itertools.count(1)
        for phrase in phrases:
            self.add_phrase(phrase)

    def add_phrase(self, phrase: Phrase) -> None:
        self.phrases[phrase.id] = phrase

    def _scope_phrases(self, scope_id: str) -> list[Phrase]:
        in_scope = [p for p in self.phrases.values() if p.scope_id == scope_id]
        in_scope.sort(key=lambda p: (p.position_in_content is None, p.position_in_content or 0))
        return in_scope

    async def fetch_due_card_states(self, user_id, scope_id, direction, limit, now):
        cards = []
        for phrase in self._scope_phrases(scope_id):
            card = self.card_studies.get((user_id, phrase.id, direction))
            if card is None:
                card = implicit_new_card(user_id, phrase.id, direction)
            if is_eligible(card, now):
                cards.append(card)
        cards.sort(key=due_sort_key)
        return cards[:limit]

    async def fetch_phrases_by_ids(self, ids):
        return [self.phrases[i] for i in ids if i in self.phrases]

    async def fetch_scope_phrases(self, scope_id, limit):
        return self._scope_phrases(scope_id)[:limit]

    async def fetch_card_study(self, user_id, phrase_id, direction):
        return self.card_studies.get((user_id, phrase_id, direction))

    async def fetch_card_studies(self, user_id, phrase_ids, direction):
        wanted = set(phrase_ids)
        return [
            card for (uid, pid, d), card in self.card_studies.items()
            if uid == user_id and pid in wanted and d == direction
        ]

    async def upsert_card_study(self, record):
        now = self.clock()
        existing = self.card_studies.get(record.key)
        if existing is None:
            saved = replace(record, id=next(self._ids), created_at=now, updated_at=now)
        else:
            saved = replace(record, id=existing.id, created_at=existing.created_at, updated_at=now)
        self.card_studies[record.key] = saved
        return saved

    async def insert_session(self, record):
        now = self.clock()
        saved = replace(
            record,
            id=record.id or str(uuid.uuid4()),
            created_at=record.created_at or now,
            updated_at=now,
        )
        self.sessions[saved.id] = saved
        return saved

    async def update_session(self, session_id, fields):
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        updated = session.with_changes(**check_session_fields(fields), updated_at=self.clock())
        self.sessions[session_id] = updated
        return updated

    async def fetch_session(self, session_id):
        return self.sessions.get(session_id)

    async def fetch_sessions(self, user_id, scope_id=None):
        sessions = [
            s for s in self.sessions.values()
            if s.user_id == user_id and (scope_id is None or s.scope_id == scope_id)
        ]
        sessions.sort(key=lambda s: s.created_at or _EPOCH)
        return sessions

    async def count_card_studies_by_state(self, user_id, scope_id=None):
        totals: dict[CardState, list[int]] = {}
        for (uid, phrase_id, _), card in self.card_studies.items():
            if uid != user_id:
                continue
            if scope_id is not None:
                phrase = self.phrases.get(phrase_id)
                if phrase is None or phrase.scope_id != scope_id:
                    continue
            row = totals.setdefault(card.state, [0, 0, 0])
            row[0] += 1
            row[1] += card.reps
            row[2] += card.lapses
        return [
            StateCount(state=state, count=count, reps=reps, lapses=lapses)
            for state, (count, reps, lapses) in totals.items()
        ]
