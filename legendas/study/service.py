"""
Study Service - bridges the scheduler with persisted card state.

Responsibilities:
- Build the deck of due cards for a scope (episode) and direction
- Schedule a rating and upsert the resulting card study
- Create and update study sessions
- Aggregate statistics and per-card progress

Guests never produce writes: their decks are built from the scope's
phrases and their ratings are discarded.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

from legendas.errors import AuthenticationRequired, LegendasError, StoreUnavailable
from legendas.fsrs.constants import DEFAULT_DECK_LIMIT, CardState, Rating, StudyDirection
from legendas.fsrs.memory_state import ensure_aware
from legendas.fsrs.scheduler import Scheduler
from legendas.study.auth import GUEST, AuthContext
from legendas.study.progress import build_card_progress
from legendas.study.store import StudyStore, check_session_fields
from legendas.study.types import (
    CardProgress,
    CardStudy,
    Phrase,
    SessionType,
    StudyCard,
    StudySession,
    StudyStats,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def deck_session_type(cards: Sequence[StudyCard]) -> SessionType:
    """Classify a deck: only new cards, only reviews, or a mix."""
    new_count = sum(1 for card in cards if card.is_new)
    if cards and new_count == len(cards):
        return "new"
    if new_count == 0:
        return "review"
    return "mixed"


class StudyService:
    """
    Orchestrates due-card selection, scheduling and session bookkeeping.

    All dependencies are injected so tests can substitute the store, the
    clock or the identity.
    """

    def __init__(
        self,
        store: StudyStore,
        scheduler: Optional[Scheduler] = None,
        auth: AuthContext = GUEST,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.scheduler = scheduler or Scheduler()
        self.auth = auth
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    async def current_user_id(self) -> Optional[str]:
        return await self.auth.current_user_id()

    async def _resolve_user(self, user_id: Optional[str]) -> Optional[str]:
        if user_id is not None:
            return user_id
        return await self.auth.current_user_id()

    async def _store_call(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except StoreUnavailable:
            logger.error("Store failure during %s", operation)
            raise
        except LegendasError:
            raise
        except Exception as exc:
            logger.error("Store failure during %s: %s", operation, exc)
            raise StoreUnavailable(f"{operation} failed: {exc}") from exc

    # ---- Decks ----

    async def get_due_cards(
        self,
        scope_id: str,
        direction: StudyDirection = StudyDirection.RECOGNIZE,
        limit: int = DEFAULT_DECK_LIMIT,
    ) -> list[StudyCard]:
        """
        Cards to study now for a scope, most urgent first.

        An empty list means there is nothing to study; store failures
        raise StoreUnavailable instead.
        """
        if limit <= 0:
            return []

        user_id = await self.auth.current_user_id()
        if user_id is None:
            return await self._get_guest_cards(scope_id, direction, limit)

        now = self.clock()
        rows = await self._store_call(
            "fetch_due_card_states",
            lambda: self.store.fetch_due_card_states(user_id, scope_id, direction, limit, now),
        )
        if not rows:
            return []

        phrases = await self._store_call(
            "fetch_phrases_by_ids",
            lambda: self.store.fetch_phrases_by_ids([row.phrase_id for row in rows]),
        )
        phrases_by_id = {phrase.id: phrase for phrase in phrases}

        cards = []
        for row in rows[:limit]:
            phrase = phrases_by_id.get(row.phrase_id)
            if phrase is None:
                logger.warning("Card study %s references missing phrase %s", row.id, row.phrase_id)
                continue
            due = ensure_aware(row.due_date)
            cards.append(StudyCard(
                phrase=phrase,
                direction=direction,
                card_study=row if row.is_persisted else None,
                is_new=row.state == CardState.NEW,
                is_due=due is None or due <= now,
            ))
        return cards

    async def _get_guest_cards(
        self,
        scope_id: str,
        direction: StudyDirection,
        limit: int,
    ) -> list[StudyCard]:
        phrases = await self.get_scope_phrases(scope_id, limit)
        return [
            StudyCard(phrase=phrase, direction=direction, is_new=True, is_due=True)
            for phrase in phrases[:limit]
        ]

    # ---- Ratings ----

    async def process_response(
        self,
        user_id: Optional[str],
        phrase_id: str,
        direction: StudyDirection,
        rating,
        response_time_ms: int = 0,
    ) -> Optional[CardStudy]:
        """
        Schedule a rating and upsert the card study.

        The rating is validated before the guest check: an out-of-range
        value is a caller bug for guests and users alike.

        Args:
            user_id: Rating user; None falls back to the auth context
            phrase_id: Rated phrase
            direction: Study direction of the card
            rating: Rating or raw 1-4 value
            response_time_ms: Time to answer (kept for callers; not persisted)

        Returns:
            The saved CardStudy, or None for guests (nothing is written)

        Raises:
            InvalidRating: rating not in 1-4
            StoreUnavailable: the load or the upsert failed
        """
        rating = Rating.parse(rating)
        user_id = await self._resolve_user(user_id)
        if user_id is None:
            logger.debug("Discarding guest rating %s for phrase %s", rating.name, phrase_id)
            return None

        existing = await self._store_call(
            "fetch_card_study",
            lambda: self.store.fetch_card_study(user_id, phrase_id, direction),
        )

        now = self.clock()
        previous_state = existing.memory_state(now) if existing else None
        next_state = self.scheduler.schedule(previous_state, rating, now)

        record = CardStudy.from_memory_state(
            user_id, phrase_id, direction, next_state, rating, previous=existing
        )
        saved = await self._store_call("upsert_card_study", lambda: self.store.upsert_card_study(record))
        logger.debug(
            "Scheduled %s/%s %s: %s -> %s, due %s (%d ms)",
            phrase_id, direction.value, rating.name,
            existing.state.value if existing else CardState.NEW.value,
            saved.state.value, saved.due_date.isoformat() if saved.due_date else None,
            response_time_ms,
        )
        return saved

    # ---- Sessions ----

    async def create_session(
        self,
        user_id: Optional[str],
        scope_id: str,
        direction: StudyDirection = StudyDirection.RECOGNIZE,
        session_type: SessionType = "mixed",
    ) -> StudySession:
        """
        Start a study session with zeroed counters.

        Raises:
            AuthenticationRequired: no user
        """
        user_id = await self._resolve_user(user_id)
        if user_id is None:
            raise AuthenticationRequired("creating study sessions")

        record = StudySession(
            id="",
            user_id=user_id,
            scope_id=scope_id,
            direction=direction,
            session_type=session_type,
            created_at=self.clock(),
        )
        session = await self._store_call("insert_session", lambda: self.store.insert_session(record))
        logger.info("Created study session %s for user %s on %s", session.id, user_id, scope_id)
        return session

    async def update_session(self, session_id: str, fields: dict) -> StudySession:
        """
        Patch session counters or the completion timestamp.

        Last write wins: only the owning game updates a session.
        """
        fields = check_session_fields(dict(fields))
        session = await self._store_call(
            "update_session",
            lambda: self.store.update_session(session_id, fields),
        )
        if "completed_at" in fields and fields["completed_at"] is not None:
            logger.info(
                "Completed study session %s: %d/%d correct",
                session_id, session.cards_correct, session.cards_studied,
            )
        return session

    # ---- Reporting ----

    async def get_study_stats(self, user_id: str, scope_id: Optional[str] = None) -> StudyStats:
        counts = await self._store_call(
            "count_card_studies_by_state",
            lambda: self.store.count_card_studies_by_state(user_id, scope_id),
        )
        return StudyStats.from_counts(counts)

    async def get_sessions(self, user_id: str, scope_id: Optional[str] = None) -> list[StudySession]:
        return await self._store_call(
            "fetch_sessions",
            lambda: self.store.fetch_sessions(user_id, scope_id),
        )

    async def get_scope_phrases(self, scope_id: str, limit: int) -> list[Phrase]:
        return await self._store_call(
            "fetch_scope_phrases",
            lambda: self.store.fetch_scope_phrases(scope_id, limit),
        )

    async def get_card_progress(
        self,
        user_id: Optional[str],
        phrase_ids: Sequence[str],
        direction: StudyDirection = StudyDirection.RECOGNIZE,
    ) -> dict[str, CardProgress]:
        """
        Progress for each phrase; phrases never studied report 0%.

        Guests get an empty mapping.
        """
        user_id = await self._resolve_user(user_id)
        if user_id is None or not phrase_ids:
            return {}

        studies = await self._store_call(
            "fetch_card_studies",
            lambda: self.store.fetch_card_studies(user_id, phrase_ids, direction),
        )
        by_phrase = {study.phrase_id: study for study in studies}
        return {
            phrase_id: build_card_progress(phrase_id, by_phrase.get(phrase_id))
            for phrase_id in phrase_ids
        }
