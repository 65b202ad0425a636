"""
Game controller for one interactive flashcard session.

Phases:
    LOADING -> PRESENTING(index, show_answer) -> COMPLETE
    LOADING -> ERROR (empty deck or store failure)
    any -> CLOSED

The controller owns no UI. A driver (the Streamlit study page, a CLI, a
test) calls the actions and renders the observers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from legendas.errors import AuthenticationRequired, SessionNotFound, StoreUnavailable
from legendas.fsrs.constants import (
    CORRECT_RATING_THRESHOLD,
    DEFAULT_DECK_LIMIT,
    Rating,
    StudyDirection,
)
from legendas.study.service import StudyService, deck_session_type
from legendas.study.types import StudyCard, StudySession

from app.session_types import (
    ErrorKind,
    GameError,
    GamePhase,
    GameProgress,
    GameSummary,
)

logger = logging.getLogger(__name__)

NO_CARDS_MESSAGE = "No cards due for this episode. Come back later or pick another episode."

RATING_KEYS = {
    "1": Rating.AGAIN,
    "2": Rating.HARD,
    "3": Rating.GOOD,
    "4": Rating.EASY,
}
FLIP_KEYS = {" ", "space", "Space"}
CLOSE_KEYS = {"Escape", "Esc"}
RETRY_KEYS = {"r", "R"}


class GameController:
    """
    Drives one study session: deck loading, flip, rating and completion.

    Ratings are serialized: while one rating's persistence is pending,
    further ratings are ignored.
    """

    def __init__(
        self,
        service: StudyService,
        scope_id: str,
        direction: StudyDirection = StudyDirection.RECOGNIZE,
        limit: int = DEFAULT_DECK_LIMIT,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.service = service
        self.scope_id = scope_id
        self.direction = direction
        self.limit = limit
        self.clock = clock or (lambda: datetime.now(timezone.utc))

        # Bumped by start/close so late results from an older run are dropped
        self._generation = 0
        self._busy = False
        self._reset(GamePhase.LOADING)

    def _reset(self, phase: GamePhase) -> None:
        self._phase = phase
        self._deck: list[StudyCard] = []
        self._index = 0
        self._show_answer = False
        self._studied = 0
        self._correct = 0
        self._error: Optional[GameError] = None
        self._session: Optional[StudySession] = None
        self._user_id: Optional[str] = None
        self._requires_sign_in = False
        self._persistence_failures = 0
        self._started_at: Optional[datetime] = None
        self._finished_at: Optional[datetime] = None
        self._card_shown_at: Optional[datetime] = None

    # ---- Observers ----

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def current_card(self) -> Optional[StudyCard]:
        if self._phase != GamePhase.PRESENTING:
            return None
        return self._deck[self._index]

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def show_answer(self) -> bool:
        return self._show_answer

    @property
    def deck_size(self) -> int:
        return len(self._deck)

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def progress(self) -> GameProgress:
        return GameProgress(studied=self._studied, correct=self._correct, total=len(self._deck))

    @property
    def summary(self) -> GameSummary:
        return GameSummary(
            studied=self._studied,
            correct=self._correct,
            total=len(self._deck),
            duration_seconds=self._elapsed_seconds(self._finished_at),
        )

    @property
    def error(self) -> Optional[GameError]:
        return self._error

    @property
    def session(self) -> Optional[StudySession]:
        return self._session

    @property
    def requires_sign_in(self) -> bool:
        """True for guests: progress is shown but not saved."""
        return self._requires_sign_in

    @property
    def persistence_failures(self) -> int:
        return self._persistence_failures

    def _elapsed_seconds(self, until: Optional[datetime] = None) -> int:
        if self._started_at is None:
            return 0
        end = until or self.clock()
        return max(0, int((end - self._started_at).total_seconds()))

    # ---- Actions ----

    async def start(self) -> None:
        """
        Load a fresh deck and begin presenting it.

        A new study session is created for signed-in users; guests play
        without one.
        """
        self._generation += 1
        generation = self._generation
        self._busy = False
        self._reset(GamePhase.LOADING)

        try:
            cards = await self.service.get_due_cards(self.scope_id, self.direction, self.limit)
        except StoreUnavailable as exc:
            if generation == self._generation:
                self._fail(ErrorKind.STORE_UNAVAILABLE, f"Could not load cards: {exc}")
            return
        if generation != self._generation:
            return

        if not cards:
            self._fail(ErrorKind.NO_CARDS, NO_CARDS_MESSAGE)
            return

        self._deck = list(cards)
        self._started_at = self.clock()

        try:
            user_id = await self.service.current_user_id()
            if user_id is None:
                self._requires_sign_in = True
            else:
                session = await self.service.create_session(
                    user_id, self.scope_id, self.direction, deck_session_type(self._deck)
                )
                self._session = await self.service.update_session(
                    session.id, {"total_cards": len(self._deck)}
                )
                self._user_id = user_id
        except AuthenticationRequired:
            self._requires_sign_in = True
        except (StoreUnavailable, SessionNotFound) as exc:
            if generation == self._generation:
                self._fail(ErrorKind.STORE_UNAVAILABLE, f"Could not start a study session: {exc}")
            return
        if generation != self._generation:
            return

        self._phase = GamePhase.PRESENTING
        self._index = 0
        self._show_answer = False
        self._card_shown_at = self.clock()

    def flip(self) -> bool:
        """Reveal the answer of the current card."""
        if self._phase != GamePhase.PRESENTING or self._show_answer:
            return False
        self._show_answer = True
        return True

    async def rate(self, rating) -> bool:
        """
        Rate the current card and advance.

        Persistence failures are counted and logged but never block the
        learner: the game still moves to the next card.

        Returns:
            True if the rating was accepted

        Raises:
            InvalidRating: rating not in 1-4
        """
        rating = Rating.parse(rating)
        if self._phase != GamePhase.PRESENTING or not self._show_answer or self._busy:
            return False

        generation = self._generation
        card = self._deck[self._index]
        is_last = self._index + 1 >= len(self._deck)
        now = self.clock()
        response_time_ms = 0
        if self._card_shown_at is not None:
            response_time_ms = max(0, int((now - self._card_shown_at).total_seconds() * 1000))

        self._busy = True
        try:
            await self._save_rating(card, rating, response_time_ms, generation)
            if generation != self._generation:
                return True

            self._studied += 1
            if rating >= CORRECT_RATING_THRESHOLD:
                self._correct += 1

            if self._session is not None:
                await self._save_session_progress(is_last, generation)
        finally:
            # A newer game owns the flag once close or start has run
            if generation == self._generation:
                self._busy = False

        if generation != self._generation:
            return True

        if is_last:
            self._finished_at = self.clock()
            self._phase = GamePhase.COMPLETE
            logger.info(
                "Game complete for %s: %d/%d correct",
                self.scope_id, self._correct, self._studied,
            )
        else:
            self._index += 1
            self._show_answer = False
            self._card_shown_at = self.clock()
        return True

    async def _save_rating(
        self, card: StudyCard, rating: Rating, response_time_ms: int, generation: int
    ) -> None:
        try:
            await self.service.process_response(
                self._user_id, card.phrase.id, self.direction, rating, response_time_ms
            )
        except (StoreUnavailable, AuthenticationRequired) as exc:
            if generation == self._generation:
                self._persistence_failures += 1
            logger.warning("Rating for %s not saved: %s", card.phrase.id, exc)

    async def _save_session_progress(self, is_last: bool, generation: int) -> None:
        session_id = self._session.id
        fields = {
            "cards_studied": self._studied,
            "cards_correct": self._correct,
            "session_duration_seconds": self._elapsed_seconds(),
        }
        try:
            session = await self.service.update_session(session_id, fields)
            if is_last and generation == self._generation:
                session = await self.service.update_session(session_id, {"completed_at": self.clock()})
        except (StoreUnavailable, SessionNotFound) as exc:
            if generation == self._generation:
                self._persistence_failures += 1
            logger.warning("Session %s not updated: %s", session_id, exc)
            return
        if generation == self._generation:
            self._session = session

    async def restart(self) -> bool:
        """Start over with a new deck and a new session."""
        if self._busy or self._phase == GamePhase.LOADING:
            return False
        await self.start()
        return True

    async def retry(self) -> bool:
        """Retry loading after an error."""
        if self._phase != GamePhase.ERROR:
            return False
        await self.start()
        return True

    def close(self) -> None:
        """
        Stop the game. The session is left incomplete; pending writes are
        not cancelled.
        """
        self._generation += 1
        self._busy = False
        self._phase = GamePhase.CLOSED
        self._show_answer = False

    async def handle_key(self, key: str) -> bool:
        """
        Keyboard shortcuts: space flips, 1-4 rate once the answer is shown,
        Escape closes, r retries after an error or restarts when complete.

        Returns:
            True if the key triggered an action
        """
        if key in CLOSE_KEYS:
            if self._phase == GamePhase.CLOSED:
                return False
            self.close()
            return True

        if self._busy:
            return False

        if self._phase == GamePhase.PRESENTING:
            if key in FLIP_KEYS:
                return self.flip()
            if key in RATING_KEYS and self._show_answer:
                return await self.rate(RATING_KEYS[key])
            return False

        if key in RETRY_KEYS:
            if self._phase == GamePhase.ERROR:
                return await self.retry()
            if self._phase == GamePhase.COMPLETE:
                return await self.restart()
        return False

    def _fail(self, kind: ErrorKind, message: str) -> None:
        self._phase = GamePhase.ERROR
        self._error = GameError(kind=kind, message=message)
        logger.info("Game for %s stopped: %s (%s)", self.scope_id, message, kind.value)
