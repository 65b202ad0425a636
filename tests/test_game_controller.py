"""Tests for the game controller state machine."""

import asyncio

import pytest

from app.game_controller import GameController
from app.session_types import ErrorKind, GamePhase
from conftest import SCOPE, USER
from legendas.errors import InvalidRating
from legendas.fsrs import CardState, Rating, StudyDirection
from legendas.study import StaticAuthContext, StudyService


class GatedService(StudyService):
    """Study service whose ratings wait until the test opens the gate."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = asyncio.Event()
        self.calls = 0

    async def process_response(self, *args, **kwargs):
        self.calls += 1
        await self.gate.wait()
        return await super().process_response(*args, **kwargs)


def make_game(service, clock, limit=20, scope_id=SCOPE):
    return GameController(service, scope_id, StudyDirection.RECOGNIZE, limit=limit, clock=clock)


async def answer(game, rating=Rating.GOOD):
    assert game.flip()
    return await game.rate(rating)


class TestLoading:
    """Test the transition out of Loading."""

    async def test_start_presents_first_card(self, user_service, clock):
        game = make_game(user_service, clock)
        assert game.phase == GamePhase.LOADING

        await game.start()

        assert game.phase == GamePhase.PRESENTING
        assert game.current_index == 0
        assert game.current_card.phrase.id == "p0"
        assert not game.show_answer
        assert game.deck_size == 3
        assert game.progress.remaining == 3

    async def test_signed_in_user_gets_a_session(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()

        session = store.sessions[game.session.id]
        assert session.user_id == USER
        assert session.total_cards == 3
        assert session.cards_studied == 0
        assert session.session_type == "new"
        assert not game.requires_sign_in

    async def test_guest_plays_without_session(self, guest_service, store, clock):
        game = make_game(guest_service, clock)
        await game.start()

        assert game.phase == GamePhase.PRESENTING
        assert game.session is None
        assert game.requires_sign_in
        assert store.sessions == {}

    async def test_empty_deck_is_a_no_cards_error(self, user_service, clock):
        game = make_game(user_service, clock, scope_id="empty-episode")
        await game.start()

        assert game.phase == GamePhase.ERROR
        assert game.error.kind == ErrorKind.NO_CARDS
        assert game.error.is_empty_deck
        assert game.current_card is None

    async def test_store_failure_is_a_distinct_error(self, user_service, store, clock):
        store.fail_reads = True
        game = make_game(user_service, clock)
        await game.start()

        assert game.phase == GamePhase.ERROR
        assert game.error.kind == ErrorKind.STORE_UNAVAILABLE
        assert not game.error.is_empty_deck

    async def test_unexpected_store_error_is_retryable(self, user_service, store, clock):
        store.fail_reads = True
        store.failure = RuntimeError("HTTP 503 from store API")
        game = make_game(user_service, clock)
        await game.start()

        assert game.phase == GamePhase.ERROR
        assert game.error.kind == ErrorKind.STORE_UNAVAILABLE

        store.fail_reads = False
        assert await game.retry()
        assert game.phase == GamePhase.PRESENTING

    async def test_session_creation_failure_is_retryable(self, user_service, store, clock):
        store.fail_writes = True
        game = make_game(user_service, clock)
        await game.start()
        assert game.error.kind == ErrorKind.STORE_UNAVAILABLE

        store.fail_writes = False
        assert await game.retry()
        assert game.phase == GamePhase.PRESENTING

    async def test_retry_after_store_recovers(self, user_service, store, clock):
        store.fail_reads = True
        game = make_game(user_service, clock)
        await game.start()

        store.fail_reads = False
        assert await game.retry()

        assert game.phase == GamePhase.PRESENTING
        assert game.error is None

    async def test_retry_only_from_error(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()
        assert not await game.retry()


class TestPresenting:
    """Test flipping and rating cards."""

    async def test_flip_reveals_without_side_effects(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()

        assert game.flip()
        assert game.show_answer
        assert not game.flip()
        assert store.card_studies == {}

    async def test_rating_before_flip_is_ignored(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()

        assert not await game.rate(Rating.GOOD)
        assert game.current_index == 0
        assert store.card_studies == {}

    async def test_invalid_rating_raises(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()
        game.flip()

        with pytest.raises(InvalidRating):
            await game.rate(9)
        assert game.current_index == 0

    async def test_rating_advances_and_persists(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()

        assert await answer(game, Rating.HARD)

        assert game.current_index == 1
        assert not game.show_answer
        assert game.progress.studied == 1
        assert game.progress.correct == 0
        card = store.card_studies[(USER, "p0", StudyDirection.RECOGNIZE)]
        assert card.state == CardState.LEARNING
        session = store.sessions[game.session.id]
        assert session.cards_studied == 1
        assert session.cards_correct == 0
        assert not session.is_complete

    async def test_good_and_easy_count_as_correct(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()

        await answer(game, Rating.GOOD)
        await answer(game, Rating.AGAIN)
        await answer(game, Rating.EASY)

        assert game.summary.correct == 2
        assert game.summary.accuracy == pytest.approx(200 / 3)

    async def test_persistence_failure_still_advances(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()
        store.fail_writes = True

        assert await answer(game)

        assert game.current_index == 1
        assert game.progress.studied == 1
        assert game.persistence_failures == 2  # rating and session update
        assert store.card_studies == {}

    async def test_unexpected_write_error_still_advances(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()
        store.fail_writes = True
        store.failure = RuntimeError("HTTP 503 from store API")

        assert await answer(game)

        assert game.current_index == 1
        assert game.progress.studied == 1
        assert game.persistence_failures == 2

    async def test_second_rating_ignored_while_first_pending(self, store, scheduler, clock):
        service = GatedService(store, scheduler, StaticAuthContext(USER), clock=clock)
        game = make_game(service, clock)
        await game.start()
        game.flip()

        pending = asyncio.create_task(game.rate(Rating.GOOD))
        await asyncio.sleep(0)
        assert game.is_busy
        assert not await game.rate(Rating.EASY)
        assert not await game.handle_key("4")

        service.gate.set()
        assert await pending

        assert service.calls == 1
        assert not game.is_busy
        assert game.current_index == 1
        assert game.progress.studied == 1
        assert len(store.card_studies) == 1


class TestCompletion:
    """Test finishing, closing and restarting games."""

    async def test_two_card_session_all_good(self, user_service, store, clock):
        game = make_game(user_service, clock, limit=2)
        await game.start()

        clock.advance(seconds=20)
        await answer(game)
        clock.advance(seconds=25)
        await answer(game)

        assert game.phase == GamePhase.COMPLETE
        assert game.current_card is None
        summary = game.summary
        assert (summary.studied, summary.correct, summary.total) == (2, 2, 2)
        assert summary.accuracy == 100.0
        assert summary.duration_seconds == 45

        session = store.sessions[game.session.id]
        assert session.total_cards == 2
        assert session.cards_studied == 2
        assert session.cards_correct == 2
        assert session.session_duration_seconds == 45
        assert session.completed_at == clock()

    async def test_guest_completes_without_writes(self, guest_service, store, clock):
        game = make_game(guest_service, clock)
        await game.start()

        for _ in range(3):
            await answer(game)

        assert game.phase == GamePhase.COMPLETE
        assert game.summary.studied == 3
        assert store.card_studies == {}
        assert store.sessions == {}

    async def test_accuracy_is_zero_without_ratings(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()
        assert game.summary.accuracy == 0.0

    async def test_close_leaves_session_incomplete(self, user_service, store, clock):
        game = make_game(user_service, clock)
        await game.start()
        await answer(game)

        game.close()

        assert game.phase == GamePhase.CLOSED
        assert game.current_card is None
        session = store.sessions[game.session.id]
        assert session.cards_studied == 1
        assert session.total_cards == 3
        assert not session.is_complete

    async def test_close_during_pending_rating_does_not_complete(self, store, scheduler, clock):
        service = GatedService(store, scheduler, StaticAuthContext(USER), clock=clock)
        game = make_game(service, clock, limit=1)
        await game.start()
        game.flip()

        pending = asyncio.create_task(game.rate(Rating.GOOD))
        await asyncio.sleep(0)
        game.close()
        service.gate.set()
        await pending

        assert game.phase == GamePhase.CLOSED
        assert len(store.card_studies) == 1
        assert not store.sessions[game.session.id].is_complete

    async def test_pending_rating_does_not_leak_into_next_game(self, store, scheduler, clock):
        service = GatedService(store, scheduler, StaticAuthContext(USER), clock=clock)
        game = make_game(service, clock)
        await game.start()
        first_session = game.session.id
        game.flip()

        pending = asyncio.create_task(game.rate(Rating.GOOD))
        await asyncio.sleep(0)
        game.close()
        await game.start()
        assert not game.is_busy

        service.gate.set()
        await pending

        assert game.phase == GamePhase.PRESENTING
        assert game.session.id != first_session
        assert game.progress.studied == 0
        assert game.progress.correct == 0
        assert game.current_index == 0
        assert store.sessions[game.session.id].cards_studied == 0
        assert store.sessions[first_session].cards_studied == 0

        game.flip()
        assert await game.rate(Rating.GOOD)
        assert game.progress.studied == 1
        assert store.sessions[game.session.id].cards_studied == 1

    async def test_restart_creates_a_new_session(self, user_service, store, clock):
        game = make_game(user_service, clock, limit=1)
        await game.start()
        first_session = game.session.id
        await answer(game)
        assert game.phase == GamePhase.COMPLETE

        assert await game.restart()

        assert game.phase == GamePhase.PRESENTING
        assert game.session.id != first_session
        assert game.progress.studied == 0
        assert len(store.sessions) == 2


class TestKeyboard:
    """Test keyboard shortcuts."""

    async def test_space_flips_and_digits_rate(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()

        assert not await game.handle_key("3")
        assert await game.handle_key(" ")
        assert game.show_answer
        assert await game.handle_key("3")
        assert game.current_index == 1
        assert game.progress.correct == 1

    async def test_unmapped_keys_ignored(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()
        assert not await game.handle_key("x")
        assert not await game.handle_key("r")

    async def test_escape_closes(self, user_service, clock):
        game = make_game(user_service, clock)
        await game.start()

        assert await game.handle_key("Escape")
        assert game.phase == GamePhase.CLOSED
        assert not await game.handle_key("Escape")
        assert not await game.handle_key(" ")

    async def test_r_retries_from_error_and_restarts_when_complete(self, user_service, store, clock):
        store.fail_reads = True
        game = make_game(user_service, clock, limit=1)
        await game.start()
        store.fail_reads = False

        assert await game.handle_key("r")
        assert game.phase == GamePhase.PRESENTING

        await game.handle_key(" ")
        await game.handle_key("4")
        assert game.phase == GamePhase.COMPLETE

        assert await game.handle_key("r")
        assert game.phase == GamePhase.PRESENTING
