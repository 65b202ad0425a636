"""Tests for the study service against the in-memory store."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from conftest import NOW, SCOPE, USER, make_phrases
from legendas.errors import AuthenticationRequired, InvalidRating, SessionNotFound, StoreUnavailable
from legendas.fsrs import CardState, Rating, StudyDirection
from legendas.study import StudyService, deck_session_type
from legendas.study.types import CardStudy, Phrase, StudyCard

RECOGNIZE = StudyDirection.RECOGNIZE
PRODUCE = StudyDirection.PRODUCE


def seed_card(store, phrase_id, state, due, stability=5.0, reps=3, lapses=0, direction=RECOGNIZE):
    card = CardStudy(
        id=len(store.card_studies) + 100,
        user_id=USER,
        phrase_id=phrase_id,
        direction=direction,
        due_date=due,
        stability=stability,
        difficulty=5.0,
        reps=reps,
        lapses=lapses,
        state=state,
        last_review=due - timedelta(days=2),
    )
    store.card_studies[card.key] = card
    return card


class TestGuestDecks:
    """Test decks and ratings for unauthenticated callers."""

    async def test_fresh_scope_returns_every_phrase_as_new(self, guest_service, store):
        with patch.object(store, "upsert_card_study", wraps=store.upsert_card_study) as upsert:
            cards = await guest_service.get_due_cards(SCOPE, RECOGNIZE, 20)

        assert [c.phrase.id for c in cards] == ["p0", "p1", "p2"]
        assert all(c.is_new and c.is_due for c in cards)
        assert all(c.card_study is None for c in cards)
        upsert.assert_not_called()

    async def test_guest_deck_respects_limit(self, guest_service):
        cards = await guest_service.get_due_cards(SCOPE, RECOGNIZE, 2)
        assert len(cards) == 2

    async def test_guest_rating_is_discarded(self, guest_service, store, scheduler):
        with patch.object(store, "upsert_card_study", wraps=store.upsert_card_study) as upsert, \
                patch.object(scheduler, "schedule", wraps=scheduler.schedule) as schedule:
            result = await guest_service.process_response(None, "p0", RECOGNIZE, Rating.GOOD, 1200)

        assert result is None
        upsert.assert_not_called()
        schedule.assert_not_called()
        assert store.card_studies == {}

    async def test_guest_cannot_create_session(self, guest_service, store):
        with pytest.raises(AuthenticationRequired):
            await guest_service.create_session(None, SCOPE)
        assert store.sessions == {}

    async def test_guest_has_no_card_progress(self, guest_service):
        assert await guest_service.get_card_progress(None, ["p0", "p1"]) == {}


class TestDueCards:
    """Test due-card selection for signed-in users."""

    async def test_unstudied_phrases_are_implicit_new_cards(self, user_service):
        cards = await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)

        assert [c.phrase.id for c in cards] == ["p0", "p1", "p2"]
        assert all(c.is_new and c.card_study is None for c in cards)

    async def test_priority_order_and_future_cards_excluded(self, user_service, store):
        store.add_phrase(Phrase(id="p3", scope_id=SCOPE, phrase="Olá", translation="Hello", position_in_content=3))
        seed_card(store, "p0", CardState.REVIEW, NOW - timedelta(days=1))
        seed_card(store, "p1", CardState.RELEARNING, NOW - timedelta(minutes=2), lapses=1)
        seed_card(store, "p2", CardState.LEARNING, NOW + timedelta(minutes=8))

        cards = await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)

        assert [c.phrase.id for c in cards] == ["p1", "p0", "p3"]
        assert [c.state for c in cards] == [CardState.RELEARNING, CardState.REVIEW, CardState.NEW]
        assert cards[0].card_study.lapses == 1
        assert not cards[0].is_new and cards[0].is_due
        assert cards[2].is_new

    async def test_earliest_due_first_within_state(self, user_service, store):
        seed_card(store, "p0", CardState.REVIEW, NOW - timedelta(hours=1))
        seed_card(store, "p1", CardState.REVIEW, NOW - timedelta(days=3))
        seed_card(store, "p2", CardState.REVIEW, NOW - timedelta(days=1))

        cards = await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)

        assert [c.phrase.id for c in cards] == ["p1", "p2", "p0"]

    async def test_limit_caps_the_deck(self, user_service):
        assert len(await user_service.get_due_cards(SCOPE, RECOGNIZE, 1)) == 1
        assert await user_service.get_due_cards(SCOPE, RECOGNIZE, 0) == []

    async def test_nothing_due_is_an_empty_list(self, user_service, store):
        for phrase_id in ("p0", "p1", "p2"):
            seed_card(store, phrase_id, CardState.REVIEW, NOW + timedelta(days=4))

        assert await user_service.get_due_cards(SCOPE, RECOGNIZE, 20) == []

    async def test_unknown_scope_is_an_empty_list(self, user_service):
        assert await user_service.get_due_cards("no-such-episode", RECOGNIZE, 20) == []

    async def test_directions_are_scheduled_independently(self, user_service, store):
        for phrase_id in ("p0", "p1", "p2"):
            seed_card(store, phrase_id, CardState.REVIEW, NOW + timedelta(days=4))

        produce = await user_service.get_due_cards(SCOPE, PRODUCE, 20)

        assert len(produce) == 3
        assert all(c.is_new for c in produce)
        assert produce[0].front == "Good morning, how are you?"
        assert produce[0].back == "Bom dia, tudo bem?"

    async def test_other_scopes_are_not_mixed_in(self, user_service, store):
        for phrase in make_phrases("rtp-ep-02", prefix="q"):
            store.add_phrase(phrase)

        cards = await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)

        assert {c.phrase.scope_id for c in cards} == {SCOPE}

    async def test_store_failure_is_raised_not_empty(self, user_service, guest_service, store):
        store.fail_reads = True

        with pytest.raises(StoreUnavailable):
            await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)
        with pytest.raises(StoreUnavailable):
            await guest_service.get_due_cards(SCOPE, RECOGNIZE, 20)

    async def test_os_errors_become_store_unavailable(self, user_service, store):
        async def broken(*args, **kwargs):
            raise ConnectionRefusedError("connection refused")

        with patch.object(store, "fetch_due_card_states", side_effect=broken):
            with pytest.raises(StoreUnavailable) as excinfo:
                await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)
        assert isinstance(excinfo.value.__cause__, ConnectionRefusedError)

    async def test_unexpected_store_errors_become_store_unavailable(self, user_service, store):
        store.fail_reads = True
        store.failure = RuntimeError("HTTP 503 from store API")

        with pytest.raises(StoreUnavailable) as excinfo:
            await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    async def test_session_not_found_passes_through(self, user_service):
        with pytest.raises(SessionNotFound):
            await user_service.update_session("missing", {"cards_studied": 1})


class TestProcessResponse:
    """Test scheduling and persistence of ratings."""

    async def test_first_rating_creates_card_study(self, user_service, store):
        saved = await user_service.process_response(USER, "p0", RECOGNIZE, Rating.GOOD, 2300)

        assert saved.is_persisted
        assert saved.state == CardState.LEARNING
        assert saved.reps == 1
        assert saved.last_rating == Rating.GOOD
        assert saved.due_date == NOW + timedelta(minutes=10)
        assert list(store.card_studies) == [(USER, "p0", RECOGNIZE)]

    async def test_user_falls_back_to_auth_context(self, user_service, store):
        saved = await user_service.process_response(None, "p1", RECOGNIZE, 4)

        assert saved.user_id == USER
        assert saved.state == CardState.REVIEW

    async def test_exactly_one_upsert_per_call(self, user_service, store):
        with patch.object(store, "upsert_card_study", wraps=store.upsert_card_study) as upsert:
            await user_service.process_response(USER, "p0", RECOGNIZE, Rating.HARD)

        upsert.assert_awaited_once()

    async def test_second_rating_replaces_the_first(self, user_service, store, scheduler, clock):
        first = await user_service.process_response(USER, "p0", RECOGNIZE, Rating.GOOD)
        expected = scheduler.schedule(first.memory_state(NOW), Rating.AGAIN, NOW)

        second = await user_service.process_response(USER, "p0", RECOGNIZE, Rating.AGAIN)

        assert len(store.card_studies) == 1
        assert second.id == first.id
        assert second.created_at == first.created_at
        assert second.reps == 2
        assert second.state == expected.state
        assert second.due_date == expected.due
        assert second.last_rating == Rating.AGAIN

    async def test_lapse_is_recorded(self, user_service, store):
        seed_card(store, "p0", CardState.REVIEW, NOW - timedelta(days=1), reps=4)

        saved = await user_service.process_response(USER, "p0", RECOGNIZE, Rating.AGAIN)

        assert saved.state == CardState.RELEARNING
        assert saved.lapses == 1
        assert saved.reps == 5

    async def test_invalid_rating_writes_nothing(self, user_service, store):
        with pytest.raises(InvalidRating):
            await user_service.process_response(USER, "p0", RECOGNIZE, 0)
        assert store.card_studies == {}

    async def test_guest_invalid_rating_still_rejected(self, guest_service, store):
        with pytest.raises(InvalidRating):
            await guest_service.process_response(None, "p0", RECOGNIZE, 5)
        assert store.card_studies == {}

    async def test_failed_upsert_raises(self, user_service, store):
        store.fail_writes = True
        with pytest.raises(StoreUnavailable):
            await user_service.process_response(USER, "p0", RECOGNIZE, Rating.GOOD)

    async def test_rated_card_leaves_the_deck_until_due(self, user_service, clock):
        await user_service.process_response(USER, "p0", RECOGNIZE, Rating.EASY)

        ids = [c.phrase.id for c in await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)]
        assert "p0" not in ids

        clock.advance(days=15)
        ids = [c.phrase.id for c in await user_service.get_due_cards(SCOPE, RECOGNIZE, 20)]
        assert ids[0] == "p0"


class TestSessions:
    """Test study session bookkeeping."""

    async def test_create_session_has_zeroed_counters(self, user_service):
        session = await user_service.create_session(USER, SCOPE)

        assert session.id
        assert session.user_id == USER
        assert session.scope_id == SCOPE
        assert session.session_type == "mixed"
        assert (session.total_cards, session.cards_studied, session.cards_correct) == (0, 0, 0)
        assert session.created_at == NOW
        assert not session.is_complete

    async def test_update_session_patches_fields(self, user_service, clock):
        session = await user_service.create_session(USER, SCOPE, PRODUCE, "new")
        clock.advance(minutes=3)

        updated = await user_service.update_session(session.id, {
            "cards_studied": 2,
            "cards_correct": 1,
            "session_duration_seconds": 180,
            "completed_at": clock(),
        })

        assert updated.direction == PRODUCE
        assert updated.session_type == "new"
        assert updated.cards_studied == 2
        assert updated.cards_correct == 1
        assert updated.is_complete

    async def test_last_write_wins(self, user_service):
        session = await user_service.create_session(USER, SCOPE)
        await user_service.update_session(session.id, {"cards_studied": 5})
        updated = await user_service.update_session(session.id, {"cards_studied": 3})
        assert updated.cards_studied == 3

    async def test_unknown_session(self, user_service):
        with pytest.raises(SessionNotFound):
            await user_service.update_session("missing", {"cards_studied": 1})

    async def test_unknown_field_rejected(self, user_service):
        session = await user_service.create_session(USER, SCOPE)
        with pytest.raises(ValueError):
            await user_service.update_session(session.id, {"user_id": "someone-else"})


class TestStatsAndProgress:
    """Test reporting operations."""

    async def test_stats_count_states_reviews_and_lapses(self, user_service, store):
        seed_card(store, "p0", CardState.REVIEW, NOW + timedelta(days=3), reps=6, lapses=1)
        seed_card(store, "p1", CardState.REVIEW, NOW + timedelta(days=9), reps=4)
        await user_service.process_response(USER, "p2", RECOGNIZE, Rating.GOOD)

        stats = await user_service.get_study_stats(USER)

        assert stats.total == 3
        assert stats.review == 2
        assert stats.learning == 1
        assert stats.new == 0
        assert stats.total_reviews == 11
        assert stats.total_lapses == 1

    async def test_stats_filtered_by_scope(self, user_service, store):
        store.add_phrase(Phrase(id="q0", scope_id="rtp-ep-02", phrase="Sim", translation="Yes"))
        seed_card(store, "p0", CardState.REVIEW, NOW, reps=2)
        seed_card(store, "q0", CardState.LEARNING, NOW, reps=1)

        assert (await user_service.get_study_stats(USER, SCOPE)).total == 1
        assert (await user_service.get_study_stats(USER, "rtp-ep-02")).learning == 1
        assert (await user_service.get_study_stats(USER)).total == 2

    async def test_stats_for_new_user_are_zero(self, user_service):
        stats = await user_service.get_study_stats("nobody")
        assert stats.total == 0
        assert stats.total_reviews == 0

    async def test_card_progress(self, user_service, store):
        seed_card(store, "p0", CardState.REVIEW, NOW + timedelta(days=5), stability=5.0, reps=5, lapses=1)

        progress = await user_service.get_card_progress(USER, ["p0", "p1"], RECOGNIZE)

        assert progress["p0"].progress_percentage == pytest.approx(53.0)
        assert progress["p0"].is_learned
        assert progress["p1"].progress_percentage == 0.0
        assert progress["p1"].state == CardState.NEW
        assert not progress["p1"].is_learned


class TestDeckSessionType:
    """Test classification of decks for new sessions."""

    def _card(self, is_new):
        phrase = make_phrases()[0]
        return StudyCard(phrase=phrase, direction=RECOGNIZE, is_new=is_new)

    def test_all_new(self):
        assert deck_session_type([self._card(True), self._card(True)]) == "new"

    def test_all_review(self):
        assert deck_session_type([self._card(False)]) == "review"

    def test_mixed(self):
        assert deck_session_type([self._card(True), self._card(False)]) == "mixed"


async def test_service_defaults_to_a_guest_with_default_scheduler(store):
    service = StudyService(store)
    assert await service.current_user_id() is None
    assert service.scheduler.w[2] == pytest.approx(3.7145)
