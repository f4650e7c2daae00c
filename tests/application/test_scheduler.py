"""Tests for the FSRS scheduler."""

from dataclasses import replace
from datetime import timedelta

import pytest

from wordflow.application.scheduler import FsrsParameters, Scheduler
from wordflow.domain.constants import DEFAULT_WEIGHTS
from wordflow.domain.errors import InvalidStateError
from wordflow.domain.models import Card, Rating, State, new_card


class TestFsrsParameters:
    def test_defaults(self):
        params = FsrsParameters()
        assert params.weights == DEFAULT_WEIGHTS
        assert len(params.weights) == 17
        assert params.request_retention == 0.9
        assert params.minimum_interval == 1
        assert params.maximum_interval == 36500

    def test_rejects_wrong_weight_count(self):
        with pytest.raises(ValueError, match="17"):
            FsrsParameters(weights=(1.0, 2.0))

    def test_rejects_non_finite_weights(self):
        weights = list(DEFAULT_WEIGHTS)
        weights[3] = float("nan")
        with pytest.raises(ValueError):
            FsrsParameters(weights=tuple(weights))

    @pytest.mark.parametrize("retention", [0, 1, 1.5, -0.1])
    def test_rejects_bad_retention(self, retention):
        with pytest.raises(ValueError):
            FsrsParameters(request_retention=retention)

    def test_rejects_inverted_interval_bounds(self):
        with pytest.raises(ValueError):
            FsrsParameters(minimum_interval=10, maximum_interval=5)

    def test_weights_are_normalized_to_tuple(self):
        params = FsrsParameters(weights=list(DEFAULT_WEIGHTS))
        assert isinstance(params.weights, tuple)


class TestForgettingCurve:
    def test_retrievability_is_ninety_percent_at_stability(self, scheduler):
        assert scheduler.forgetting_curve(10, 10) == pytest.approx(0.9)
        assert scheduler.forgetting_curve(3.5, 3.5) == pytest.approx(0.9)

    def test_power_law_decay(self, scheduler):
        # (1 + 19/81 * t/S) ** -0.5
        assert scheduler.forgetting_curve(0, 5) == 1.0
        assert scheduler.forgetting_curve(81, 19) == pytest.approx(2 ** -0.5)

    def test_next_interval_matches_stability_at_default_retention(self, scheduler):
        assert scheduler.next_interval(13.8206) == 14
        assert scheduler.next_interval(3.7145) == 4
        assert scheduler.next_interval(0.2) == 1

    @pytest.mark.parametrize(
        "stability, expected", [(2.5, 3), (4.5, 5), (3.49, 3), (10.5, 11)]
    )
    def test_next_interval_rounds_halves_up(self, scheduler, stability, expected):
        assert scheduler.next_interval(stability) == expected

    def test_graduation_rounds_halves_up(self, now):
        weights = list(DEFAULT_WEIGHTS)
        weights[2] = 2.5
        scheduler = Scheduler(FsrsParameters(weights=tuple(weights)))

        learning = scheduler.next(new_card("w", "n", now), now, Rating.Good)
        graduated = scheduler.next(learning, now + timedelta(minutes=10), Rating.Good)

        assert graduated.state == State.Review
        assert graduated.scheduled_days == 3

    def test_next_interval_is_capped(self):
        s = Scheduler(FsrsParameters(maximum_interval=30))
        assert s.next_interval(1000) == 30

    def test_card_retrievability(self, scheduler, review_card, now):
        assert scheduler.retrievability(review_card, now) == pytest.approx(0.9)
        assert scheduler.retrievability(new_card("x", "n", now), now) == 1.0


class TestNewCard:
    def test_first_review_initializes_memory_state(self, scheduler, now):
        card = new_card("w", "n", now)
        outcomes = scheduler.repeat(card, now)

        again = outcomes[Rating.Again]
        assert again.state == State.Learning
        assert again.stability == pytest.approx(0.4872)
        assert again.difficulty == pytest.approx(7.6214)
        assert again.reps == 0
        assert again.lapses == 0
        assert again.due == now + timedelta(minutes=1)

        hard = outcomes[Rating.Hard]
        assert hard.state == State.Learning
        assert hard.difficulty == pytest.approx(6.3916)
        assert hard.due == now + timedelta(minutes=5)

        good = outcomes[Rating.Good]
        assert good.state == State.Learning
        assert good.stability == pytest.approx(3.7145)
        assert good.difficulty == pytest.approx(5.1618)
        assert good.reps == 1
        assert good.scheduled_days == 0
        assert good.due == now + timedelta(minutes=10)

        easy = outcomes[Rating.Easy]
        assert easy.state == State.Review
        assert easy.stability == pytest.approx(13.8206)
        assert easy.difficulty == pytest.approx(3.932)
        assert easy.scheduled_days == 14
        assert easy.due == now + timedelta(days=14)

    def test_first_review_has_no_elapsed_days(self, scheduler, now):
        card = new_card("w", "n", now - timedelta(days=40))
        result = scheduler.next(card, now, Rating.Good)
        assert result.elapsed_days == 0
        assert result.last_review == now

    def test_easy_lands_later_than_again(self, scheduler, now):
        outcomes = scheduler.repeat(new_card("w", "n", now), now)
        assert outcomes[Rating.Easy].due > outcomes[Rating.Again].due


class TestLearning:
    @pytest.fixture
    def learning_card(self, scheduler, now):
        return scheduler.next(new_card("w", "n", now), now, Rating.Good)

    def test_graduates_on_good_and_easy(self, scheduler, learning_card, now):
        later = now + timedelta(minutes=10)
        outcomes = scheduler.repeat(learning_card, later)

        assert outcomes[Rating.Good].state == State.Review
        assert outcomes[Rating.Good].scheduled_days == 4
        assert outcomes[Rating.Easy].state == State.Review
        assert outcomes[Rating.Easy].scheduled_days == 5
        assert outcomes[Rating.Good].reps == 2

    def test_stays_in_learning_on_again_and_hard(self, scheduler, learning_card, now):
        later = now + timedelta(minutes=10)
        outcomes = scheduler.repeat(learning_card, later)

        assert outcomes[Rating.Again].state == State.Learning
        assert outcomes[Rating.Again].due == later + timedelta(minutes=5)
        assert outcomes[Rating.Again].reps == learning_card.reps
        assert outcomes[Rating.Hard].state == State.Learning
        assert outcomes[Rating.Hard].due == later + timedelta(minutes=10)
        assert outcomes[Rating.Hard].scheduled_days == 0

    def test_learning_steps_keep_memory_state(self, scheduler, learning_card, now):
        outcomes = scheduler.repeat(learning_card, now + timedelta(minutes=10))
        for outcome in outcomes.values():
            assert outcome.stability == learning_card.stability
            assert outcome.difficulty == learning_card.difficulty

    def test_relearning_returns_to_review(self, scheduler, review_card, now):
        lapsed = scheduler.next(review_card, now, Rating.Again)
        assert lapsed.state == State.Relearning

        later = now + timedelta(minutes=5)
        outcomes = scheduler.repeat(lapsed, later)
        assert outcomes[Rating.Again].state == State.Relearning
        assert outcomes[Rating.Hard].state == State.Relearning
        assert outcomes[Rating.Good].state == State.Review
        assert outcomes[Rating.Good].scheduled_days >= 1
        assert outcomes[Rating.Good].lapses == 1


class TestReview:
    def test_good_after_ten_days(self, scheduler, review_card, now):
        result = scheduler.next(review_card, now, Rating.Good)

        assert result.elapsed_days == 10
        assert result.reps == review_card.reps + 1
        assert result.state == State.Review
        assert result.stability > 10
        assert result.stability == pytest.approx(35.08, abs=0.05)
        assert result.difficulty == pytest.approx(5.005, abs=0.001)
        assert result.scheduled_days == 35
        assert result.due > now
        assert result.due == now + timedelta(days=35)
        assert result.last_review == now

    def test_interval_ordering(self, scheduler, review_card, now):
        outcomes = scheduler.repeat(review_card, now)
        hard = outcomes[Rating.Hard].scheduled_days
        good = outcomes[Rating.Good].scheduled_days
        easy = outcomes[Rating.Easy].scheduled_days
        assert 1 <= hard < good < easy
        assert hard == 16
        assert easy == 82

    def test_difficulty_moves_with_rating(self, scheduler, review_card, now):
        outcomes = scheduler.repeat(review_card, now)
        assert outcomes[Rating.Easy].difficulty < review_card.difficulty
        assert outcomes[Rating.Hard].difficulty > review_card.difficulty
        assert outcomes[Rating.Again].difficulty > outcomes[Rating.Hard].difficulty

    def test_lapse(self, scheduler, review_card, now):
        result = scheduler.next(review_card, now, Rating.Again)

        assert result.state == State.Relearning
        assert result.lapses == review_card.lapses + 1
        assert result.reps == review_card.reps
        assert result.stability < review_card.stability
        assert result.stability == pytest.approx(2.56, abs=0.01)
        assert result.scheduled_days == 0
        assert result.due == now + timedelta(minutes=5)

    def test_lapse_lowers_small_stability_after_long_gap(self, scheduler, review_card, now):
        card = replace(
            review_card,
            stability=0.6,
            difficulty=5.87,
            last_review=now - timedelta(days=100),
        )
        lapsed = scheduler.next(card, now, Rating.Again)
        assert lapsed.stability < card.stability
        assert lapsed.stability == pytest.approx(0.54)

    @pytest.mark.parametrize("stability", [0.5, 2.0, 10.0, 120.0])
    @pytest.mark.parametrize("difficulty", [1.0, 5.0, 10.0])
    @pytest.mark.parametrize("elapsed", [0, 1, 30, 400])
    def test_success_never_lowers_stability(
        self, scheduler, review_card, now, stability, difficulty, elapsed
    ):
        card = replace(
            review_card,
            stability=stability,
            difficulty=difficulty,
            last_review=now - timedelta(days=elapsed),
        )
        outcomes = scheduler.repeat(card, now)
        for rating in (Rating.Hard, Rating.Good, Rating.Easy):
            assert outcomes[rating].stability >= stability
        assert outcomes[Rating.Again].stability < stability
        for outcome in outcomes.values():
            assert 1 <= outcome.difficulty <= 10
            assert outcome.stability >= 0

    @pytest.mark.parametrize("maximum", [1, 30, 36500])
    @pytest.mark.parametrize("stability", [0.1, 10.0, 5000.0])
    def test_intervals_within_bounds(self, review_card, now, maximum, stability):
        scheduler = Scheduler(FsrsParameters(maximum_interval=maximum))
        card = replace(review_card, stability=stability)
        outcomes = scheduler.repeat(card, now)
        for rating in (Rating.Hard, Rating.Good, Rating.Easy):
            assert 1 <= outcomes[rating].scheduled_days <= maximum

    def test_elapsed_days_never_negative(self, scheduler, review_card, now):
        card = replace(review_card, last_review=now + timedelta(days=2))
        assert scheduler.next(card, now, Rating.Good).elapsed_days == 0


class TestContract:
    @pytest.mark.parametrize("state", list(State))
    def test_next_matches_repeat(self, scheduler, review_card, now, state):
        card = replace(review_card, state=state)
        outcomes = scheduler.repeat(card, now)
        for rating in Rating:
            assert scheduler.next(card, now, rating) == outcomes[rating]

    def test_deterministic(self, scheduler, review_card, now):
        first = scheduler.next(review_card, now, Rating.Hard)
        second = scheduler.next(review_card, now, Rating.Hard)
        assert first == second

    def test_input_card_is_not_mutated(self, scheduler, review_card, now):
        snapshot = replace(review_card)
        scheduler.repeat(review_card, now)
        scheduler.next(review_card, now, Rating.Again)
        assert review_card == snapshot

    def test_identity_fields_carried_over(self, scheduler, review_card, now):
        for outcome in scheduler.repeat(review_card, now).values():
            assert outcome.word_id == review_card.word_id
            assert outcome.notebook == review_card.notebook
            assert outcome.created_at == review_card.created_at

    def test_unknown_state_is_fatal(self, scheduler, now):
        card = Card(word_id="x", notebook="n", due=now, state=7)
        with pytest.raises(InvalidStateError):
            scheduler.repeat(card, now)
        with pytest.raises(InvalidStateError):
            scheduler.next(card, now, Rating.Good)

    def test_integer_states_are_accepted(self, scheduler, review_card, now):
        card = replace(review_card, state=2)
        assert scheduler.next(card, now, Rating.Good).state == State.Review

    def test_custom_weights_change_outcome(self, review_card, now):
        weights = list(DEFAULT_WEIGHTS)
        weights[8] = 0.5
        custom = Scheduler(FsrsParameters(weights=tuple(weights)))
        default = Scheduler()
        assert (
            custom.next(review_card, now, Rating.Good).stability
            < default.next(review_card, now, Rating.Good).stability
        )
