"""Tests for assessment/difficulty_adapter.py"""

import itertools

import pytest

from assessment import DifficultyAdapter


@pytest.fixture
def adapter():
    return DifficultyAdapter()


def test_fast_confident_correct_answer_doubles_step(adapter):
    # 0.1 * (0.5 + 1.0 * 0.5) * min(30 / 10, 2) = 0.2
    new = adapter.adjust(0.3, True, confidence=1.0, time_spent=10,
                         consecutive_correct=1, consecutive_incorrect=0)
    assert new == pytest.approx(0.5)


def test_incorrect_streak_amplifies_step(adapter):
    first = adapter.adjust(0.5, False, confidence=0.5, time_spent=30,
                           consecutive_correct=0, consecutive_incorrect=1)
    assert 0.5 - first == pytest.approx(0.075)

    second = adapter.adjust(first, False, confidence=0.5, time_spent=30,
                            consecutive_correct=0, consecutive_incorrect=2)
    assert first - second == pytest.approx(0.07875)
    assert first - second > 0.5 - first


def test_correct_streak_of_three(adapter):
    # 0.1 * (1 + 0.05 * 2) * 1.0, at average speed
    new = adapter.adjust(0.2, True, confidence=1.0, time_spent=30,
                         consecutive_correct=3, consecutive_incorrect=0)
    assert new == pytest.approx(0.2 + 0.11)


def test_low_confidence_guess_raises_less(adapter):
    guess = adapter.adjust(0.5, True, confidence=0.0, time_spent=30,
                           consecutive_correct=1, consecutive_incorrect=0)
    sure = adapter.adjust(0.5, True, confidence=1.0, time_spent=30,
                          consecutive_correct=1, consecutive_incorrect=0)
    assert guess == pytest.approx(0.55)
    assert sure == pytest.approx(0.6)


def test_confident_mistake_lowers_more(adapter):
    confident = adapter.adjust(0.5, False, confidence=1.0, time_spent=30,
                               consecutive_correct=0, consecutive_incorrect=1)
    unsure = adapter.adjust(0.5, False, confidence=0.0, time_spent=30,
                            consecutive_correct=0, consecutive_incorrect=1)
    assert confident == pytest.approx(0.45)
    assert unsure == pytest.approx(0.4)


def test_slow_incorrect_answer_is_damped(adapter):
    # 60s -> ratio 0.5
    new = adapter.adjust(0.5, False, confidence=0.5, time_spent=60,
                         consecutive_correct=0, consecutive_incorrect=1)
    assert new == pytest.approx(0.5 - 0.0375)

    # Damping bottoms out at 0.5
    very_slow = adapter.adjust(0.5, False, confidence=0.5, time_spent=600,
                               consecutive_correct=0, consecutive_incorrect=1)
    assert very_slow == pytest.approx(new)


def test_latency_only_applies_in_one_direction(adapter):
    slow_correct = adapter.adjust(0.5, True, confidence=1.0, time_spent=120,
                                  consecutive_correct=1, consecutive_incorrect=0)
    fast_incorrect = adapter.adjust(0.5, False, confidence=0.0, time_spent=5,
                                    consecutive_correct=0, consecutive_incorrect=1)
    assert slow_correct == pytest.approx(0.6)
    assert fast_incorrect == pytest.approx(0.4)


def test_zero_time_counts_as_fast(adapter):
    new = adapter.adjust(0.5, True, confidence=1.0, time_spent=0,
                         consecutive_correct=1, consecutive_incorrect=0)
    assert new == pytest.approx(0.7)


def test_result_always_within_bounds(adapter):
    grid = itertools.product(
        [0.0, 0.05, 0.5, 0.95, 1.0],   # current
        [True, False],
        [0.0, 0.5, 1.0],               # confidence
        [0, 0.001, 30, 10_000],        # time
        [0, 1, 5, 50],                 # streak
    )
    for current, correct, conf, seconds, streak in grid:
        new = adapter.adjust(current, correct, conf, seconds,
                             streak if correct else 0,
                             0 if correct else streak)
        assert 0.0 <= new <= 1.0
        if correct:
            assert new >= current
        else:
            assert new <= current


def test_out_of_range_inputs_are_sanitized(adapter):
    assert adapter.adjust(1.7, True, 3.0, -5, 100, 0) == 1.0
    assert adapter.adjust(-0.4, False, -1.0, -5, 0, 100) == 0.0
