"""Tests for config.py"""

import pytest

from config import session_config_from_env


def test_defaults(monkeypatch):
    for name in ("ADAPTIVE_INITIAL_DIFFICULTY", "ADAPTIVE_MAX_QUESTIONS", "ADAPTIVE_SPACED_REPETITION"):
        monkeypatch.delenv(name, raising=False)

    config = session_config_from_env()
    assert config.initial_difficulty == 0.5
    assert config.max_questions == 10
    assert config.enable_spaced_repetition is True


def test_overrides(monkeypatch):
    monkeypatch.setenv("ADAPTIVE_INITIAL_DIFFICULTY", "0.2")
    monkeypatch.setenv("ADAPTIVE_MAX_QUESTIONS", "3")
    monkeypatch.setenv("ADAPTIVE_SPACED_REPETITION", "off")

    config = session_config_from_env()
    assert config.initial_difficulty == 0.2
    assert config.max_questions == 3
    assert config.enable_spaced_repetition is False


@pytest.mark.parametrize("name,value", [
    ("ADAPTIVE_MAX_QUESTIONS", "ten"),
    ("ADAPTIVE_MAX_QUESTIONS", "-1"),
    ("ADAPTIVE_INITIAL_DIFFICULTY", "hard"),
])
def test_invalid_values_name_the_variable(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        session_config_from_env()
