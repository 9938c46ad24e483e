"""
Configuration - Environment-driven settings.

Reads from the process environment (and .env via python-dotenv):
    REDIS_HOST, REDIS_PORT, REDIS_PASSWORD
    QUESTION_BANK_PATH
    ADAPTIVE_INITIAL_DIFFICULTY, ADAPTIVE_MAX_QUESTIONS, ADAPTIVE_SPACED_REPETITION
    LOG_LEVEL
"""

import os
import sys
from dotenv import load_dotenv
from loguru import logger

from assessment import SessionConfig

# Load environment variables from .env
load_dotenv()

DEFAULT_BANK_PATH = "data/question_bank.json"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def question_bank_path() -> str:
    return os.getenv("QUESTION_BANK_PATH", DEFAULT_BANK_PATH)


def _env_number(name: str, default, cast):
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return cast(value)
    except ValueError:
        raise ValueError(f"{name} must be a {cast.__name__}, got {value!r}") from None


def session_config_from_env() -> SessionConfig:
    """
    Default SessionConfig, overridable through ADAPTIVE_* variables.

    Raises ValueError naming the variable when a value is unusable.
    """
    max_questions = _env_number("ADAPTIVE_MAX_QUESTIONS", 10, int)
    if max_questions < 0:
        raise ValueError(f"ADAPTIVE_MAX_QUESTIONS must be >= 0, got {max_questions}")

    return SessionConfig(
        initial_difficulty=_env_number("ADAPTIVE_INITIAL_DIFFICULTY", 0.5, float),
        max_questions=max_questions,
        enable_spaced_repetition=_env_bool("ADAPTIVE_SPACED_REPETITION", True),
    )


def configure_logging(level: str = None):
    """Replace loguru's default sink with a compact stderr one."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
