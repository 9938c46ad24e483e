"""
Assessment module - Adaptive question selection, difficulty and mastery tracking.

Components:
    - question_bank: Question records and the per-session bank
    - performance_ledger: Append-only answer log
    - skill_estimator: Running skill estimate (moving average)
    - concept_mastery: Per-concept mastery and review intervals
    - difficulty_adapter: Streak/confidence/latency-aware difficulty steps
    - question_selector: Difficulty window, spaced repetition, weighted sampling
    - session_summary: End-of-session results report
    - session_controller: loading -> active -> complete state machine
"""

from .question_bank import Question, QuestionOption, QuestionBank, QuestionBankError
from .performance_ledger import AnsweredRecord, PerformanceLedger
from .skill_estimator import SkillEstimator
from .concept_mastery import ConceptMasteryTracker
from .difficulty_adapter import DifficultyAdapter
from .question_selector import QuestionSelector
from .session_summary import SessionSummary, summarize, difficulty_label
from .session_controller import (
    SessionConfig,
    SessionController,
    SessionPhase,
    SessionResults,
    SessionState,
)

__all__ = [
    "Question",
    "QuestionOption",
    "QuestionBank",
    "QuestionBankError",
    "AnsweredRecord",
    "PerformanceLedger",
    "SkillEstimator",
    "ConceptMasteryTracker",
    "DifficultyAdapter",
    "QuestionSelector",
    "SessionSummary",
    "summarize",
    "difficulty_label",
    "SessionConfig",
    "SessionController",
    "SessionPhase",
    "SessionResults",
    "SessionState",
]
