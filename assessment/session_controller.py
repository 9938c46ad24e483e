"""
Session Controller - Drives one adaptive assessment session.

States:
    loading -> active -> complete

On every answer:
    ledger.record -> difficulty -> skill -> concept mastery -> next question

Each controller owns its own copy of the question bank, so stamps written
by one session never leak into another.
"""

import copy
import time
from enum import Enum
from typing import Awaitable, Callable, Dict, Iterable, List, Optional, Set, Union
from dataclasses import dataclass, field

from loguru import logger

from .question_bank import Question, QuestionBank
from .performance_ledger import AnsweredRecord, PerformanceLedger
from .skill_estimator import SkillEstimator
from .concept_mastery import ConceptMasteryTracker
from .difficulty_adapter import DifficultyAdapter
from .question_selector import QuestionSelector
from .session_summary import SessionSummary, summarize


class SessionPhase(str, Enum):
    LOADING = "loading"
    ACTIVE = "active"
    COMPLETE = "complete"


@dataclass
class SessionConfig:
    """Per-session settings supplied by the caller."""
    initial_difficulty: float = 0.5
    max_questions: int = 10
    enable_spaced_repetition: bool = True

    def __post_init__(self):
        if self.max_questions < 0:
            raise ValueError(f"max_questions must be >= 0, got {self.max_questions}")
        self.initial_difficulty = max(0.0, min(1.0, float(self.initial_difficulty)))


@dataclass
class SessionState:
    """Mutable session state. Only the controller writes to it."""
    difficulty: float
    skill: float = SkillEstimator.INITIAL_SKILL
    consecutive_correct: int = 0
    consecutive_incorrect: int = 0
    answered_ids: Set[str] = field(default_factory=set)
    mastery: Dict[str, float] = field(default_factory=dict)
    score: int = 0
    current_index: Optional[int] = None
    complete: bool = False
    question_started_at: Optional[float] = None
    awaiting_advance: bool = False  # Current question answered, next not yet shown


@dataclass
class SessionResults:
    """What the completion callback receives."""
    score: int
    final_difficulty: float
    skill: float
    records: List[AnsweredRecord]
    mastery: Dict[str, float]
    summary: SessionSummary
    weak_concepts: List[str] = field(default_factory=list)
    mastered_concepts: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "final_difficulty": self.final_difficulty,
            "skill": self.skill,
            "records": [r.to_dict() for r in self.records],
            "mastery": dict(self.mastery),
            "summary": self.summary.to_dict(),
            "weak_concepts": list(self.weak_concepts),
            "mastered_concepts": list(self.mastered_concepts),
        }


BankSource = Union[QuestionBank, Iterable[Union[Question, dict]]]


class SessionController:
    """
    Orchestrates one session.

    With auto_advance=True (default) an answer moves straight to the next
    question. With auto_advance=False the answered question stays current
    until the caller invokes advance(), e.g. after showing an explanation.
    """

    def __init__(self, config: Optional[SessionConfig] = None,
                 selector: Optional[QuestionSelector] = None,
                 on_complete: Optional[Callable[[SessionResults], None]] = None,
                 clock: Optional[Callable[[], float]] = None,
                 auto_advance: bool = True):
        self.config = config or SessionConfig()
        self.mastery_tracker = ConceptMasteryTracker()
        self.selector = selector or QuestionSelector(mastery_tracker=self.mastery_tracker)
        self.difficulty_adapter = DifficultyAdapter()
        self.skill_estimator = SkillEstimator()
        self.on_complete = on_complete
        self.clock = clock or time.time
        self.auto_advance = auto_advance

        self.phase = SessionPhase.LOADING
        self.bank = QuestionBank()
        self.ledger = PerformanceLedger()
        self.state = SessionState(difficulty=self.config.initial_difficulty)
        self.results: Optional[SessionResults] = None

    # ==================== Loading ====================

    async def load(self, fetch_bank: Callable[[], Awaitable[BankSource]]) -> SessionPhase:
        """Await the question source once, then start the session."""
        questions = await fetch_bank()
        return self.start(questions)

    def start(self, questions: BankSource) -> SessionPhase:
        """
        Loading -> Active.

        The questions are copied and sorted by ascending difficulty. An
        empty bank goes straight to Complete with score 0.
        """
        if self.phase != SessionPhase.LOADING:
            logger.warning("Session already started; ignoring start()")
            return self.phase

        items = questions.questions if isinstance(questions, QuestionBank) else list(questions)
        parsed = [q if isinstance(q, Question) else Question.from_dict(q) for q in items]
        self.bank = QuestionBank(copy.deepcopy(parsed)).sorted_by_difficulty()

        self._begin()
        return self.phase

    def _begin(self):
        """(Re)initialize session state and serve the first question."""
        self.ledger = PerformanceLedger()
        self.results = None
        self.state = SessionState(
            difficulty=self.config.initial_difficulty,
            mastery=self.mastery_tracker.seed(self.bank.concepts()),
        )

        if not len(self.bank):
            logger.warning("Empty question bank; completing session immediately")
            self._complete()
            return
        if self.config.max_questions == 0:
            self._complete()
            return

        self.phase = SessionPhase.ACTIVE
        logger.debug(
            f"Session started: {len(self.bank)} questions, "
            f"difficulty={self.state.difficulty:.2f}, max={self.config.max_questions}"
        )

        index = self._select_next()
        if index is None:
            self._complete()
        else:
            self._move_to(index)

    # ==================== Queries ====================

    @property
    def current_question(self) -> Optional[Question]:
        if self.state.current_index is None:
            return None
        return self.bank[self.state.current_index]

    @property
    def is_complete(self) -> bool:
        return self.phase == SessionPhase.COMPLETE

    @property
    def answered_count(self) -> int:
        return len(self.state.answered_ids)

    def snapshot(self) -> dict:
        """Learner-safe view of the session (no answer keys)."""
        current = self.current_question
        return {
            "phase": self.phase.value,
            "difficulty": self.state.difficulty,
            "skill": self.state.skill,
            "consecutive_correct": self.state.consecutive_correct,
            "consecutive_incorrect": self.state.consecutive_incorrect,
            "score": self.state.score,
            "answered": self.answered_count,
            "max_questions": self.config.max_questions,
            "mastery": dict(self.state.mastery),
            "awaiting_advance": self.state.awaiting_advance,
            "current_question": current.to_dict(include_answer=False) if current else None,
        }

    # ==================== Answer Processing ====================

    def submit_answer(self, option_id: Optional[str], confidence: float = 0.5,
                      time_spent: Optional[float] = None) -> Optional[bool]:
        """
        Grade the current question and update every component.

        Returns whether the answer was correct, or None when the submission
        was ignored (session not active, or question already answered).
        """
        question = self._answerable_question()
        if question is None:
            return None

        now = self.clock()
        if time_spent is None:
            time_spent = now - (self.state.question_started_at or now)
        time_spent = max(0.0, time_spent)
        confidence = max(0.0, min(1.0, confidence))

        is_correct = question.is_correct(option_id)

        self.ledger.record(
            question_id=question.id,
            user_answer_id=option_id,
            is_correct=is_correct,
            time_spent=time_spent,
            difficulty=question.difficulty,
            confidence=confidence,
            timestamp=now,
            concept=question.concept,
        )
        self.state.answered_ids.add(question.id)

        # Streaks: the matching counter grows, the other resets
        if is_correct:
            self.state.consecutive_correct += 1
            self.state.consecutive_incorrect = 0
        else:
            self.state.consecutive_incorrect += 1
            self.state.consecutive_correct = 0

        self.state.difficulty = self.difficulty_adapter.adjust(
            current_difficulty=self.state.difficulty,
            is_correct=is_correct,
            confidence=confidence,
            time_spent=time_spent,
            consecutive_correct=self.state.consecutive_correct,
            consecutive_incorrect=self.state.consecutive_incorrect,
        )
        self.state.skill = self.skill_estimator.update(self.state.skill, is_correct, confidence)
        self.state.mastery = self.mastery_tracker.update(self.state.mastery, question.concept, is_correct)

        if is_correct:
            question.last_answered_correctly = now
            self.state.score += 1

        self.state.awaiting_advance = True
        if self.auto_advance:
            self.advance()

        return is_correct

    def skip_question(self) -> bool:
        """
        Consume the current question without grading it.

        Difficulty, streaks, skill and mastery stay as they are; the skip
        still counts toward max_questions.
        """
        question = self._answerable_question()
        if question is None:
            return False

        now = self.clock()
        self.ledger.record(
            question_id=question.id,
            user_answer_id=None,
            is_correct=False,
            time_spent=now - (self.state.question_started_at or now),
            difficulty=question.difficulty,
            confidence=0.0,
            timestamp=now,
            concept=question.concept,
            skipped=True,
        )
        self.state.answered_ids.add(question.id)

        self.state.awaiting_advance = True
        if self.auto_advance:
            self.advance()
        return True

    def _answerable_question(self) -> Optional[Question]:
        if self.phase != SessionPhase.ACTIVE:
            return None
        question = self.current_question
        if question is None:
            return None
        if question.id in self.state.answered_ids:
            logger.debug(f"Question {question.id} already answered; ignoring submission")
            return None
        return question

    # ==================== Advancing ====================

    def advance(self) -> bool:
        """
        Move past the answered question.

        Returns True if a new question is now current, False if the session
        completed or there was nothing to advance from.
        """
        if self.phase != SessionPhase.ACTIVE or not self.state.awaiting_advance:
            return False
        self.state.awaiting_advance = False

        if self.answered_count >= self.config.max_questions:
            self._complete()
            return False

        index = self._select_next()
        if index is None:
            self._complete()
            return False

        self._move_to(index)
        return True

    def _select_next(self) -> Optional[int]:
        return self.selector.select_next(
            bank=self.bank,
            answered_ids=self.state.answered_ids,
            target_difficulty=self.state.difficulty,
            mastery=self.state.mastery,
            spaced_repetition=self.config.enable_spaced_repetition,
            now=self.clock(),
        )

    def _move_to(self, index: int):
        self.state.current_index = index
        self.state.question_started_at = self.clock()

    # ==================== Completion & Reset ====================

    def _complete(self):
        self.phase = SessionPhase.COMPLETE
        self.state.complete = True
        self.state.current_index = None
        self.state.awaiting_advance = False

        self.results = SessionResults(
            score=self.state.score,
            final_difficulty=self.state.difficulty,
            skill=self.state.skill,
            records=list(self.ledger.records),
            mastery=dict(self.state.mastery),
            summary=summarize(self.ledger.records),
            weak_concepts=self.mastery_tracker.weak_concepts(self.state.mastery),
            mastered_concepts=self.mastery_tracker.mastered_concepts(self.state.mastery),
        )
        logger.info(
            f"Session complete: score {self.state.score}/{len(self.ledger)}, "
            f"difficulty={self.state.difficulty:.2f}, skill={self.state.skill:.2f}"
        )

        if self.on_complete:
            try:
                self.on_complete(self.results)
            except Exception:
                # The session is already complete; a failing listener must not undo that
                logger.exception("Completion callback failed")

    def reset(self) -> SessionPhase:
        """
        Start over with the same questions.

        Clears score, streaks, ledger, answered set, mastery and the
        "last answered correctly" stamps.
        """
        if self.phase == SessionPhase.LOADING:
            return self.phase
        self.bank.clear_stamps()
        self._begin()
        return self.phase
