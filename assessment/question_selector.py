"""
Question Selector - Picks the next question for the learner.

Features:
    - Difficulty window around the current target
    - Closest-difficulty fallback when the window is empty
    - Spaced-repetition priority (due score) driven by concept mastery
    - Weighted roulette-wheel sampling otherwise
"""

import random
import time
from typing import Dict, List, Optional, Set
from dataclasses import dataclass

from .question_bank import Question, QuestionBank
from .concept_mastery import ConceptMasteryTracker

SECONDS_PER_DAY = 86400


@dataclass
class QuestionCandidate:
    """A question candidate with its selection metrics."""
    index: int  # Position in the bank
    question: Question
    distance: float  # |difficulty - target|
    due_score: float = 0.0
    weight: float = 0.0


class QuestionSelector:
    """
    Chooses the next question index, or None when nothing is left.

    The random source only needs a random() method returning [0, 1),
    so tests can pass a scripted sequence.
    """

    DIFFICULTY_WINDOW = 0.3  # Candidates must be strictly closer than this
    WEIGHT_SMOOTHING = 0.1
    NEVER_CORRECT_DUE_SCORE = 1.0

    def __init__(self, rng=None, mastery_tracker: Optional[ConceptMasteryTracker] = None):
        self.rng = rng if rng is not None else random.Random()
        self.mastery_tracker = mastery_tracker or ConceptMasteryTracker()

    # ==================== Question Selection ====================

    def select_next(self, bank: QuestionBank, answered_ids: Set[str], target_difficulty: float,
                    mastery: Dict[str, float], spaced_repetition: bool = True,
                    now: Optional[float] = None) -> Optional[int]:
        """
        Select the next question index.

        Returns None when every question has been answered; callers treat
        that as the end of the session.
        """
        unanswered = [
            QuestionCandidate(index=i, question=q, distance=abs(q.difficulty - target_difficulty))
            for i, q in enumerate(bank)
            if q.id not in answered_ids
        ]
        if not unanswered:
            return None

        candidates = [c for c in unanswered if c.distance < self.DIFFICULTY_WINDOW]

        if not candidates:
            # min() keeps the first of equal distances, i.e. bank order
            return min(unanswered, key=lambda c: c.distance).index

        if spaced_repetition:
            return self._select_most_due(candidates, mastery, time.time() if now is None else now)
        return self._select_weighted(candidates)

    def _select_most_due(self, candidates: List[QuestionCandidate],
                         mastery: Dict[str, float], now: float) -> int:
        """Never-correct questions first, then the highest due score."""
        best = None
        best_key = None
        for c in candidates:
            c.due_score = self.due_score(c.question, mastery, now)
            never_correct = c.question.last_answered_correctly is None
            key = (never_correct, c.due_score)
            # Strict comparison keeps bank order on ties
            if best_key is None or key > best_key:
                best, best_key = c, key
        return best.index

    def _select_weighted(self, candidates: List[QuestionCandidate]) -> int:
        """Roulette-wheel selection weighted toward the target difficulty."""
        for c in candidates:
            c.weight = 1.0 / (c.distance + self.WEIGHT_SMOOTHING)

        total = sum(c.weight for c in candidates)
        pick = self.rng.random() * total

        cumulative = 0.0
        for c in candidates:
            cumulative += c.weight
            if pick < cumulative:
                return c.index

        # Floating point can leave pick a hair above the last boundary
        return candidates[-1].index

    # ==================== Spaced Repetition ====================

    def due_score(self, question: Question, mastery: Dict[str, float], now: float) -> float:
        """
        How overdue a question is for review.

        Never-correct questions score 1.0. Otherwise it is days since the
        last correct answer over the concept's interval, so a question
        overdue by several intervals scores above 1.
        """
        if question.last_answered_correctly is None:
            return self.NEVER_CORRECT_DUE_SCORE

        days_since = max(0.0, (now - question.last_answered_correctly) / SECONDS_PER_DAY)
        concept_mastery = self.mastery_tracker.get(mastery, question.concept)
        interval = self.mastery_tracker.optimal_interval_days(concept_mastery)
        return days_since / interval
