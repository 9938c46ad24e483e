"""
Concept Mastery Tracker - Per-concept proficiency over a session.

Features:
    - Mastery per concept tag, seeded at 0.5
    - Fixed +/-0.1 step per answer, clamped to [0, 1]
    - Review interval derived from mastery (for spaced repetition)
    - Weak / mastered bands
"""

from typing import Dict, Iterable, List, Optional


class ConceptMasteryTracker:
    """Maintains the concept -> mastery mapping."""

    DEFAULT_MASTERY = 0.5
    STEP = 0.1

    # Mastery thresholds
    MASTERY_THRESHOLD = 0.6  # Considered "mastered"
    WEAK_THRESHOLD = 0.4  # Considered "weak"

    # Spaced repetition: interval = BASE ** (mastery * EXPONENT) days (1..32)
    INTERVAL_BASE = 2
    INTERVAL_EXPONENT = 5

    def seed(self, concepts: Iterable[str]) -> Dict[str, float]:
        """Initial mapping with every concept at the default mastery."""
        return {c: self.DEFAULT_MASTERY for c in concepts}

    def update(self, mastery: Dict[str, float], concept: Optional[str],
               is_correct: bool) -> Dict[str, float]:
        """
        Apply one answer to the mapping.

        Returns a new dict; the input is left untouched. Answers to
        questions without a concept tag change nothing.
        """
        updated = dict(mastery)
        if not concept:
            return updated

        current = updated.get(concept, self.DEFAULT_MASTERY)
        adjustment = self.STEP if is_correct else -self.STEP
        updated[concept] = max(0.0, min(1.0, current + adjustment))
        return updated

    def get(self, mastery: Dict[str, float], concept: Optional[str]) -> float:
        """Mastery for a concept, default for untagged or unseen concepts."""
        if not concept:
            return self.DEFAULT_MASTERY
        return mastery.get(concept, self.DEFAULT_MASTERY)

    def optimal_interval_days(self, mastery_value: float) -> float:
        """Days between reviews: 1 day at mastery 0, 32 days at mastery 1."""
        mastery_value = max(0.0, min(1.0, mastery_value))
        return float(self.INTERVAL_BASE ** (mastery_value * self.INTERVAL_EXPONENT))

    def weak_concepts(self, mastery: Dict[str, float], threshold: float = None) -> List[str]:
        threshold = self.WEAK_THRESHOLD if threshold is None else threshold
        return [c for c, m in mastery.items() if m < threshold]

    def mastered_concepts(self, mastery: Dict[str, float], threshold: float = None) -> List[str]:
        threshold = self.MASTERY_THRESHOLD if threshold is None else threshold
        return [c for c, m in mastery.items() if m >= threshold]
