"""
Session Summary - Results report built from the performance ledger.
"""

from typing import Dict, Iterable, List, Optional
from dataclasses import dataclass, field, asdict

from .performance_ledger import AnsweredRecord

RECOMMEND_ACCURACY = 0.7  # Concepts below this accuracy get recommended
RECOMMEND_MIN_ATTEMPTS = 2


def difficulty_label(difficulty: float) -> str:
    """Band a [0, 1] difficulty as easy / medium / hard."""
    if difficulty < 0.4:
        return "easy"
    elif difficulty < 0.7:
        return "medium"
    return "hard"


@dataclass
class SessionSummary:
    questions_attempted: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    skipped_questions: int = 0
    performance_by_concept: Dict[str, Dict[str, int]] = field(default_factory=dict)
    performance_by_difficulty: Dict[str, Dict[str, int]] = field(default_factory=dict)
    time_spent: float = 0.0
    average_confidence: Optional[float] = None
    recommended_concepts: List[str] = field(default_factory=list)
    percent_score: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def summarize(records: Iterable[AnsweredRecord]) -> SessionSummary:
    """Aggregate ledger records into a SessionSummary."""
    records = list(records)
    summary = SessionSummary(
        performance_by_difficulty={
            band: {"correct": 0, "total": 0} for band in ("easy", "medium", "hard")
        }
    )

    confidences = []
    for r in records:
        summary.questions_attempted += 1
        summary.time_spent += r.time_spent

        if r.skipped:
            summary.skipped_questions += 1
        elif r.is_correct:
            summary.correct_answers += 1
        else:
            summary.incorrect_answers += 1

        if not r.skipped:
            confidences.append(r.confidence)

        concept = r.concept or "unknown"
        by_concept = summary.performance_by_concept.setdefault(concept, {"correct": 0, "total": 0})
        by_concept["total"] += 1

        by_band = summary.performance_by_difficulty[difficulty_label(r.difficulty)]
        by_band["total"] += 1

        if r.is_correct:
            by_concept["correct"] += 1
            by_band["correct"] += 1

    if confidences:
        summary.average_confidence = sum(confidences) / len(confidences)

    summary.recommended_concepts = [
        concept for concept, data in summary.performance_by_concept.items()
        if data["total"] >= RECOMMEND_MIN_ATTEMPTS
        and data["correct"] / data["total"] < RECOMMEND_ACCURACY
    ]

    if summary.questions_attempted:
        summary.percent_score = round(summary.correct_answers / summary.questions_attempted * 100)

    return summary
