"""
Performance Ledger - Append-only log of answers within a session.
"""

import time
from typing import Iterator, List, Optional, Tuple
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class AnsweredRecord:
    """One submitted (or skipped) answer. Never mutated after creation."""
    question_id: str
    user_answer_id: Optional[str]
    is_correct: bool
    time_spent: float  # Seconds
    difficulty: float  # Question difficulty at answer time
    confidence: float  # Learner's declared confidence [0, 1]
    timestamp: float  # Unix timestamp
    concept: Optional[str] = None
    skipped: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class PerformanceLedger:
    """
    Append-only answer log.

    No validation happens here; the session controller is responsible for
    not recording the same question twice.
    """

    def __init__(self):
        self._records: List[AnsweredRecord] = []

    def record(self, question_id: str, user_answer_id: Optional[str], is_correct: bool,
               time_spent: float, difficulty: float, confidence: float = 0.5,
               timestamp: Optional[float] = None, concept: Optional[str] = None,
               skipped: bool = False) -> AnsweredRecord:
        """Create a record, append it and return it."""
        entry = AnsweredRecord(
            question_id=question_id,
            user_answer_id=user_answer_id,
            is_correct=is_correct,
            time_spent=max(0.0, time_spent),
            difficulty=difficulty,
            confidence=confidence,
            timestamp=time.time() if timestamp is None else timestamp,
            concept=concept,
            skipped=skipped,
        )
        self._records.append(entry)
        return entry

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[AnsweredRecord]:
        return iter(self._records)

    @property
    def records(self) -> Tuple[AnsweredRecord, ...]:
        return tuple(self._records)

    def last(self) -> Optional[AnsweredRecord]:
        return self._records[-1] if self._records else None
