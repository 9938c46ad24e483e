"""
Question Bank - The ordered set of questions a session draws from.

Features:
    - Question records with difficulty on a [0, 1] scale
    - Optional concept tag and free-form tags per question
    - Loading from JSON files or plain dicts (several key spellings accepted)
    - Per-question "last answered correctly" stamp (the only mutable field)
"""

import json
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Union
from dataclasses import dataclass, field


class QuestionBankError(Exception):
    """Raised when question data cannot be loaded."""


@dataclass
class QuestionOption:
    """A single answer option."""
    id: str
    text: str


@dataclass
class Question:
    """A multiple-choice question with adaptive metadata."""
    id: str
    prompt: str
    options: List[QuestionOption]
    correct_option_id: Optional[str]
    difficulty: float  # 0 = trivial, 1 = hardest
    concept: Optional[str] = None
    tags: Set[str] = field(default_factory=set)
    explanation: Optional[str] = None
    last_answered_correctly: Optional[float] = None  # Unix timestamp

    def is_correct(self, option_id: Optional[str]) -> bool:
        """
        Grade an answer.

        A question without a correct option id never grades as correct.
        """
        if self.correct_option_id is None or option_id is None:
            return False
        return str(option_id) == str(self.correct_option_id)

    @property
    def is_malformed(self) -> bool:
        return self.correct_option_id is None

    # ==================== Serialization ====================

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        """
        Build a question from a loosely-shaped dict.

        Accepts "prompt"/"question"/"text", "correct_option_id"/"correctOptionId"
        and "concept"/"topic"/"concept_id". Options may be dicts or strings;
        strings get ids "a", "b", "c", ...
        """
        if not isinstance(data, dict):
            raise QuestionBankError(f"Question must be an object: {data!r}")
        if "id" not in data:
            raise QuestionBankError(f"Question is missing an id: {data!r}")

        try:
            options = []
            for i, opt in enumerate(data.get("options") or []):
                if isinstance(opt, dict):
                    options.append(QuestionOption(id=str(opt["id"]), text=str(opt.get("text", ""))))
                else:
                    options.append(QuestionOption(id=chr(ord("a") + i), text=str(opt)))
            tags = set(data.get("tags") or [])
        except (KeyError, TypeError) as e:
            raise QuestionBankError(f"Question {data['id']} has malformed options or tags: {e!r}") from e

        correct = data.get("correct_option_id", data.get("correctOptionId"))
        prompt = data.get("prompt") or data.get("question") or data.get("text") or ""
        concept = data.get("concept") or data.get("topic") or data.get("concept_id")

        try:
            difficulty = float(data.get("difficulty", 0.5))
        except (TypeError, ValueError):
            raise QuestionBankError(f"Question {data['id']} has a non-numeric difficulty")

        return cls(
            id=str(data["id"]),
            prompt=prompt,
            options=options,
            correct_option_id=str(correct) if correct is not None else None,
            difficulty=max(0.0, min(1.0, difficulty)),
            concept=concept,
            tags=tags,
            explanation=data.get("explanation"),
            last_answered_correctly=data.get("last_answered_correctly"),
        )

    def to_dict(self, include_answer: bool = True) -> dict:
        """Serialize for JSON. Pass include_answer=False for learner-facing payloads."""
        data = {
            "id": self.id,
            "prompt": self.prompt,
            "options": [{"id": o.id, "text": o.text} for o in self.options],
            "difficulty": self.difficulty,
            "concept": self.concept,
            "tags": sorted(self.tags),
        }
        if include_answer:
            data["correct_option_id"] = self.correct_option_id
            data["explanation"] = self.explanation
            data["last_answered_correctly"] = self.last_answered_correctly
        return data


class QuestionBank:
    """
    Ordered, index-addressable collection of questions.

    The order is meaningful: the selector breaks ties by bank position.
    """

    def __init__(self, questions: Optional[List[Question]] = None):
        self.questions: List[Question] = list(questions or [])

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]

    # ==================== Query Methods ====================

    def concepts(self) -> List[str]:
        """Distinct concept tags in bank order."""
        seen: Dict[str, None] = {}
        for q in self.questions:
            if q.concept:
                seen.setdefault(q.concept, None)
        return list(seen)

    def malformed(self) -> List[Question]:
        """Questions without a correct option id."""
        return [q for q in self.questions if q.is_malformed]

    # ==================== Ordering & Stamps ====================

    def sorted_by_difficulty(self) -> "QuestionBank":
        """New bank sorted by ascending difficulty (stable)."""
        return QuestionBank(sorted(self.questions, key=lambda q: q.difficulty))

    def clear_stamps(self):
        """Forget every "last answered correctly" stamp."""
        for q in self.questions:
            q.last_answered_correctly = None

    # ==================== Loading ====================

    @classmethod
    def from_dicts(cls, items: List[dict]) -> "QuestionBank":
        return cls([Question.from_dict(item) for item in items])

    @classmethod
    def from_file(cls, file_path: Union[str, Path]) -> "QuestionBank":
        """
        Load a bank from a JSON file.

        The file holds either a list of questions or {"questions": [...]}.
        """
        path = Path(file_path)
        if not path.exists():
            raise QuestionBankError(f"Question bank not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise QuestionBankError(f"Invalid JSON in {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("questions", [])
        if not isinstance(data, list):
            raise QuestionBankError(f"Expected a list of questions in {path}")

        return cls.from_dicts(data)
