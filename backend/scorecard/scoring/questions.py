"""Interview question set normalization."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from scorecard.scoring.engine import ScoringConfig, resolve_marks

DIFFICULTIES = ("High", "Medium", "Low")


@dataclass(frozen=True)
class Question:
    question_number: int
    text: str
    criterion: str
    difficulty: str
    marks: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "question_number": self.question_number,
            "text": self.text,
            "criterion": self.criterion,
            "difficulty": self.difficulty,
            "marks": self.marks,
        }


def _load_list(raw: Any) -> list[Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            return []
    return raw if isinstance(raw, list) else []


def _normalize_difficulty(value: Any) -> str:
    text = str(value or "").strip().capitalize()
    return text if text in DIFFICULTIES else "Medium"


def normalize_question_set(
    raw_questions: Any,
    selected_criteria: Any = None,
    config: ScoringConfig | None = None,
) -> list[Question]:
    """Number questions 1..n and fill criterion, difficulty and marks defaults.

    Items may be plain strings or objects carrying ``question``/``text``,
    ``criterion``, ``difficulty`` and ``marks``. JSON strings are accepted for
    both arguments; anything unreadable yields an empty set.
    """
    criteria = [str(c) for c in _load_list(selected_criteria) if str(c).strip()]
    default_criterion = criteria[0] if criteria else "General"

    questions: list[Question] = []
    for idx, item in enumerate(_load_list(raw_questions), start=1):
        if isinstance(item, dict):
            text = str(item.get("question") or item.get("text") or "")
            criterion = str(item.get("criterion") or default_criterion)
            difficulty = _normalize_difficulty(item.get("difficulty"))
            marks = resolve_marks(item.get("marks"), difficulty, config)
        else:
            text = str(item)
            criterion = default_criterion
            difficulty = "Medium"
            marks = resolve_marks(None, difficulty, config)
        questions.append(
            Question(question_number=idx, text=text, criterion=criterion, difficulty=difficulty, marks=marks)
        )
    return questions
