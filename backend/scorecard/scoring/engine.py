"""Interview scoring engine.

Converts per-question scores into a weighted total, per-criterion averages, a
technical cutoff check and a hire recommendation. There are two entry points:

* ``compute_weighted_score`` grades pre-scored questions (0-100 per question)
  and recommends ``Hire`` / ``Maybe`` / ``No Hire``. A failed technical cutoff
  always forces ``No Hire``.
* ``compute_completion_score`` accumulates marks obtained against maximum
  marks for a finished interview and recommends ``Strongly Recommend`` /
  ``Recommend`` / ``On Hold`` / ``Reject``. The technical cutoff is reported
  but does not change the recommendation.

Nothing in this module performs I/O and nothing raises for degenerate input:
an empty question set scores 0 and still produces a full result.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY_MARKS = {"High": 15, "Medium": 10, "Low": 5}


class ScoringVariant(str, Enum):
    EVALUATE = "evaluate"
    COMPLETION = "completion"


class Recommendation(str, Enum):
    HIRE = "Hire"
    MAYBE = "Maybe"
    NO_HIRE = "No Hire"
    STRONGLY_RECOMMEND = "Strongly Recommend"
    RECOMMEND = "Recommend"
    ON_HOLD = "On Hold"
    REJECT = "Reject"


@dataclass(frozen=True)
class ScoringConfig:
    difficulty_marks: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_DIFFICULTY_MARKS))
    default_marks: int = 10
    technical_criterion: str = "Technical Skills"
    technical_cutoff: int = 50
    hire_threshold: int = 70
    maybe_threshold: int = 50
    strongly_recommend_threshold: int = 80
    recommend_threshold: int = 60
    on_hold_threshold: int = 40
    top_items: int = 5


@dataclass
class QuestionScore:
    """One graded question as seen by the engine."""

    question_number: int
    criterion: str
    marks: float | None
    score: float | None
    question_text: str = ""
    difficulty: str = "Medium"
    candidate_response: str = ""
    strengths: list[str] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)
    reasoning: str = ""
    marks_obtained: float | None = None
    answered: bool = True


@dataclass
class TechnicalCutoff:
    threshold: float
    technical_avg: float | None
    failed: bool

    def as_dict(self) -> dict[str, Any]:
        return {"threshold": self.threshold, "technical_avg": self.technical_avg, "failed": self.failed}


@dataclass
class ScoringResult:
    """Authoritative outcome of one interview attempt."""

    variant: ScoringVariant
    questions: list[dict[str, Any]]
    total_marks: float
    weighted_score: float
    final_score_percent: int
    criterion_averages: dict[str, float]
    technical_cutoff: TechnicalCutoff
    recommendation: str
    summary: str
    key_strengths: list[str]
    areas_for_improvement: list[str]
    questions_evaluated: int
    questions_total: int
    overall_percent: float | None = None
    total_marks_obtained: float | None = None
    degenerate: bool = False

    @property
    def recommendation_key(self) -> str:
        return self.recommendation.lower().replace(" ", "_")

    def to_payload(self) -> dict[str, Any]:
        scoring: dict[str, Any] = {
            "total_marks": self.total_marks,
            "weighted_score": self.weighted_score,
            "final_score": self.final_score_percent,
            "method": "marks_weighted",
            "questions_evaluated": self.questions_evaluated,
            "questions_total": self.questions_total,
        }
        if self.overall_percent is not None:
            scoring["overall_percent"] = self.overall_percent
        if self.total_marks_obtained is not None:
            scoring["total_marks_obtained"] = self.total_marks_obtained

        return {
            "variant": self.variant.value,
            "questions": [dict(row) for row in self.questions],
            "scoring": scoring,
            "criterion_averages": dict(self.criterion_averages),
            "technical_cutoff": self.technical_cutoff.as_dict(),
            "recommendation": self.recommendation,
            "recommendation_key": self.recommendation_key,
            "summary": self.summary,
            "key_strengths": list(self.key_strengths),
            "areas_for_improvement": list(self.areas_for_improvement),
        }


def _to_number(value: Any) -> float:
    """Coerce a score-like value to a finite float; anything unusable is 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def _tidy(value: float) -> float:
    return int(value) if float(value).is_integer() else value


def _quantize(value: float, exponent: str) -> Decimal:
    return Decimal(repr(float(value))).quantize(Decimal(exponent), rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    """Round half up to two decimals."""
    return float(_quantize(_to_number(value), "0.01"))


def round_percent(value: float) -> int:
    """Round half up to the nearest integer."""
    return int(_quantize(_to_number(value), "1"))


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def clamp_score(score: Any) -> float:
    return clamp(_to_number(score), 0.0, 100.0)


def resolve_marks(marks: Any, difficulty: str | None, config: ScoringConfig | None = None) -> float:
    """Explicit positive marks win, then the difficulty mapping, then the default."""
    config = config or ScoringConfig()
    number = _to_number(marks)
    if number > 0:
        return _tidy(number)
    return config.difficulty_marks.get(difficulty or "", config.default_marks)


def top_unique(items: Iterable[str], limit: int = 5) -> list[str]:
    unique = dict.fromkeys(item for item in items if item)
    return list(unique)[:limit]


def recommend_by_percent(percent: float, failed_cutoff: bool, config: ScoringConfig | None = None) -> str:
    config = config or ScoringConfig()
    if failed_cutoff:
        return Recommendation.NO_HIRE.value
    if percent >= config.hire_threshold:
        return Recommendation.HIRE.value
    if percent >= config.maybe_threshold:
        return Recommendation.MAYBE.value
    return Recommendation.NO_HIRE.value


def recommend_by_marks(percent: float, config: ScoringConfig | None = None) -> str:
    config = config or ScoringConfig()
    if percent >= config.strongly_recommend_threshold:
        return Recommendation.STRONGLY_RECOMMEND.value
    if percent >= config.recommend_threshold:
        return Recommendation.RECOMMEND.value
    if percent >= config.on_hold_threshold:
        return Recommendation.ON_HOLD.value
    return Recommendation.REJECT.value


def technical_cutoff(criterion_averages: dict[str, float], config: ScoringConfig | None = None) -> TechnicalCutoff:
    config = config or ScoringConfig()
    technical_avg = criterion_averages.get(config.technical_criterion)
    failed = technical_avg is not None and technical_avg < config.technical_cutoff
    return TechnicalCutoff(threshold=config.technical_cutoff, technical_avg=technical_avg, failed=failed)


def _question_row(question: QuestionScore, marks: float, score: float, contribution: float) -> dict[str, Any]:
    row: dict[str, Any] = {
        "question_number": question.question_number,
        "question_text": question.question_text,
        "criterion": question.criterion,
        "difficulty": question.difficulty,
        "marks": marks,
        "score": _tidy(score),
        "weighted_contribution": contribution,
        "candidate_response": question.candidate_response,
        "strengths": list(question.strengths),
        "gaps": list(question.gaps),
        "evaluation_reasoning": question.reasoning,
    }
    if question.marks_obtained is not None:
        row["marks_obtained"] = round2(question.marks_obtained)
    return row


def compute_weighted_score(
    questions: Iterable[QuestionScore],
    config: ScoringConfig | None = None,
    fallback_total_marks: float = 100,
) -> ScoringResult:
    """Score pre-graded questions and recommend Hire / Maybe / No Hire."""
    config = config or ScoringConfig()
    ordered = sorted(questions, key=lambda q: q.question_number)

    rows: list[dict[str, Any]] = []
    contributions: list[float] = []
    scores_by_criterion: dict[str, list[float]] = {}
    total_marks = 0.0

    for question in ordered:
        marks = resolve_marks(question.marks, question.difficulty, config)
        score = clamp_score(question.score)
        contribution = round2(score / 100 * marks)
        contributions.append(contribution)
        total_marks += marks
        scores_by_criterion.setdefault(question.criterion or "General", []).append(score)
        rows.append(_question_row(question, marks, score, contribution))

    degenerate = not ordered or total_marks <= 0
    if not ordered:
        total_marks = fallback_total_marks
    if degenerate:
        logger.warning(
            "scoring aggregation degenerate",
            extra={"variant": ScoringVariant.EVALUATE.value, "questions": len(ordered), "total_marks": total_marks},
        )

    weighted_score = round2(sum(contributions))
    final_score = 0
    if ordered and total_marks > 0:
        final_score = int(clamp(round_percent(weighted_score / total_marks * 100), 0, 100))

    criterion_averages: dict[str, float] = {
        criterion: round_percent(sum(scores) / len(scores)) for criterion, scores in scores_by_criterion.items()
    }
    cutoff = technical_cutoff(criterion_averages, config)
    recommendation = recommend_by_percent(final_score, cutoff.failed, config)

    answered = sum(1 for q in ordered if q.answered)
    summary = (
        f"Candidate scored {final_score}% overall. {answered}/{len(ordered)} questions answered. "
        f"Recommendation: {recommendation}."
    )

    return ScoringResult(
        variant=ScoringVariant.EVALUATE,
        questions=rows,
        total_marks=_tidy(round2(total_marks)),
        weighted_score=weighted_score,
        final_score_percent=final_score,
        criterion_averages=criterion_averages,
        technical_cutoff=cutoff,
        recommendation=recommendation,
        summary=summary,
        key_strengths=top_unique((s for q in ordered for s in q.strengths), config.top_items),
        areas_for_improvement=top_unique((g for q in ordered for g in q.gaps), config.top_items),
        questions_evaluated=answered,
        questions_total=len(ordered),
        degenerate=degenerate,
    )


def _marks_obtained(question: QuestionScore, max_marks: float) -> float:
    if question.marks_obtained is not None:
        obtained = _to_number(question.marks_obtained)
    elif question.score is not None:
        obtained = clamp_score(question.score) / 100 * max_marks
    else:
        obtained = 0.0
    return clamp(obtained, 0.0, max_marks)


def compute_completion_score(
    evaluations: Iterable[QuestionScore],
    config: ScoringConfig | None = None,
    fallback_total_marks: float = 0,
) -> ScoringResult:
    """Accumulate marks for a finished interview and recommend on the 80/60/40 scale."""
    config = config or ScoringConfig()
    ordered = sorted(evaluations, key=lambda q: q.question_number)

    rows: list[dict[str, Any]] = []
    marks_by_criterion: dict[str, list[float]] = {}
    total_obtained = 0.0
    total_max = 0.0

    for question in ordered:
        max_marks = resolve_marks(question.marks, question.difficulty, config)
        obtained = _marks_obtained(question, max_marks)
        total_obtained += obtained
        total_max += max_marks

        bucket = marks_by_criterion.setdefault(question.criterion or "General", [0.0, 0.0])
        bucket[0] += obtained
        bucket[1] += max_marks

        question_score = round_percent(obtained / max_marks * 100) if max_marks > 0 else 0
        row = _question_row(question, max_marks, question_score, round2(obtained))
        row["marks_obtained"] = round2(obtained)
        rows.append(row)

    degenerate = not ordered or total_max <= 0
    if not ordered:
        total_max = fallback_total_marks
    if degenerate:
        logger.warning(
            "scoring aggregation degenerate",
            extra={"variant": ScoringVariant.COMPLETION.value, "questions": len(ordered), "total_marks": total_max},
        )

    overall = 0.0
    if ordered and total_max > 0:
        overall = clamp(round2(total_obtained / total_max * 100), 0.0, 100.0)

    criterion_averages: dict[str, float] = {
        criterion: round2(obtained / maximum * 100) if maximum > 0 else 0
        for criterion, (obtained, maximum) in marks_by_criterion.items()
    }
    cutoff = technical_cutoff(criterion_averages, config)
    recommendation = recommend_by_marks(overall, config)

    return ScoringResult(
        variant=ScoringVariant.COMPLETION,
        questions=rows,
        total_marks=_tidy(round2(total_max)),
        weighted_score=round2(total_obtained),
        final_score_percent=round_percent(overall),
        criterion_averages=criterion_averages,
        technical_cutoff=cutoff,
        recommendation=recommendation,
        summary=f"Candidate scored {overall:g}% overall. Recommendation: {recommendation}.",
        key_strengths=top_unique((s for q in ordered for s in q.strengths), config.top_items),
        areas_for_improvement=top_unique((g for q in ordered for g in q.gaps), config.top_items),
        questions_evaluated=sum(1 for q in ordered if q.answered),
        questions_total=len(ordered),
        overall_percent=overall,
        total_marks_obtained=round2(total_obtained),
        degenerate=degenerate,
    )
