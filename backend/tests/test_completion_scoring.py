from __future__ import annotations

import pytest

from scorecard.scoring.engine import QuestionScore, ScoringVariant, compute_completion_score


def _q(number: int, criterion: str, marks, marks_obtained=None, score=None, **kwargs) -> QuestionScore:
    return QuestionScore(
        question_number=number,
        criterion=criterion,
        marks=marks,
        score=score,
        marks_obtained=marks_obtained,
        **kwargs,
    )


def test_completion_accumulates_marks_obtained() -> None:
    result = compute_completion_score(
        [
            _q(1, "Technical Skills", 15, marks_obtained=12, score=80),
            _q(2, "Communication", 10, marks_obtained=9, score=90),
            _q(3, "Technical Skills", 5, marks_obtained=2.5, score=50),
        ]
    )

    assert result.variant is ScoringVariant.COMPLETION
    assert result.total_marks == 30
    assert result.total_marks_obtained == 23.5
    assert result.overall_percent == 78.33
    assert result.final_score_percent == 78
    assert result.criterion_averages == {"Technical Skills": 72.5, "Communication": 90.0}
    assert result.recommendation == "Recommend"
    assert result.summary == "Candidate scored 78.33% overall. Recommendation: Recommend."


@pytest.mark.parametrize(
    ("obtained", "expected"),
    [(8, "Strongly Recommend"), (6, "Recommend"), (4, "On Hold"), (3.99, "Reject")],
)
def test_completion_recommendation_bands(obtained: float, expected: str) -> None:
    result = compute_completion_score([_q(1, "Communication", 10, marks_obtained=obtained)])

    assert result.recommendation == expected


def test_completion_reports_cutoff_without_overriding_recommendation() -> None:
    result = compute_completion_score(
        [
            _q(1, "Technical Skills", 10, marks_obtained=4),
            _q(2, "Communication", 40, marks_obtained=40),
        ]
    )

    assert result.technical_cutoff.failed is True
    assert result.technical_cutoff.technical_avg == 40.0
    assert result.overall_percent == 88.0
    assert result.recommendation == "Strongly Recommend"


def test_completion_derives_marks_from_score_when_missing() -> None:
    result = compute_completion_score([_q(1, "Communication", None, score=70, difficulty="High")])

    assert result.total_marks == 15
    assert result.total_marks_obtained == 10.5
    assert result.questions[0]["marks_obtained"] == 10.5
    assert result.overall_percent == 70.0


def test_completion_clamps_marks_obtained_to_question_maximum() -> None:
    result = compute_completion_score(
        [
            _q(1, "Communication", 10, marks_obtained=14),
            _q(2, "Communication", 10, marks_obtained=-2),
        ]
    )

    assert [row["marks_obtained"] for row in result.questions] == [10.0, 0.0]
    assert result.overall_percent == 50.0


def test_unevaluated_question_contributes_zero() -> None:
    result = compute_completion_score(
        [
            _q(1, "Communication", 10, marks_obtained=10),
            _q(2, "Communication", 10, answered=False),
        ]
    )

    assert result.total_marks_obtained == 10.0
    assert result.questions_evaluated == 1
    assert result.overall_percent == 50.0
    assert result.recommendation == "On Hold"


def test_completion_with_no_evaluations_is_degenerate() -> None:
    result = compute_completion_score([])

    assert result.degenerate is True
    assert result.total_marks == 0
    assert result.overall_percent == 0
    assert result.recommendation == "Reject"


def test_completion_payload_includes_marks_fields() -> None:
    scoring = compute_completion_score([_q(1, "Communication", 10, marks_obtained=7)]).to_payload()["scoring"]

    assert scoring["overall_percent"] == 70.0
    assert scoring["total_marks_obtained"] == 7.0
    assert scoring["final_score"] == 70
