"""Grader interfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from scorecard.scoring.questions import Question


@dataclass
class GradeRequest:
    question_number: int
    question: str
    answer: str
    criterion: str = "General"
    difficulty: str = "Medium"
    marks: float = 10


@dataclass
class PerQuestionEvaluation:
    question_number: int
    score: float
    marks_obtained: float
    candidate_response: str = ""
    strengths: list[str] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)
    reasoning: str = ""
    answered: bool = True
    fallback: bool = False


@dataclass
class TranscriptGrade:
    questions: list[PerQuestionEvaluation]
    summary: str = ""
    key_strengths: list[str] = field(default_factory=list)
    areas_for_improvement: list[str] = field(default_factory=list)


class Grader(Protocol):
    """Grades one free-text answer against a rubric."""

    name: str

    def grade(self, request: GradeRequest, request_id: str = "") -> PerQuestionEvaluation:
        """Return the evaluation for a single answer."""


class TranscriptGrader(Protocol):
    """Grades every question of an interview from one transcript."""

    name: str

    def grade_transcript(
        self,
        questions: list[Question],
        transcript: str,
        job_title: str = "",
        company_name: str = "",
        candidate_name: str = "",
        request_id: str = "",
    ) -> TranscriptGrade:
        """Return per-question evaluations for the transcript."""


class SummaryWriter(Protocol):
    name: str

    def summarize(
        self,
        overall_percent: float,
        recommendation: str,
        criterion_averages: dict[str, float],
        strengths: list[str],
        gaps: list[str],
        request_id: str = "",
    ) -> str:
        """Return a short hiring-manager summary."""


def neutral_evaluation(request: GradeRequest) -> PerQuestionEvaluation:
    """Default used when the grading model's answer cannot be used."""
    return PerQuestionEvaluation(
        question_number=request.question_number,
        score=50,
        marks_obtained=request.marks * 0.5,
        candidate_response=request.answer,
        strengths=["Answer provided"],
        gaps=["Could not parse AI evaluation"],
        reasoning="Unable to fully evaluate response",
        fallback=True,
    )
