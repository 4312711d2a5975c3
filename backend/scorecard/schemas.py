"""Request and response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from scorecard.models import InterviewStatus


class QuestionRead(BaseModel):
    question_number: int
    text: str
    criterion: str
    difficulty: str
    marks: float


class QuestionSetWrite(BaseModel):
    selected_criteria: list[str] = Field(default_factory=list)
    questions: list[dict[str, Any] | str] = Field(default_factory=list)


class QuestionSetRead(BaseModel):
    job_id: str
    selected_criteria: list[str]
    questions: list[QuestionRead]
    total_marks: float


class ApplicationCreate(BaseModel):
    job_id: str
    candidate_name: str
    job_title: str = ""
    company_name: str = ""
    interview_transcript: str | None = None


class ApplicationRead(BaseModel):
    id: int
    job_id: str
    candidate_name: str
    job_title: str
    company_name: str
    current_stage: str
    interview_status: InterviewStatus
    interview_score: int | None
    interview_recommendation: str | None
    interview_summary: str | None
    interview_feedback: str | None
    interview_completed_at: datetime | None


class EvaluateAnswerRequest(BaseModel):
    question_number: int = 1
    question: str = ""
    answer: str = ""
    criterion: str = "General"
    difficulty: str | None = None
    marks: float | None = Field(default=None, gt=0)


class AnswerEvaluationRead(BaseModel):
    score: float
    marks_obtained: float
    feedback: str
    strengths: list[str]
    gaps: list[str]
    fallback: bool = False


class EvaluateAnswerResponse(BaseModel):
    success: bool = True
    question_number: int
    criterion: str
    difficulty: str
    max_marks: float
    evaluation: AnswerEvaluationRead


class EvaluateAnswersRequest(BaseModel):
    answers: list[EvaluateAnswerRequest]


class EvaluateAnswersResponse(BaseModel):
    success: bool = True
    evaluations: list[EvaluateAnswerResponse]


class AnswerEvaluationIn(BaseModel):
    score: float | None = None
    marks_obtained: float | None = None
    feedback: str = ""
    reasoning: str = ""
    strengths: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)


class CompletedQuestionIn(BaseModel):
    question_number: int | None = None
    question: str = ""
    answer: str = ""
    criterion: str | None = None
    difficulty: str | None = None
    max_marks: float | None = None
    evaluation: AnswerEvaluationIn | None = None


class CompleteInterviewRequest(BaseModel):
    application_id: int
    evaluations: list[CompletedQuestionIn] = Field(default_factory=list)


class CompleteInterviewResponse(BaseModel):
    success: bool = True
    application_id: int
    overall_score: float
    final_score: int
    total_marks_obtained: float
    total_max_marks: float
    recommendation: str
    summary: str
    evaluation: dict[str, Any]


class EvaluateApplicationRequest(BaseModel):
    transcript: str | None = None


class EvaluateApplicationResponse(BaseModel):
    ok: bool = True
    message: str | None = None
    overall_score: int | None = None
    recommendation: str | None = None
    criterion_averages: dict[str, float] = Field(default_factory=dict)
    scoring: dict[str, Any] | None = None
    evaluation: dict[str, Any] | None = None
