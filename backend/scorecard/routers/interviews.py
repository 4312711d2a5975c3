"""Live interview grading and completion endpoints."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from scorecard.db import get_session
from scorecard.grading.base import GradeRequest, PerQuestionEvaluation
from scorecard.grading.errors import ConfigurationError
from scorecard.models import Application
from scorecard.pipeline.grade import get_answer_grader, get_summary_writer, grade_answers
from scorecard.pipeline.results import persist_scoring_result
from scorecard.schemas import (
    AnswerEvaluationRead,
    CompleteInterviewRequest,
    CompleteInterviewResponse,
    EvaluateAnswerRequest,
    EvaluateAnswerResponse,
    EvaluateAnswersRequest,
    EvaluateAnswersResponse,
)
from scorecard.scoring.engine import QuestionScore, compute_completion_score, resolve_marks
from scorecard.settings import settings

router = APIRouter(prefix="/interview", tags=["interview"])
logger = logging.getLogger(__name__)


def _grade_request(payload: EvaluateAnswerRequest) -> GradeRequest:
    if not payload.question.strip() or not payload.answer.strip():
        raise HTTPException(status_code=400, detail="question and answer are required")
    difficulty = payload.difficulty or "Medium"
    return GradeRequest(
        question_number=payload.question_number,
        question=payload.question,
        answer=payload.answer,
        criterion=payload.criterion,
        difficulty=difficulty,
        marks=resolve_marks(payload.marks, difficulty, settings.scoring_config()),
    )


def _to_response(request: GradeRequest, evaluation: PerQuestionEvaluation) -> EvaluateAnswerResponse:
    return EvaluateAnswerResponse(
        question_number=request.question_number,
        criterion=request.criterion,
        difficulty=request.difficulty,
        max_marks=request.marks,
        evaluation=AnswerEvaluationRead(
            score=evaluation.score,
            marks_obtained=evaluation.marks_obtained,
            feedback=evaluation.reasoning,
            strengths=evaluation.strengths,
            gaps=evaluation.gaps,
            fallback=evaluation.fallback,
        ),
    )


@router.post("/evaluate-answer", response_model=EvaluateAnswerResponse)
def evaluate_answer(payload: EvaluateAnswerRequest) -> EvaluateAnswerResponse:
    request = _grade_request(payload)
    request_id = uuid.uuid4().hex
    try:
        grader = get_answer_grader()
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    evaluation = grader.grade(request, request_id=request_id)
    return _to_response(request, evaluation)


@router.post("/evaluate-answers", response_model=EvaluateAnswersResponse)
def evaluate_answers(payload: EvaluateAnswersRequest) -> EvaluateAnswersResponse:
    requests = [_grade_request(item) for item in payload.answers]
    request_id = uuid.uuid4().hex
    try:
        grader = get_answer_grader()
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    try:
        graded = grade_answers(grader, requests, request_id=request_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return EvaluateAnswersResponse(
        evaluations=[_to_response(r, graded[r.question_number]) for r in sorted(requests, key=lambda r: r.question_number)]
    )


@router.post("/complete", response_model=CompleteInterviewResponse)
def complete_interview(payload: CompleteInterviewRequest, session: Session = Depends(get_session)) -> CompleteInterviewResponse:
    if not payload.evaluations:
        raise HTTPException(status_code=400, detail="evaluations are required")

    application = session.get(Application, payload.application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    request_id = uuid.uuid4().hex
    config = settings.scoring_config()
    scores: list[QuestionScore] = []
    for idx, item in enumerate(payload.evaluations, start=1):
        graded = item.evaluation
        scores.append(
            QuestionScore(
                question_number=item.question_number or idx,
                criterion=item.criterion or "General",
                marks=item.max_marks,
                score=graded.score if graded else None,
                question_text=item.question,
                difficulty=item.difficulty or "Medium",
                candidate_response=item.answer,
                strengths=list(graded.strengths) if graded else [],
                gaps=list(graded.gaps) if graded else [],
                reasoning=(graded.feedback or graded.reasoning) if graded else "",
                marks_obtained=graded.marks_obtained if graded else None,
                answered=graded is not None,
            )
        )

    result = compute_completion_score(scores, config)

    try:
        summary = get_summary_writer().summarize(
            result.overall_percent or 0,
            result.recommendation,
            result.criterion_averages,
            result.key_strengths,
            result.areas_for_improvement,
            request_id=request_id,
        )
    except ConfigurationError:
        logger.warning("no summary credentials, using template summary", extra={"request_id": request_id})
        summary = ""
    if summary:
        result = replace(result, summary=summary)

    overall = result.overall_percent or 0
    persist_scoring_result(
        session,
        application,
        result,
        feedback=f"Overall: {overall:g}% - {result.recommendation}",
        complete_interview=True,
    )
    logger.info(
        "interview completed",
        extra={
            "request_id": request_id,
            "application_id": application.id,
            "overall_percent": overall,
            "recommendation": result.recommendation,
        },
    )

    return CompleteInterviewResponse(
        application_id=application.id,
        overall_score=overall,
        final_score=result.final_score_percent,
        total_marks_obtained=result.total_marks_obtained or 0,
        total_max_marks=result.total_marks,
        recommendation=result.recommendation,
        summary=result.summary,
        evaluation=result.to_payload(),
    )
