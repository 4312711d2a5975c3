"""Application endpoints and transcript evaluation."""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from scorecard.db import get_session
from scorecard.grading.errors import ConfigurationError
from scorecard.grading.transcript import extract_answers
from scorecard.models import Application, InterviewStatus
from scorecard.pipeline.grade import (
    evaluations_to_scores,
    get_answer_grader,
    get_transcript_grader,
    grade_transcript_per_question,
)
from scorecard.pipeline.results import load_scoring_payload, persist_scoring_result
from scorecard.routers.jobs import get_question_set
from scorecard.schemas import (
    ApplicationCreate,
    ApplicationRead,
    EvaluateApplicationRequest,
    EvaluateApplicationResponse,
)
from scorecard.scoring.engine import compute_weighted_score
from scorecard.scoring.questions import normalize_question_set
from scorecard.settings import settings

router = APIRouter(prefix="/applications", tags=["applications"])
logger = logging.getLogger(__name__)

_EVALUATION_MODES = {"transcript", "per_question"}


def _to_read(application: Application) -> ApplicationRead:
    return ApplicationRead(
        id=application.id,
        job_id=application.job_id,
        candidate_name=application.candidate_name,
        job_title=application.job_title,
        company_name=application.company_name,
        current_stage=application.current_stage,
        interview_status=application.interview_status,
        interview_score=application.interview_score,
        interview_recommendation=application.interview_recommendation,
        interview_summary=application.interview_summary,
        interview_feedback=application.interview_feedback,
        interview_completed_at=application.interview_completed_at,
    )


@router.post("", response_model=ApplicationRead, status_code=status.HTTP_201_CREATED)
def create_application(payload: ApplicationCreate, session: Session = Depends(get_session)) -> ApplicationRead:
    application = Application(**payload.model_dump())
    session.add(application)
    session.commit()
    session.refresh(application)
    return _to_read(application)


@router.get("/{application_id}", response_model=ApplicationRead)
def get_application(application_id: int, session: Session = Depends(get_session)) -> ApplicationRead:
    application = session.get(Application, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return _to_read(application)


@router.get("/{application_id}/evaluation")
def get_application_evaluation(application_id: int, session: Session = Depends(get_session)) -> dict:
    application = session.get(Application, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    payload = load_scoring_payload(application)
    if payload is None:
        raise HTTPException(status_code=404, detail="Application has not been evaluated")
    return payload


@router.post("/{application_id}/evaluate", response_model=EvaluateApplicationResponse)
def evaluate_application(
    application_id: int,
    payload: EvaluateApplicationRequest | None = None,
    mode: str = Query("transcript"),
    session: Session = Depends(get_session),
) -> EvaluateApplicationResponse:
    if mode not in _EVALUATION_MODES:
        raise HTTPException(status_code=400, detail=f"Unknown evaluation mode '{mode}'. Use one of: per_question, transcript")

    application = session.get(Application, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")

    request_id = uuid.uuid4().hex
    transcript = application.interview_transcript or (payload.transcript if payload else None)
    if not transcript:
        logger.info("no transcript, skipping evaluation", extra={"request_id": request_id, "application_id": application_id})
        return EvaluateApplicationResponse(ok=True, message="No transcript to evaluate")

    if application.interview_status == InterviewStatus.INCOMPLETE:
        logger.info(
            "interview incomplete, evaluating available answers",
            extra={"request_id": request_id, "application_id": application_id},
        )

    config = settings.scoring_config()
    question_set = get_question_set(session, application.job_id)
    questions = []
    if question_set:
        questions = normalize_question_set(question_set.questions_json, question_set.selected_criteria_json, config)

    logger.info(
        "evaluating transcript",
        extra={
            "request_id": request_id,
            "stage": "evaluate_application",
            "application_id": application_id,
            "mode": mode,
            "questions": len(questions),
            "transcript_length": len(transcript),
        },
    )

    graded_summary = ""
    graded_strengths: list[str] = []
    graded_gaps: list[str] = []
    try:
        if mode == "per_question":
            answers = extract_answers(questions, transcript)
            evaluations = grade_transcript_per_question(get_answer_grader(), questions, answers, request_id=request_id)
        else:
            graded = get_transcript_grader().grade_transcript(
                questions,
                transcript,
                job_title=application.job_title,
                company_name=application.company_name,
                candidate_name=application.candidate_name,
                request_id=request_id,
            )
            evaluations = graded.questions
            graded_summary = graded.summary
            graded_strengths = graded.key_strengths
            graded_gaps = graded.areas_for_improvement
    except ConfigurationError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    result = compute_weighted_score(evaluations_to_scores(questions, evaluations), config, fallback_total_marks=100)
    result = replace(
        result,
        summary=graded_summary or result.summary,
        key_strengths=result.key_strengths or graded_strengths[: config.top_items],
        areas_for_improvement=result.areas_for_improvement or graded_gaps[: config.top_items],
    )
    persist_scoring_result(session, application, result)

    evaluation = result.to_payload()
    return EvaluateApplicationResponse(
        ok=True,
        overall_score=result.final_score_percent,
        recommendation=result.recommendation,
        criterion_averages=result.criterion_averages,
        scoring=evaluation["scoring"],
        evaluation=evaluation,
    )
