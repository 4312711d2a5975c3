"""Persistence of scoring results onto application records."""

from __future__ import annotations

import json
import logging

from sqlmodel import Session

from scorecard.models import Application, ApplicationStageHistory, InterviewStatus, utcnow
from scorecard.scoring.engine import ScoringResult

logger = logging.getLogger(__name__)

AI_INTERVIEW_STAGE = "ai_interview"


def persist_scoring_result(
    session: Session,
    application: Application,
    result: ScoringResult,
    feedback: str | None = None,
    complete_interview: bool = False,
) -> Application:
    """Replace the application's scoring snapshot with ``result``.

    Concurrent writers are not coordinated; the last commit wins.
    """
    application.interview_score = result.final_score_percent
    application.interview_recommendation = result.recommendation
    application.interview_summary = result.summary
    application.interview_evaluations_json = json.dumps(result.to_payload())
    if feedback is not None:
        application.interview_feedback = feedback

    if complete_interview:
        percent = result.overall_percent if result.overall_percent is not None else result.final_score_percent
        previous_stage = application.current_stage
        application.interview_status = InterviewStatus.COMPLETED
        application.interview_completed_at = utcnow()
        application.current_stage = AI_INTERVIEW_STAGE
        session.add(
            ApplicationStageHistory(
                application_id=application.id,
                from_stage=previous_stage,
                to_stage=AI_INTERVIEW_STAGE,
                remarks=f"Interview completed: {percent:g}% - {result.recommendation}",
            )
        )

    session.add(application)
    session.commit()
    session.refresh(application)
    logger.info(
        "scoring result stored",
        extra={
            "application_id": application.id,
            "variant": result.variant.value,
            "final_score": result.final_score_percent,
            "recommendation": result.recommendation,
        },
    )
    return application


def load_scoring_payload(application: Application) -> dict | None:
    if not application.interview_evaluations_json:
        return None
    return json.loads(application.interview_evaluations_json)
