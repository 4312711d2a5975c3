"""Interview question set endpoints."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from scorecard.db import get_session
from scorecard.models import InterviewQuestionSet
from scorecard.schemas import QuestionRead, QuestionSetRead, QuestionSetWrite
from scorecard.scoring.questions import normalize_question_set
from scorecard.settings import settings

router = APIRouter(prefix="/jobs", tags=["jobs"])


def get_question_set(session: Session, job_id: str) -> InterviewQuestionSet | None:
    return session.exec(select(InterviewQuestionSet).where(InterviewQuestionSet.job_id == job_id)).first()


def _to_read(row: InterviewQuestionSet) -> QuestionSetRead:
    questions = normalize_question_set(row.questions_json, row.selected_criteria_json, settings.scoring_config())
    return QuestionSetRead(
        job_id=row.job_id,
        selected_criteria=json.loads(row.selected_criteria_json),
        questions=[QuestionRead(**q.as_dict()) for q in questions],
        total_marks=sum(q.marks for q in questions),
    )


@router.post("/{job_id}/interview-questions", response_model=QuestionSetRead, status_code=status.HTTP_201_CREATED)
def create_interview_questions(
    job_id: str,
    payload: QuestionSetWrite,
    session: Session = Depends(get_session),
) -> QuestionSetRead:
    if get_question_set(session, job_id):
        raise HTTPException(status_code=409, detail="Interview questions already exist for this job")

    row = InterviewQuestionSet(
        job_id=job_id,
        selected_criteria_json=json.dumps(payload.selected_criteria),
        questions_json=json.dumps(payload.questions),
    )
    session.add(row)
    session.commit()
    session.refresh(row)
    return _to_read(row)


@router.get("/{job_id}/interview-questions", response_model=QuestionSetRead)
def read_interview_questions(job_id: str, session: Session = Depends(get_session)) -> QuestionSetRead:
    row = get_question_set(session, job_id)
    if not row:
        raise HTTPException(status_code=404, detail="Interview questions not found")
    return _to_read(row)
