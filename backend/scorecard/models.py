"""SQLModel ORM models for Scorecard."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return timezone-aware UTC now timestamp."""
    return datetime.now(timezone.utc)


class InterviewStatus(str, Enum):
    PENDING = "Pending"
    INCOMPLETE = "Incomplete"
    COMPLETED = "Completed"


class InterviewQuestionSet(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    job_id: str = Field(index=True, unique=True)
    selected_criteria_json: str = "[]"
    questions_json: str = "[]"
    created_at: datetime = Field(default_factory=utcnow)


class Application(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    job_id: str = Field(index=True)
    candidate_name: str
    job_title: str = ""
    company_name: str = ""
    current_stage: str = "screening"
    interview_status: InterviewStatus = Field(default=InterviewStatus.PENDING)
    interview_transcript: Optional[str] = None
    interview_score: Optional[int] = None
    interview_recommendation: Optional[str] = None
    interview_summary: Optional[str] = None
    interview_feedback: Optional[str] = None
    interview_evaluations_json: Optional[str] = None
    interview_completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)


class ApplicationStageHistory(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    application_id: int = Field(foreign_key="application.id", index=True)
    from_stage: str
    to_stage: str
    remarks: str = ""
    created_at: datetime = Field(default_factory=utcnow)
