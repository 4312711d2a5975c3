"""Grader factory/dispatcher and concurrent per-question grading."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from scorecard.ai.openai_chat import ChatJSONClient
from scorecard.grading.base import GradeRequest, Grader, PerQuestionEvaluation, SummaryWriter, TranscriptGrader
from scorecard.grading.llm import MockAnswerGrader, MockSummaryWriter, OpenAIAnswerGrader, OpenAISummaryWriter
from scorecard.grading.transcript import NO_ANSWER, MockTranscriptGrader, OpenAITranscriptGrader
from scorecard.scoring.engine import QuestionScore
from scorecard.scoring.questions import Question
from scorecard.settings import settings

logger = logging.getLogger(__name__)


def _mock_enabled() -> bool:
    return os.getenv("OPENAI_MOCK", "").strip() == "1"


def _chat_client(model: str, api_key: str | None) -> ChatJSONClient:
    return ChatJSONClient(
        model=model,
        api_key=api_key,
        timeout_seconds=settings.openai_timeout_seconds,
        retry_backoff_seconds=settings.openai_retry_backoff_seconds,
    )


def get_answer_grader(api_key: str | None = None) -> Grader:
    if _mock_enabled():
        return MockAnswerGrader()
    return OpenAIAnswerGrader(_chat_client(settings.answer_model, api_key))


def get_transcript_grader(api_key: str | None = None) -> TranscriptGrader:
    if _mock_enabled():
        return MockTranscriptGrader()
    return OpenAITranscriptGrader(_chat_client(settings.transcript_model, api_key))


def get_summary_writer(api_key: str | None = None) -> SummaryWriter:
    if _mock_enabled():
        return MockSummaryWriter()
    return OpenAISummaryWriter(_chat_client(settings.summary_model, api_key))


def grade_answers(
    grader: Grader,
    requests: Iterable[GradeRequest],
    request_id: str = "",
    max_workers: int | None = None,
) -> dict[int, PerQuestionEvaluation]:
    """Grade every request concurrently and return the evaluations keyed by question number."""
    pending = list(requests)
    if not pending:
        return {}
    numbers = [req.question_number for req in pending]
    if len(set(numbers)) != len(numbers):
        raise ValueError("question_number values must be unique")

    workers = max(1, min(max_workers or settings.grading_max_workers, len(pending)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {req.question_number: pool.submit(grader.grade, req, request_id) for req in pending}
        results = {number: future.result() for number, future in futures.items()}

    logger.info(
        "answers graded",
        extra={"request_id": request_id, "stage": "grade_answers", "count": len(results), "workers": workers},
    )
    return results


def grade_transcript_per_question(
    grader: Grader,
    questions: list[Question],
    answers: dict[int, str | None],
    request_id: str = "",
) -> list[PerQuestionEvaluation]:
    """Grade each answered question separately; unanswered ones score 0 without a model call."""
    requests = [
        GradeRequest(
            question_number=q.question_number,
            question=q.text,
            answer=answers[q.question_number] or "",
            criterion=q.criterion,
            difficulty=q.difficulty,
            marks=q.marks,
        )
        for q in questions
        if answers.get(q.question_number)
    ]
    graded = grade_answers(grader, requests, request_id=request_id)

    evaluations: list[PerQuestionEvaluation] = []
    for question in questions:
        evaluation = graded.get(question.question_number)
        if evaluation is None:
            evaluation = PerQuestionEvaluation(
                question_number=question.question_number,
                score=0,
                marks_obtained=0,
                candidate_response=NO_ANSWER,
                answered=False,
            )
        evaluations.append(evaluation)
    return evaluations


def evaluations_to_scores(
    questions: list[Question],
    evaluations: Iterable[PerQuestionEvaluation],
) -> list[QuestionScore]:
    """Join evaluations to their questions by number for the scoring engine."""
    by_number = {q.question_number: q for q in questions}
    scores: list[QuestionScore] = []
    for evaluation in evaluations:
        question = by_number.get(evaluation.question_number)
        if question is None:
            logger.warning("evaluation for unknown question dropped", extra={"question_number": evaluation.question_number})
            continue
        scores.append(
            QuestionScore(
                question_number=question.question_number,
                criterion=question.criterion,
                marks=question.marks,
                score=evaluation.score,
                question_text=question.text,
                difficulty=question.difficulty,
                candidate_response=evaluation.candidate_response,
                strengths=list(evaluation.strengths),
                gaps=list(evaluation.gaps),
                reasoning=evaluation.reasoning,
                marks_obtained=evaluation.marks_obtained,
                answered=evaluation.answered,
            )
        )
    return scores
