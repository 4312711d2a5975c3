"""LLM-backed answer grader and interview summary writer."""

from __future__ import annotations

import logging
import math
from typing import Any

from scorecard.ai.openai_chat import ChatJSONClient, OpenAIRequestError, parse_json_payload
from scorecard.grading.base import GradeRequest, PerQuestionEvaluation, neutral_evaluation
from scorecard.grading.errors import GradingParseError, UpstreamTransientError
from scorecard.scoring.engine import clamp, round2

logger = logging.getLogger(__name__)

ANSWER_SYSTEM_PROMPT = (
    "You are an expert interviewer providing objective, constructive evaluation. Return only valid JSON."
)
SUMMARY_SYSTEM_PROMPT = (
    "You are an expert interviewer summarizing candidate performance. Be concise and professional."
)


def build_answer_prompt(request: GradeRequest) -> str:
    difficulty = request.difficulty or "Medium"
    max_marks = request.marks
    return (
        "You are an expert technical interviewer evaluating a candidate's answer.\n\n"
        f"QUESTION: {request.question}\n"
        f"CRITERION: {request.criterion}\n"
        f"DIFFICULTY: {difficulty}\n"
        f"MAX MARKS: {max_marks}\n\n"
        "CANDIDATE'S ANSWER:\n"
        f"{request.answer}\n\n"
        "Evaluate the answer based on:\n"
        "1. Technical accuracy and correctness\n"
        f"2. Depth of understanding for a {difficulty} difficulty question\n"
        "3. Communication clarity and structure\n"
        "4. Relevance to the question asked\n\n"
        f"For a {difficulty} difficulty question worth {max_marks} marks:\n"
        "- High difficulty: Expects deep expertise, advanced concepts, real-world examples\n"
        "- Medium difficulty: Expects solid understanding, practical knowledge\n"
        "- Low difficulty: Expects basic understanding, clear explanation\n\n"
        "Return ONLY valid JSON (no markdown):\n"
        "{\n"
        '  "score": <number 0-100>,\n'
        f'  "marksObtained": <number out of {max_marks}>,\n'
        '  "feedback": "<overall feedback string>",\n'
        '  "strengths": ["<strength 1>", "<strength 2>"],\n'
        '  "gaps": ["<gap 1>", "<gap 2>"]\n'
        "}"
    )


def _optional_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def evaluation_from_payload(payload: dict[str, Any], request: GradeRequest) -> PerQuestionEvaluation:
    """Normalize a parsed grading response into an evaluation for ``request``."""
    score = _optional_number(payload.get("score"))
    if score is None:
        raise GradingParseError("Grading response is missing a numeric score")
    score = clamp(score, 0.0, 100.0)

    max_marks = float(request.marks)
    marks_obtained = _optional_number(payload.get("marksObtained", payload.get("marks_obtained")))
    if marks_obtained is None:
        marks_obtained = score / 100 * max_marks

    return PerQuestionEvaluation(
        question_number=request.question_number,
        score=score,
        marks_obtained=round2(clamp(marks_obtained, 0.0, max_marks)),
        candidate_response=request.answer,
        strengths=string_list(payload.get("strengths")),
        gaps=string_list(payload.get("gaps")),
        reasoning=str(payload.get("feedback") or payload.get("evaluation_reasoning") or ""),
    )


class OpenAIAnswerGrader:
    name = "openai"

    def __init__(self, chat: ChatJSONClient, temperature: float = 0.1) -> None:
        self._chat = chat
        self.temperature = temperature

    def grade(self, request: GradeRequest, request_id: str = "") -> PerQuestionEvaluation:
        log_extra = {
            "request_id": request_id,
            "question_number": request.question_number,
            "criterion": request.criterion,
            "difficulty": request.difficulty,
        }
        try:
            result = self._chat.complete(
                ANSWER_SYSTEM_PROMPT,
                build_answer_prompt(request),
                temperature=self.temperature,
                request_id=request_id,
            )
            evaluation = evaluation_from_payload(parse_json_payload(result.text), request)
        except GradingParseError as exc:
            logger.error("answer grading response unparseable", extra={**log_extra, "error": str(exc), "raw": exc.raw_text})
        except (UpstreamTransientError, OpenAIRequestError) as exc:
            logger.warning("answer grading request failed", extra={**log_extra, "error": str(exc)})
        else:
            logger.info(
                "answer graded",
                extra={**log_extra, "score": evaluation.score, "marks_obtained": evaluation.marks_obtained},
            )
            return evaluation
        return neutral_evaluation(request)


class OpenAISummaryWriter:
    name = "openai"

    def __init__(self, chat: ChatJSONClient, temperature: float = 0.3) -> None:
        self._chat = chat
        self.temperature = temperature

    def summarize(
        self,
        overall_percent: float,
        recommendation: str,
        criterion_averages: dict[str, float],
        strengths: list[str],
        gaps: list[str],
        request_id: str = "",
    ) -> str:
        criteria_list = ", ".join(f"{criterion}: {score}%" for criterion, score in criterion_averages.items())
        prompt = (
            "Summarize this candidate's interview performance in 2-3 sentences:\n\n"
            f"Overall Score: {overall_percent}%\n"
            f"Recommendation: {recommendation}\n"
            f"Criteria Scores: {criteria_list}\n\n"
            "Key Strengths:\n" + "\n".join(f"- {item}" for item in strengths) + "\n\n"
            "Key Areas to Improve:\n" + "\n".join(f"- {item}" for item in gaps) + "\n\n"
            "Provide a professional summary suitable for a hiring manager."
        )
        try:
            result = self._chat.complete(
                SUMMARY_SYSTEM_PROMPT,
                prompt,
                temperature=self.temperature,
                request_id=request_id,
                json_mode=False,
            )
        except (UpstreamTransientError, OpenAIRequestError) as exc:
            logger.warning("interview summary failed", extra={"request_id": request_id, "error": str(exc)})
            return ""
        return result.text.strip()


class MockAnswerGrader:
    """Deterministic grader for local runs and tests (``OPENAI_MOCK=1``)."""

    name = "mock"

    def grade(self, request: GradeRequest, request_id: str = "") -> PerQuestionEvaluation:
        _ = request_id
        words = len(request.answer.split())
        score = 0.0 if words == 0 else min(100.0, 40.0 + words * 5)
        return PerQuestionEvaluation(
            question_number=request.question_number,
            score=score,
            marks_obtained=round2(score / 100 * request.marks),
            candidate_response=request.answer,
            strengths=["Relevant answer"] if words else [],
            gaps=[] if score >= 70 else ["Needs more depth"],
            reasoning=f"Mock evaluation of {words} words",
        )


class MockSummaryWriter:
    name = "mock"

    def summarize(
        self,
        overall_percent: float,
        recommendation: str,
        criterion_averages: dict[str, float],
        strengths: list[str],
        gaps: list[str],
        request_id: str = "",
    ) -> str:
        _ = (criterion_averages, strengths, gaps, request_id)
        return f"Mock summary: {overall_percent:g}% overall, {recommendation}."
