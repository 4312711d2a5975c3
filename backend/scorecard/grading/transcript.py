"""Whole-transcript grading and transcript parsing helpers."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Any

from scorecard.ai.openai_chat import ChatJSONClient, OpenAIRequestError, parse_json_payload
from scorecard.grading.base import PerQuestionEvaluation, TranscriptGrade
from scorecard.grading.errors import GradingParseError, UpstreamTransientError
from scorecard.grading.llm import string_list
from scorecard.scoring.engine import clamp, round2
from scorecard.scoring.questions import Question

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer provided"
INAUDIBLE = "[inaudible]"
MIN_QUESTION_MATCH_RATIO = 0.4

TRANSCRIPT_SYSTEM_PROMPT = "You are an expert interview evaluator. Return ONLY valid JSON."


@dataclass
class TranscriptTurn:
    role: str
    text: str


def parse_transcript_turns(transcript: str) -> list[TranscriptTurn]:
    """Split a transcript into ``Interviewer:`` / ``Candidate:`` turns separated by blank lines."""
    turns: list[TranscriptTurn] = []
    for block in (transcript or "").split("\n\n"):
        block = block.strip()
        if block.startswith("Interviewer:"):
            turns.append(TranscriptTurn(role="interviewer", text=block[len("Interviewer:") :].strip()))
        elif block.startswith("Candidate:"):
            turns.append(TranscriptTurn(role="candidate", text=block[len("Candidate:") :].strip()))
    return turns


def match_answer(question_text: str, turns: list[TranscriptTurn]) -> str | None:
    """Return the candidate's reply to the interviewer turn that best matches ``question_text``."""
    words = [word for word in question_text.lower().split() if len(word) > 3]
    if not words:
        return None

    best_idx = -1
    best_ratio = 0.0
    for idx, turn in enumerate(turns):
        if turn.role != "interviewer":
            continue
        lowered = turn.text.lower()
        ratio = sum(1 for word in words if word in lowered) / len(words)
        if ratio > best_ratio:
            best_ratio = ratio
            best_idx = idx

    if best_idx == -1 or best_ratio < MIN_QUESTION_MATCH_RATIO:
        return None

    parts: list[str] = []
    for turn in turns[best_idx + 1 :]:
        if turn.role != "candidate":
            break
        if turn.text and turn.text != INAUDIBLE:
            parts.append(turn.text)
    return " ".join(parts) if parts else None


def extract_answers(questions: list[Question], transcript: str) -> dict[int, str | None]:
    turns = parse_transcript_turns(transcript)
    return {q.question_number: match_answer(q.text, turns) for q in questions}


def build_transcript_prompt(
    questions: list[Question],
    transcript: str,
    job_title: str,
    company_name: str,
    candidate_name: str,
) -> str:
    question_list = json.dumps([q.as_dict() for q in questions], indent=2)
    return (
        "Evaluate this complete interview transcript against every listed question.\n\n"
        f"**Position:** {job_title}\n"
        f"**Company:** {company_name}\n"
        f"**Candidate:** {candidate_name}\n\n"
        f"**Questions:**\n{question_list}\n\n"
        f"**Transcript:**\n{transcript}\n\n"
        "**SCORING GUIDELINES (0-100 scale):**\n"
        "- 80-100: Excellent - Detailed with concrete examples\n"
        "- 60-79: Good - Solid but lacks depth\n"
        "- 40-59: Below Average - Vague or incomplete\n"
        "- Below 40: Poor - Did not answer or irrelevant\n"
        "- 0: No meaningful answer provided\n\n"
        "**CRITICAL RULES:**\n"
        "1. Score ONLY based on what the candidate actually said in the transcript.\n"
        "2. Do NOT invent or assume any information not present in the transcript.\n"
        "3. If a question was not answered, its score must be 0.\n\n"
        "**Return JSON:**\n"
        "{\n"
        '  "questions": [{"question_number": <int>, "score": <number 0-100>, "candidate_response": "...", '
        '"strengths": ["..."], "gaps": ["..."], "evaluation_reasoning": "..."}],\n'
        '  "summary": "...",\n'
        '  "key_strengths": ["..."],\n'
        '  "areas_for_improvement": ["..."]\n'
        "}"
    )


def _question_number(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if number.is_integer() else None


def _score(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return clamp(number, 0.0, 100.0)


def grade_from_payload(
    payload: dict[str, Any],
    questions: list[Question],
    answers: dict[int, str | None],
) -> TranscriptGrade:
    """Join the model's per-question grades back to the known questions by number."""
    returned: dict[int, dict[str, Any]] = {}
    for item in payload.get("questions") or []:
        if not isinstance(item, dict):
            continue
        number = _question_number(item.get("question_number"))
        if number is not None and number not in returned:
            returned[number] = item

    evaluations: list[PerQuestionEvaluation] = []
    for question in questions:
        answer = answers.get(question.question_number)
        item = returned.get(question.question_number)
        if item is None:
            evaluations.append(
                PerQuestionEvaluation(
                    question_number=question.question_number,
                    score=0,
                    marks_obtained=0,
                    candidate_response=answer or NO_ANSWER,
                    reasoning="Question not evaluated",
                    answered=False,
                )
            )
            continue

        score = _score(item.get("score"))
        evaluations.append(
            PerQuestionEvaluation(
                question_number=question.question_number,
                score=score,
                marks_obtained=round2(score / 100 * question.marks),
                candidate_response=str(item.get("candidate_response") or answer or NO_ANSWER),
                strengths=string_list(item.get("strengths")),
                gaps=string_list(item.get("gaps")),
                reasoning=str(item.get("evaluation_reasoning") or ""),
            )
        )

    return TranscriptGrade(
        questions=evaluations,
        summary=str(payload.get("summary") or ""),
        key_strengths=string_list(payload.get("key_strengths")),
        areas_for_improvement=string_list(payload.get("areas_for_improvement")),
    )


class OpenAITranscriptGrader:
    name = "openai"

    def __init__(self, chat: ChatJSONClient, temperature: float = 0.3) -> None:
        self._chat = chat
        self.temperature = temperature

    def grade_transcript(
        self,
        questions: list[Question],
        transcript: str,
        job_title: str = "",
        company_name: str = "",
        candidate_name: str = "",
        request_id: str = "",
    ) -> TranscriptGrade:
        answers = extract_answers(questions, transcript)
        prompt = build_transcript_prompt(questions, transcript, job_title, company_name, candidate_name)
        log_extra = {"request_id": request_id, "stage": "grade_transcript", "questions": len(questions)}
        try:
            result = self._chat.complete(
                TRANSCRIPT_SYSTEM_PROMPT,
                prompt,
                temperature=self.temperature,
                request_id=request_id,
            )
            payload = parse_json_payload(result.text)
            if not isinstance(payload.get("questions"), list):
                raise GradingParseError("Transcript grading response has no questions list", raw_text=result.text[:500])
        except GradingParseError as exc:
            logger.error("transcript grading response unparseable", extra={**log_extra, "error": str(exc)})
            return TranscriptGrade(questions=[])
        except (UpstreamTransientError, OpenAIRequestError) as exc:
            logger.warning("transcript grading request failed", extra={**log_extra, "error": str(exc)})
            return TranscriptGrade(questions=[])

        grade = grade_from_payload(payload, questions, answers)
        logger.info(
            "transcript graded",
            extra={**log_extra, "answered": sum(1 for e in grade.questions if e.answered)},
        )
        return grade


class MockTranscriptGrader:
    """Scores 70 for every question the transcript answers, 0 otherwise."""

    name = "mock"

    def grade_transcript(
        self,
        questions: list[Question],
        transcript: str,
        job_title: str = "",
        company_name: str = "",
        candidate_name: str = "",
        request_id: str = "",
    ) -> TranscriptGrade:
        _ = (job_title, company_name, candidate_name, request_id)
        answers = extract_answers(questions, transcript)
        evaluations = []
        for question in questions:
            answer = answers.get(question.question_number)
            score = 70.0 if answer else 0.0
            evaluations.append(
                PerQuestionEvaluation(
                    question_number=question.question_number,
                    score=score,
                    marks_obtained=round2(score / 100 * question.marks),
                    candidate_response=answer or NO_ANSWER,
                    strengths=["Clear answer"] if answer else [],
                    gaps=[] if answer else [NO_ANSWER],
                    reasoning="Mock transcript evaluation",
                    answered=answer is not None,
                )
            )
        return TranscriptGrade(questions=evaluations, summary="")
