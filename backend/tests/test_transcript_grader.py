from __future__ import annotations

import json

from scorecard.ai.openai_chat import ChatJSONClient
from scorecard.grading.transcript import (
    MockTranscriptGrader,
    OpenAITranscriptGrader,
    extract_answers,
    grade_from_payload,
    match_answer,
    parse_transcript_turns,
)
from scorecard.pipeline.grade import evaluations_to_scores
from scorecard.scoring.engine import compute_weighted_score
from scorecard.scoring.questions import normalize_question_set

TRANSCRIPT = (
    "Interviewer: Describe your experience with distributed systems design?\n\n"
    "Candidate: I built event-driven services.\n\n"
    "Candidate: Mostly on Kafka.\n\n"
    "Interviewer: Tell me about a conflict you resolved within your team.\n\n"
    "Candidate: [inaudible]\n\n"
    "Candidate: We disagreed about deadlines.\n\n"
    "Interviewer: Thanks, that's all."
)

QUESTIONS = normalize_question_set(
    [
        {"question": "Describe your experience with distributed systems design", "criterion": "Technical Skills", "difficulty": "High"},
        {"question": "Tell me about a conflict you resolved within your team", "criterion": "Communication", "difficulty": "Low"},
        "Where do you see yourself growing professionally",
    ],
    ["Problem Solving"],
)


def _grader(fake_openai, outcomes):
    client, completions = fake_openai(outcomes)
    return OpenAITranscriptGrader(ChatJSONClient(model="gpt-4o-mini", client=client, retry_backoff_seconds=0)), completions


def test_parse_transcript_turns_ignores_unlabelled_blocks() -> None:
    turns = parse_transcript_turns("Interviewer: Hi\n\nnoise\n\nCandidate: Hello")

    assert [(t.role, t.text) for t in turns] == [("interviewer", "Hi"), ("candidate", "Hello")]


def test_extract_answers_joins_candidate_turns_and_skips_inaudible() -> None:
    answers = extract_answers(QUESTIONS, TRANSCRIPT)

    assert answers == {
        1: "I built event-driven services. Mostly on Kafka.",
        2: "We disagreed about deadlines.",
        3: None,
    }


def test_match_answer_requires_enough_overlap() -> None:
    turns = parse_transcript_turns(TRANSCRIPT)

    assert match_answer("Explain quantum chromodynamics thoroughly", turns) is None
    assert match_answer("a b c", turns) is None


def test_grade_from_payload_scores_missing_questions_zero() -> None:
    payload = {
        "questions": [
            {"question_number": 1, "score": 82, "strengths": ["Depth"], "evaluation_reasoning": "Good"},
            {"question_number": "2", "score": 140},
            {"question_number": 99, "score": 100},
        ],
        "summary": "Solid technically.",
        "key_strengths": ["Depth"],
    }

    grade = grade_from_payload(payload, QUESTIONS, extract_answers(QUESTIONS, TRANSCRIPT))

    assert [e.question_number for e in grade.questions] == [1, 2, 3]
    assert grade.questions[0].score == 82
    assert grade.questions[0].marks_obtained == 12.3
    assert grade.questions[1].score == 100
    assert grade.questions[2].score == 0
    assert grade.questions[2].answered is False
    assert grade.questions[2].candidate_response == "No answer provided"
    assert grade.summary == "Solid technically."


def test_openai_transcript_grader_sends_questions_and_transcript(fake_openai) -> None:
    response = json.dumps({"questions": [{"question_number": 1, "score": 70}], "summary": "Fine"})
    grader, completions = _grader(fake_openai, [response])

    grade = grader.grade_transcript(QUESTIONS, TRANSCRIPT, job_title="Backend Engineer", candidate_name="Ada")

    prompt = completions.calls[0]["messages"][1]["content"]
    assert "**Position:** Backend Engineer" in prompt
    assert "We disagreed about deadlines." in prompt
    assert completions.calls[0]["model"] == "gpt-4o-mini"
    assert completions.calls[0]["temperature"] == 0.3
    assert [e.score for e in grade.questions] == [70, 0, 0]


def test_unparseable_transcript_grade_degrades_to_zero_score(fake_openai) -> None:
    grader, _ = _grader(fake_openai, ["Sorry, I cannot help with that."])

    grade = grader.grade_transcript(QUESTIONS, TRANSCRIPT)
    result = compute_weighted_score(evaluations_to_scores(QUESTIONS, grade.questions))

    assert grade.questions == []
    assert result.final_score_percent == 0
    assert result.total_marks == 100
    assert result.recommendation == "No Hire"


def test_payload_without_questions_list_is_rejected(fake_openai) -> None:
    grader, _ = _grader(fake_openai, ['{"summary": "no questions"}'])

    assert grader.grade_transcript(QUESTIONS, TRANSCRIPT).questions == []


def test_mock_transcript_grader_scores_answered_questions() -> None:
    grade = MockTranscriptGrader().grade_transcript(QUESTIONS, TRANSCRIPT)

    assert [e.score for e in grade.questions] == [70, 70, 0]
    assert [e.answered for e in grade.questions] == [True, True, False]


def test_non_finite_scores_from_transcript_grade_count_as_zero(fake_openai) -> None:
    grader, _ = _grader(
        fake_openai,
        ['{"questions": [{"question_number": 1, "score": NaN}, {"question_number": 2, "score": Infinity}]}'],
    )

    grade = grader.grade_transcript(QUESTIONS, TRANSCRIPT)

    assert [e.score for e in grade.questions] == [0, 0, 0]
    assert [e.marks_obtained for e in grade.questions] == [0, 0, 0]
