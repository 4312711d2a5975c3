from __future__ import annotations

import pytest

TRANSCRIPT = (
    "Interviewer: Describe your experience with distributed systems design?\n\n"
    "Candidate: I built event-driven services.\n\n"
    "Interviewer: Tell me about a conflict you resolved within your team.\n\n"
    "Candidate: [inaudible]\n\n"
    "Candidate: We disagreed about deadlines.\n\n"
    "Interviewer: Thanks, that's all."
)

QUESTION_SET = {
    "selected_criteria": ["Problem Solving"],
    "questions": [
        {"question": "Describe your experience with distributed systems design", "criterion": "Technical Skills", "difficulty": "High"},
        {"question": "Tell me about a conflict you resolved within your team", "criterion": "Communication", "difficulty": "Low"},
        "Where do you see yourself growing professionally",
    ],
}


def _create_application(client, **overrides) -> dict:
    body = {"job_id": "job-1", "candidate_name": "Ada Lovelace", "job_title": "Backend Engineer", **overrides}
    response = client.post("/applications", json=body)
    assert response.status_code == 201
    return response.json()


def test_create_and_read_application(client) -> None:
    created = _create_application(client)

    assert created["interview_status"] == "Pending"
    assert created["current_stage"] == "screening"
    assert created["interview_score"] is None

    fetched = client.get(f"/applications/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_transcript_evaluation_scores_and_persists(client) -> None:
    client.post("/jobs/job-1/interview-questions", json=QUESTION_SET)
    application = _create_application(client, interview_transcript=TRANSCRIPT)

    response = client.post(f"/applications/{application['id']}/evaluate")

    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["overall_score"] == 47
    assert payload["recommendation"] == "No Hire"
    assert payload["criterion_averages"] == {"Technical Skills": 70, "Communication": 70, "Problem Solving": 0}
    assert payload["scoring"]["total_marks"] == 30
    assert payload["scoring"]["weighted_score"] == 14.0
    assert payload["scoring"]["questions_evaluated"] == 2
    assert payload["evaluation"]["summary"] == (
        "Candidate scored 47% overall. 2/3 questions answered. Recommendation: No Hire."
    )

    stored = client.get(f"/applications/{application['id']}").json()
    assert stored["interview_score"] == 47
    assert stored["interview_recommendation"] == "No Hire"

    snapshot = client.get(f"/applications/{application['id']}/evaluation")
    assert snapshot.status_code == 200
    assert snapshot.json() == payload["evaluation"]


def test_per_question_mode_grades_each_answer(client) -> None:
    client.post("/jobs/job-1/interview-questions", json=QUESTION_SET)
    application = _create_application(client)

    response = client.post(
        f"/applications/{application['id']}/evaluate",
        params={"mode": "per_question"},
        json={"transcript": TRANSCRIPT},
    )

    assert response.status_code == 200
    payload = response.json()
    assert [q["score"] for q in payload["evaluation"]["questions"]] == [60, 60, 0]
    assert payload["overall_score"] == 40
    assert payload["criterion_averages"]["Technical Skills"] == 60


def test_evaluation_without_question_set_uses_default_total(client) -> None:
    application = _create_application(client, interview_transcript=TRANSCRIPT)

    payload = client.post(f"/applications/{application['id']}/evaluate").json()

    assert payload["overall_score"] == 0
    assert payload["scoring"]["total_marks"] == 100
    assert payload["recommendation"] == "No Hire"


def test_evaluation_without_transcript_is_skipped(client) -> None:
    application = _create_application(client)

    response = client.post(f"/applications/{application['id']}/evaluate")

    assert response.status_code == 200
    assert response.json()["message"] == "No transcript to evaluate"
    assert client.get(f"/applications/{application['id']}/evaluation").status_code == 404


def test_evaluation_rejects_unknown_mode(client) -> None:
    application = _create_application(client, interview_transcript=TRANSCRIPT)

    response = client.post(f"/applications/{application['id']}/evaluate", params={"mode": "vibes"})

    assert response.status_code == 400


@pytest.mark.parametrize("path", ["/applications/999", "/applications/999/evaluation"])
def test_missing_application_returns_404(client, path: str) -> None:
    assert client.get(path).status_code == 404


def test_missing_credentials_fail_evaluation(client, monkeypatch) -> None:
    application = _create_application(client, interview_transcript=TRANSCRIPT)
    monkeypatch.delenv("OPENAI_MOCK", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_EVAL_KEY", raising=False)

    response = client.post(f"/applications/{application['id']}/evaluate")

    assert response.status_code == 500
    assert "API key" in response.json()["detail"]
