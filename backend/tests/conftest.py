from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Callable

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


class FakeCompletions:
    """Stands in for ``OpenAI().chat.completions``.

    ``outcomes`` is either a list consumed in order or a callable receiving the
    request kwargs. Each outcome is response text or an exception to raise.
    """

    def __init__(self, outcomes: list[Any] | Callable[[dict[str, Any]], Any]) -> None:
        self._outcomes = outcomes
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if callable(self._outcomes):
            outcome = self._outcomes(kwargs)
        else:
            outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=outcome))],
            usage=SimpleNamespace(prompt_tokens=120, completion_tokens=40),
        )


@pytest.fixture
def fake_openai():
    def _build(outcomes):
        completions = FakeCompletions(outcomes)
        return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions

    return _build


@pytest.fixture
def isolated_db(tmp_path, monkeypatch):
    from sqlmodel import SQLModel, create_engine

    from scorecard import db, models  # noqa: F401
    from scorecard.settings import settings

    monkeypatch.setattr(settings, "data_dir", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "sqlite_path", str(tmp_path / "test.db"))
    engine = create_engine(settings.sqlite_url, connect_args={"check_same_thread": False})
    monkeypatch.setattr(db, "engine", engine)
    SQLModel.metadata.create_all(engine)
    return engine


@pytest.fixture
def client(isolated_db, monkeypatch):
    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient

    from scorecard.main import app

    monkeypatch.setenv("OPENAI_MOCK", "1")
    monkeypatch.delenv("BACKEND_API_KEY", raising=False)
    with TestClient(app) as test_client:
        yield test_client
