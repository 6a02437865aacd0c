from __future__ import annotations

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

# Point the app at a throwaway SQLite file before chat_relay.db builds its engine.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="chat_relay_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["OPENAI_API_KEY"] = "test-key"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from chat_relay.config import get_settings  # noqa: E402
from chat_relay.db import Base, SessionLocal, engine  # noqa: E402
from chat_relay.main import app  # noqa: E402


class FakeModel:
    """Fake chat model that records messages and replays scripted responses."""

    def __init__(self, responses: list[Any]) -> None:
        self.responses = list(responses)
        self.called_messages: list[list[Any]] = []
        self.bound_tools: list[Any] | None = None

    def bind_tools(self, tools: list[Any], **kwargs: Any) -> FakeModel:
        self.bound_tools = tools
        return self

    def invoke(self, messages: list[Any]) -> Any:
        self.called_messages.append(list(messages))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def install_model(monkeypatch: pytest.MonkeyPatch):
    """Replace the completion model with a FakeModel replaying `responses`."""

    def _install(*responses: Any) -> FakeModel:
        fake_model = FakeModel(list(responses))
        monkeypatch.setattr("chat_relay.completion.get_model", lambda: fake_model)
        return fake_model

    return _install
