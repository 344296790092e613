"""
Shared test fixtures and configuration.
"""

import os

# Set test environment variables before importing app modules
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/serenemind_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_CONSOLE_ENABLED", "false")
os.environ.setdefault("LLM_API_KEY", "")

import json
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from serenemind.api.deps import get_session_store, get_therapist
from serenemind.llm.base import LLMMessage, LLMProvider, LLMResponse
from serenemind.main import app
from serenemind.services import TherapistClient
from serenemind.storage import LocalStorage, SessionStore

VALID_EVALUATION = {
    "wellnessScore": 62,
    "emotionalState": "Anxious and tired",
    "riskLevel": "medium",
    "keyConcerns": ["Recurring anxiety reported in every message"],
    "recommendations": ["Practice paced breathing", "Consider speaking with a counselor"],
    "summary": "User reports persistent anxiety. No safety concerns were raised.",
}


class FakeProvider(LLMProvider):
    """In-memory provider that records prompts and answers from canned text."""

    name = "fake"

    def __init__(
        self,
        reply: str = "That sounds hard. What has been on your mind?",
        evaluation_text: Optional[str] = None,
        fail_reply: bool = False,
        fail_evaluation: bool = False,
    ):
        super().__init__(api_key="fake-key", model="fake-model")
        self.reply = reply
        self.evaluation_text = evaluation_text or f"Here is the analysis:\n{json.dumps(VALID_EVALUATION)}"
        self.fail_reply = fail_reply
        self.fail_evaluation = fail_evaluation
        self.prompts: List[str] = []

    @property
    def evaluation_calls(self) -> int:
        return sum(1 for p in self.prompts if "CONVERSATION HISTORY" in p)

    @property
    def reply_calls(self) -> int:
        return len(self.prompts) - self.evaluation_calls

    async def chat_completion(self, messages: List[LLMMessage], temperature=None, max_tokens=None, **kwargs):
        prompt = messages[-1].content
        self.prompts.append(prompt)
        if "CONVERSATION HISTORY" in prompt:
            if self.fail_evaluation:
                raise RuntimeError("evaluation upstream down")
            return LLMResponse(content=self.evaluation_text, model=self.model)
        if self.fail_reply:
            raise RuntimeError("upstream down")
        return LLMResponse(content=self.reply, model=self.model)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(str(tmp_path / "data"))


@pytest.fixture
def store(storage):
    return SessionStore(storage, "sessions")


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def client(store, fake_provider):
    """TestClient wired to a temporary store and the fake provider."""
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_therapist] = lambda: TherapistClient(fake_provider)
    yield TestClient(app)
    app.dependency_overrides.clear()
