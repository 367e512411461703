"""Shared fixtures: stores for both backends and an offline Gemini model."""

import json
from pathlib import Path
from typing import Any, List

import pytest

from models.user import User, hash_password
from tools.entity_store import EntityStore, InMemoryEntityStore, SQLiteEntityStore
from tools.gemini_client import GeminiClient


class FakeResponse:
    def __init__(self, text: str) -> None:
        self._text = text

    @property
    def text(self) -> str:
        return self._text


class BlockedResponse:
    @property
    def text(self) -> str:
        raise ValueError("The response was blocked by safety filters.")


class FakeGeminiModel:
    """Stands in for ``genai.GenerativeModel``; replies are consumed in order.

    A reply may be a dict (sent as JSON), raw text, an exception to raise, or
    ``None`` for a safety-blocked response.
    """

    def __init__(self, *replies: Any) -> None:
        self.replies: List[Any] = list(replies)
        self.calls: List[dict] = []

    def generate_content(self, parts, generation_config=None, safety_settings=None):
        self.calls.append(
            {"parts": parts, "generation_config": generation_config, "safety_settings": safety_settings}
        )
        reply = self.replies.pop(0) if self.replies else {}
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            return BlockedResponse()
        if isinstance(reply, str):
            return FakeResponse(reply)
        return FakeResponse(json.dumps(reply))


@pytest.fixture
def fake_gemini():
    """Factory building a GeminiClient around a scripted fake model."""

    def _build(*replies: Any) -> GeminiClient:
        return GeminiClient(api_key="test-key", model=FakeGeminiModel(*replies))

    return _build


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path: Path) -> EntityStore:
    if request.param == "sqlite":
        return SQLiteEntityStore(tmp_path / "wardrobe.db")
    return InMemoryEntityStore()


@pytest.fixture
def memory_store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def make_user():
    def _create(store: EntityStore, username: str = "alice") -> User:
        return store.create_user(User(username=username, password_hash=hash_password("secret")))

    return _create
