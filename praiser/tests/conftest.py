"""Shared test fixtures.

Factory-pattern fixtures that return callables accepting **overrides.

Fixtures:
    mock_provider: Factory for MockProvider instances
    make_person: Factory for valid PersonProfile instances
    make_messages: Factory for conversations from (role, content) pairs
    fake_clock: Manually advanced monotonic clock
    make_engine: Factory for PraiseEngine over a MockProvider
"""

import random

import pytest

from praiser.ai.catalog import ModelCatalog
from praiser.ai.praise import PraiseEngine
from praiser.ai.providers.mock import MockProvider
from praiser.schemas import ConversationMessage, MessageImage, PersonProfile


# ---------------------------------------------------------------------------
# MockProvider factory
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_provider():
    """Returns a factory function for creating MockProvider instances."""

    def _make(**kwargs) -> MockProvider:
        return MockProvider(**kwargs)

    return _make


# ---------------------------------------------------------------------------
# Domain factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_person():
    """Returns a factory for PersonProfile. Defaults to a named profile
    with no media; pass image_count=N to attach N images."""

    def _make(image_count: int = 0, **overrides) -> PersonProfile:
        defaults = {
            "name": "Alex",
            "extra_info": "",
            "images": [
                MessageImage(url=f"/api/v1/media/image/photo-{i}.jpg", type="image/jpeg")
                for i in range(image_count)
            ],
        }
        defaults.update(overrides)
        return PersonProfile(**defaults)

    return _make


@pytest.fixture
def make_messages():
    """Returns a factory that builds a conversation from (role, content)
    pairs, or from plain strings (user messages)."""

    def _make(*entries) -> list[ConversationMessage]:
        messages = []
        for entry in entries:
            role, content = ("user", entry) if isinstance(entry, str) else entry
            messages.append(ConversationMessage(role=role, content=content))
        return messages

    return _make


# ---------------------------------------------------------------------------
# Catalog / engine
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_engine(mock_provider):
    """Returns a factory for PraiseEngine wired to a MockProvider.

    The catalog fetches from the provider, so ``models=[...]`` controls
    the candidate list (after ranking). Returns (engine, provider).
    """

    def _make(seed: int = 0, **provider_kwargs) -> tuple[PraiseEngine, MockProvider]:
        provider = mock_provider(**provider_kwargs)
        catalog = ModelCatalog(fetcher=provider.list_models)
        return PraiseEngine(provider, catalog, rng=random.Random(seed)), provider

    return _make
