"""Shared fixtures: fake collaborators and an app wired to them."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from playstore_agent.a2a.adapter import A2AAdapter
from playstore_agent.agent.registry import AgentRegistry
from playstore_agent.api.deps import Services
from playstore_agent.llm.schemas import AgentResponse
from playstore_agent.main import create_app
from playstore_agent.tools.playstore import RatingLookupError, RatingRecord


def make_record(app_id: str = "com.example.appa", **overrides) -> RatingRecord:
    data = {
        "app_id": app_id,
        "title": "App A",
        "rating": 4.6,
        "ratings_count": 150000,
        "reviews": 42000,
        "installs": "10,000,000+",
        "price": "Free",
        "developer": "Example Inc.",
        "last_updated": "2024-05-01T12:00:00.000Z",
        "version": "1.2.3",
        "url": f"https://play.google.com/store/apps/details?id={app_id}",
    }
    data.update(overrides)
    return RatingRecord(**data)


class FakeAgent:
    def __init__(self, text: str = "AppA is rated 4.6/5.0", tool_results: list | None = None, error: Exception | None = None):
        self.text = text
        self.tool_results = tool_results or []
        self.error = error
        self.calls: list[list[dict]] = []

    async def generate(self, messages: list[dict]) -> AgentResponse:
        self.calls.append(messages)
        if self.error:
            raise self.error
        return AgentResponse(text=self.text, tool_results=self.tool_results)


class FakeLookup:
    def __init__(self, records: dict[str, RatingRecord] | None = None):
        self.records = records or {}
        self.calls: list[str] = []

    async def lookup(self, app_name: str) -> RatingRecord:
        self.calls.append(app_name)
        if app_name not in self.records:
            raise RatingLookupError(f"Failed to fetch app details: No app found with name: {app_name}")
        return self.records[app_name]


class FakeHistory:
    def __init__(self, fail_on: set[str] | None = None):
        self.entries: list[dict] = []
        self.fail_on = fail_on or set()

    async def append(self, entry: dict) -> None:
        if any(app_id in entry["key"] for app_id in self.fail_on):
            raise RuntimeError("disk full")
        self.entries.append(entry)

    async def list_by_prefix(self, prefix: str, limit: int = 100) -> list[dict]:
        matched = [e for e in self.entries if e["key"].startswith(prefix)]
        return [
            {"id": f"msg_{i}", "key": e["key"], "role": e["role"], "content": e["content"], "at": "2024-05-01T12:00:00"}
            for i, e in enumerate(reversed(matched[-limit:]))
        ]


@pytest.fixture
def fake_agent() -> FakeAgent:
    return FakeAgent()


@pytest.fixture
def registry(fake_agent) -> AgentRegistry:
    return AgentRegistry({"playStoreAgent": fake_agent})


@pytest.fixture
def adapter(registry) -> A2AAdapter:
    return A2AAdapter(registry, expose_stack=True)


@pytest.fixture
def fake_lookup() -> FakeLookup:
    return FakeLookup({"AppA": make_record()})


@pytest.fixture
def fake_history() -> FakeHistory:
    return FakeHistory()


@pytest.fixture
def services(registry, adapter, fake_lookup, fake_history) -> Services:
    return Services(
        registry=registry,
        adapter=adapter,
        rating_client=fake_lookup,
        history_store=fake_history,
    )


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services=services))
