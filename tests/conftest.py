"""Shared test fixtures: scripted model client, fake clock, recording sleep."""

import asyncio
import copy
import json

import pytest
from fastapi.testclient import TestClient

from diy_hub.api.app import create_app
from diy_hub.config import Settings
from diy_hub.prompts import DefaultPromptBuilder
from diy_hub.repositories import MemoryCacheRepository
from diy_hub.services import RequestService, RetryingInvoker

MATERIAL_RESPONSE = {
    "primaryBrand": "Behr",
    "primaryModel": "Premium Plus Interior Eggshell",
    "specification": "1 gallon, low-VOC, eggshell finish",
    "reasoning": "Forgiving finish with good coverage for beginners.",
    "alternatives": [
        {"brand": "Valspar", "model": "Signature", "note": "Slightly cheaper, similar coverage"},
    ],
    "buyingTips": "One gallon covers roughly 350-400 sq ft.",
    "quantitySuggestion": "Two gallons is right for an average bedroom.",
}

PROJECT_RESPONSE = {
    "title": "Fix a Leaky Faucet",
    "description": "Replace the cartridge in a single-handle kitchen faucet.",
    "category": "Plumbing",
    "difficulty": "Beginner",
    "estimatedTime": "1-2 hours",
    "steps": [
        {"order": 1, "title": "Shut off water", "instructions": "Close both valves under the sink."},
        {"stepNumber": 2, "title": "Remove handle", "instruction": "Pry off the cap and unscrew the handle."},
    ],
    "materials": [{"name": "Faucet cartridge", "quantity": 1, "unit": "count"}],
    "tools": [
        {"name": "Adjustable wrench", "required": True, "alternatives": "Pliers"},
        {
            "name": "Screwdriver",
            "specification": "#2 Phillips",
            "alternatives": [
                {"name": "Multi-bit driver", "specification": "Includes #2 Phillips"},
                {"name": "Missing spec"},
            ],
        },
    ],
    "safetyTips": ["Put a towel in the sink to catch small parts."],
    "estimatedCost": "$15-40",
    "commonMistakes": ["Forgetting to shut off the water."],
}

STEP_RESPONSE = {
    "explanation": "Turn both supply valves clockwise until they stop.",
    "keyPoints": ["Both hot and cold must be closed"],
    "visualCues": ["Faucet stops dripping when opened"],
    "estimatedTime": "5 minutes",
    "commonMistakes": ["Only closing one valve"],
}


class FakeModelClient:
    """ModelClient that replays scripted outputs.

    Each scripted item is returned (dicts/lists are JSON-encoded) or raised
    (exceptions). When ``gate`` is set, every call waits for it first.
    """

    def __init__(self, responses=None, model_name: str = "fake-model"):
        self.responses = list(responses or [])
        self.calls: list[dict] = []
        self.gate: asyncio.Event | None = None
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def invoke_model(self, system, messages, max_tokens, temperature) -> str:
        self.calls.append(
            {"system": system, "messages": messages, "max_tokens": max_tokens, "temperature": temperature}
        )
        if self.gate is not None:
            await self.gate.wait()
        if not self.responses:
            raise AssertionError("Unexpected model call")
        item = self.responses.pop(0)
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, (dict, list)):
            return json.dumps(item)
        return item

    async def is_available(self) -> bool:
        return True


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingSleep:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture()
def material_response():
    return copy.deepcopy(MATERIAL_RESPONSE)


@pytest.fixture()
def project_response():
    return copy.deepcopy(PROJECT_RESPONSE)


@pytest.fixture()
def step_response():
    return copy.deepcopy(STEP_RESPONSE)


@pytest.fixture()
def fake_client():
    return FakeModelClient()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def recording_sleep():
    return RecordingSleep()


@pytest.fixture()
def cache(clock):
    return MemoryCacheRepository(ttl=60, max_entries=10, check_period=3600, clock=clock)


@pytest.fixture()
def invoker(fake_client, recording_sleep):
    return RetryingInvoker(
        client=fake_client,
        prompt_builder=DefaultPromptBuilder(),
        max_retries=2,
        backoff_base=1.0,
        sleep=recording_sleep,
    )


@pytest.fixture()
def service(cache, invoker):
    return RequestService(cache=cache, invoker=invoker, key_version="test")


@pytest.fixture()
def test_settings():
    return Settings(
        anthropic_api_key="test-key",
        rate_limit_max=50,
        rate_limit_window_seconds=3600,
        trust_proxy=False,
    )


@pytest.fixture()
def client(test_settings, fake_client, recording_sleep):
    """TestClient over an app wired to the scripted model client."""
    app = create_app(app_settings=test_settings, model_client=fake_client, sleep=recording_sleep)
    with TestClient(app) as tc:
        yield tc
