"""Shared fixtures for summarizer tests."""

import json
from typing import Any, Dict, List
from unittest.mock import AsyncMock, MagicMock

import pytest

from plumly_summarizer.models.summary import Persona, SummaryRequest
from plumly_summarizer.services.llm.providers.base import LLMProvider, LLMResponse


@pytest.fixture
def resource_data() -> Dict[str, Any]:
    """Clinical payload with two conditions, one medication, one lab."""
    return {
        "patient": {"id": "pat-1", "name": "Jane Doe", "birthDate": "1960-04-02"},
        "conditions": [
            {"code": "E11.9", "display": "Type 2 diabetes mellitus"},
            {"code": "I10", "display": "Essential hypertension"},
        ],
        "medications": [{"name": "Metformin", "dose": "500 mg BID"}],
        "labValues": [{"name": "HbA1c", "value": 7.2, "unit": "%"}],
    }


@pytest.fixture
def summary_request(resource_data: Dict[str, Any]) -> SummaryRequest:
    return SummaryRequest(resource_data=resource_data, persona=Persona.PATIENT)


@pytest.fixture
def valid_payload() -> Dict[str, Any]:
    """Well-formed model output with two sections."""
    return {
        "summary": "Jane is managing diabetes and blood pressure well.",
        "sections": [
            {
                "id": "overview",
                "title": "Your Health Overview",
                "content": "Your conditions are stable.",
                "confidence": 0.9,
                "sources": ["Condition/E11.9"],
            },
            {
                "id": "meds",
                "title": "Your Medications",
                "content": "Keep taking metformin twice a day.",
            },
        ],
        "metadata": {"persona": "patient"},
    }


@pytest.fixture
def valid_response_text(valid_payload: Dict[str, Any]) -> str:
    """Model output wrapping the JSON payload in prose and a code fence."""
    return (
        "Here is the summary you asked for:\n```json\n"
        + json.dumps(valid_payload)
        + "\n```\nLet me know if you need anything else."
    )


def make_llm_response(content: str, **overrides: Any) -> LLMResponse:
    """Build an LLMResponse with sensible defaults."""
    values: Dict[str, Any] = {
        "content": content,
        "input_tokens": 120,
        "output_tokens": 340,
        "model": "claude-3-5-sonnet-20241022",
        "provider": "anthropic",
        "latency_ms": 12.5,
    }
    values.update(overrides)
    return LLMResponse(**values)


@pytest.fixture
def mock_provider() -> MagicMock:
    """Provider double whose complete() is an AsyncMock."""
    provider = MagicMock(spec=LLMProvider)
    provider.name = "mock"
    provider.model = "mock-model"
    provider.complete = AsyncMock()
    return provider


class RecordingSleep:
    """Async sleep stand-in that records requested durations (seconds)."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

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
def llm_response():
    """Factory fixture for LLMResponse objects."""
    return make_llm_response
