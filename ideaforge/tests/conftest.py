"""
Pytest configuration and fixtures for IdeaForge tests.

This module provides:
- Network blocking fixture to prevent accidental Gemini or Firestore calls
- A scripted LLM client standing in for Gemini
- In-memory store and orchestrator fixtures
"""

import asyncio
import json
import socket
from typing import Any, AsyncIterator, Dict, List, Optional

import pytest
from unittest.mock import patch

from ideaforge.agents.base import LLMClient
from ideaforge.config import PipelineConfig
from ideaforge.core.pipeline import PipelineOrchestrator
from ideaforge.services import InMemoryProjectStore


class NetworkBlockedError(Exception):
    """Raised when a test attempts to make a network connection."""
    pass


def _block_socket_connect(*args, **kwargs):
    """Block all socket connections to prevent accidental API calls."""
    raise NetworkBlockedError(
        "Network access is blocked in unit tests. "
        "If you need to test network functionality, use mocks. "
        "This prevents accidental Gemini and Firestore calls."
    )


@pytest.fixture(autouse=True)
def block_network():
    """
    Automatically block all network connections in tests.

    Real Gemini or Firestore traffic would cost money and make runs flaky.
    Integration tests that need the network belong in a separate suite.
    """
    with patch.object(socket.socket, 'connect', _block_socket_connect):
        with patch.object(socket, 'create_connection', _block_socket_connect):
            yield


# ============================================================================
# Sample Payloads
# ============================================================================

IDEA_BRIEF = {
    "niche": "Dog walking for busy professionals",
    "targetCustomer": "Office workers in dense neighborhoods",
    "coreProblem": "Dogs left alone all day",
    "solutionPromise": "Vetted walkers booked in two taps",
    "monetizationModel": "Per-walk fee plus subscription",
    "channels": ["Instagram", "Vet clinics"],
    "risks": ["Liability"],
    "nextQuestions": ["Which city first?"],
}

RESEARCH_REPORT = {
    "summary": "Healthy demand in urban areas.",
    "demandSignals": ["Search volume growing"],
    "competitors": [{"name": "Rover", "positioning": "Marketplace", "notes": "Large"}],
    "pricingBenchmarks": ["$20-30 per walk"],
    "viabilityScore": 72,
    "risks": ["Seasonality"],
    "recommendedNextMove": "Pilot in one neighborhood",
}

BRAND_KIT = {
    "nameOptions": ["Acme Walks", "LeashUp"],
    "taglines": ["Walks while you work"],
    "positioningStatement": "The dependable walk for working owners.",
    "voice": {"tone": ["warm"], "do": ["be concise"], "dont": ["use jargon"]},
    "messagingPillars": [{"pillar": "Trust", "proof": "Vetted walkers"}],
    "basicVisualDirection": "Earthy greens",
}


# ============================================================================
# Scripted LLM Client
# ============================================================================

class ScriptedLLMClient(LLMClient):
    """
    LLM client that answers from queued responses and records every call.

    ``complete`` pops from ``responses``; a queued Exception is raised instead
    of returned. When the queue is empty, structured calls fall back to the
    sample payload for the schema's stage and chat calls to ``default_reply``.
    """

    def __init__(self, timeout_seconds: float = 5, strict_validation: bool = False):
        super().__init__(timeout_seconds=timeout_seconds, strict_validation=strict_validation)
        self.responses: List[Any] = []
        self.stream_chunks: List[str] = ["Tell me ", "more."]
        self.default_reply = "What problem are you solving?"
        self.calls: List[Dict[str, Any]] = []
        self.gate: Optional[asyncio.Event] = None

    def queue(self, *responses: Any) -> "ScriptedLLMClient":
        self.responses.extend(responses)
        return self

    def _fallback(self, response_schema: Optional[Dict[str, Any]]) -> str:
        if response_schema is None:
            return self.default_reply
        properties = response_schema.get("properties", {})
        if "viabilityScore" in properties:
            return json.dumps(RESEARCH_REPORT)
        if "nameOptions" in properties:
            return json.dumps(BRAND_KIT)
        return json.dumps(IDEA_BRIEF)

    async def complete(
        self,
        system_instruction: Optional[str],
        contents: Any,
        response_schema: Optional[Dict[str, Any]] = None,
    ) -> Optional[str]:
        self.calls.append({
            "system_instruction": system_instruction,
            "contents": contents,
            "response_schema": response_schema,
        })
        if self.gate is not None:
            await self.gate.wait()
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return self._fallback(response_schema)

    async def stream_complete(
        self,
        system_instruction: Optional[str],
        contents: Any,
    ) -> AsyncIterator[str]:
        self.calls.append({
            "system_instruction": system_instruction,
            "contents": contents,
            "response_schema": None,
        })
        for chunk in self.stream_chunks:
            yield chunk

    def prompts_with_schema(self, marker: str) -> List[str]:
        """User prompts of structured calls whose schema has property ``marker``."""
        return [
            call["contents"]
            for call in self.calls
            if call["response_schema"] and marker in call["response_schema"].get("properties", {})
        ]


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def llm_client():
    return ScriptedLLMClient()


@pytest.fixture
def store():
    return InMemoryProjectStore()


@pytest.fixture
def pipeline_config():
    return PipelineConfig()


@pytest.fixture
def orchestrator(store, llm_client, pipeline_config):
    return PipelineOrchestrator(store=store, llm_client=llm_client, config=pipeline_config)
