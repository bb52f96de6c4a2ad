"""
Shared pytest fixtures for the quizgen test suite.
Applies to unit/ and api/. No network, no Redis, no LLM credentials required.
"""

import os
import sys
from typing import Any, Dict, List, Sequence, Union

import pytest

# ── Ensure the project root is importable without an install ────────────────
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("QUIZ_STORE", "memory")


class ScriptedGenerator:
    """
    Text generator that replays canned responses in order.

    A response that is an Exception instance is raised instead of returned.
    Once the script runs out, the last response is repeated.
    """

    def __init__(self, responses: Sequence[Union[str, Exception]]):
        self.responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, prompt: str, temperature: float, model: str) -> str:
        self.calls.append({"prompt": prompt, "temperature": temperature, "model": model})
        response = self.responses[min(len(self.calls), len(self.responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def prompts(self) -> List[str]:
        return [call["prompt"] for call in self.calls]


@pytest.fixture
def make_generator():
    """Factory for ScriptedGenerator instances."""
    return ScriptedGenerator


@pytest.fixture
def make_extractor():
    """Factory: scripted responses -> (extractor, generator)."""
    from quizgen.core.extractor import ExtractionOptions, StructuredExtractor

    def _make(responses, **option_overrides):
        generator = ScriptedGenerator(responses)
        options = ExtractionOptions(**option_overrides)
        extractor = StructuredExtractor(generator, default_model="test-model", default_options=options)
        return extractor, generator

    return _make


@pytest.fixture
def memory_store():
    from quizgen.storage.game_store import InMemoryGameStore
    return InMemoryGameStore()
