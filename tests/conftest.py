"""
Core pytest configuration and fixtures for Mithoo testing.

This module provides shared test fixtures, fake Gemini responses and the
directory-based test markers used across the suite.
"""

import tempfile
from pathlib import Path
from types import SimpleNamespace
from typing import List
from unittest.mock import MagicMock

import pytest
from mithoo.config import Settings
from mithoo.engine import Synchronous
from mithoo.llm import Echo
from mithoo.models import ASSISTANT_ROLE, USER_ROLE, Conversation, Turn
from mithoo.store import InMemory

# ===== TEST DATA FIXTURES =====


@pytest.fixture
def sample_turns() -> List[Turn]:
    """A short, already-normalized conversation."""
    return [
        Turn(role=USER_ROLE, content="Hello, can you help with my article?"),
        Turn(role=ASSISTANT_ROLE, content="Hi, I'm Mithoo, happy to help!"),
        Turn(role=USER_ROLE, content="What makes a good introduction?"),
        Turn(role=ASSISTANT_ROLE, content="A clear hook and a reason to keep reading."),
    ]


@pytest.fixture
def sample_conversation(sample_turns) -> Conversation:
    return Conversation(id="001", turns=sample_turns)


@pytest.fixture
def temp_dir():
    """Temporary directory for file-based tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ===== FAKE GEMINI RESPONSES =====


def gemini_response(text=None, block_reason=None):
    """Build an object shaped like a google-genai GenerateContentResponse."""
    candidates = []
    if text is not None:
        part = SimpleNamespace(text=text)
        candidates = [SimpleNamespace(content=SimpleNamespace(parts=[part]))]
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    return SimpleNamespace(candidates=candidates, prompt_feedback=feedback)


@pytest.fixture
def make_gemini_response():
    return gemini_response


@pytest.fixture
def mock_genai_client():
    """A stand-in for ``google.genai.Client``."""
    client = MagicMock()
    client.models.generate_content.return_value = gemini_response("Mock Gemini reply")
    return client


# ===== PIPELINE FIXTURES =====


@pytest.fixture
def pipeline_app():
    """
    The pillars the engine needs, without the Dash UI.

    Uses the Echo LLM and an in-memory store so no network or disk is touched.
    """
    app = SimpleNamespace(llm=Echo(), store=InMemory(), settings=Settings())
    app.engine = Synchronous(app)
    return app


# ===== CONFIGURATION =====


def pytest_configure(config):
    """Pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
