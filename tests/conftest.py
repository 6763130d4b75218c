# tests/conftest.py
"""
Pytest configuration and fixtures.
"""

import json
import os

import pytest

# Keep tests independent of any developer .env / API keys
os.environ.setdefault("TESTING", "1")
os.environ["DEFAULT_PROVIDER"] = "mock"

from content_fix.config import CorrectorConfig, PreserverConfig, get_settings  # noqa: E402
from content_fix.llm.mock_provider import MockProvider  # noqa: E402
from content_fix.services.correction import Content, Issue, IssueType, LocationRef, Severity  # noqa: E402


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "llm: tests requiring LLM API calls (deselect with '-m \"not llm\"')")


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are lru_cached; drop them so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_content():
    """A small article with headings, paragraphs, an image and a list."""
    return Content(
        title="The Complete Guide to SEO Tips for Beginners in 2026 and Beyond Today",
        meta_description="Learn SEO tips.",
        body=(
            "<h2>Why SEO tips matter</h2>"
            "<p>Search engines reward useful pages.</p>"
            "<p>Good structure helps readers and crawlers.</p>"
            '<img src="/chart.png" alt="traffic chart">'
            "<h2>Getting started</h2>"
            "<p>Start with keyword research.</p>"
            "<ul><li>Research</li><li>Write</li></ul>"
        ),
    )


@pytest.fixture
def title_issue():
    return Issue(
        type=IssueType.TITLE_TOO_LONG,
        current_value=70,
        target_value=60,
        severity=Severity.MAJOR,
    )


@pytest.fixture
def passive_issue():
    return Issue(
        type=IssueType.PASSIVE_VOICE_HIGH,
        current_value=25,
        target_value=10,
        severity=Severity.MINOR,
        locations=(
            LocationRef(sentence="The page was written by the team."),
            LocationRef(sentence="Links were added by the editor."),
        ),
    )


@pytest.fixture
def mock_provider():
    """Factory for scripted mock providers."""

    def make(*responses, name="mock", model="mock-model"):
        return MockProvider(list(responses), name=name, model=model)

    return make


@pytest.fixture
def corrector_config():
    """Orchestrator config with no retry delay."""
    return CorrectorConfig(retry_delay_seconds=0)


@pytest.fixture
def preserver_config():
    return PreserverConfig()


@pytest.fixture
def as_response():
    """Serialize content (with overrides) the way a backend would answer."""

    def serialize(base: Content, **overrides) -> str:
        data = base.to_dict()
        data.update(overrides)
        return json.dumps(data)

    return serialize
