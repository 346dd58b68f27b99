"""
Pytest configuration and fixtures
"""
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock, MagicMock

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from roadmap_pipeline.models.schemas import Resource, Section, Topic, ValidationResult
from roadmap_pipeline.utils.clock import ManualClock
from roadmap_pipeline.utils.ids import SequentialIdGenerator


@pytest.fixture
def mock_config():
    """Create a mock config object"""
    config = Mock()

    # Set default config values
    config.URL_CACHE_TTL_SECONDS = 24 * 60 * 60
    config.URL_BATCH_SIZE = 25
    config.URL_PROBE_TIMEOUT = 5
    config.URL_PROBE_RETRIES = 2
    config.URL_RETRY_BACKOFF = 0
    config.URL_USER_AGENT = "test-agent"
    config.URL_RULES_PATH = None
    config.STORAGE_BATCH_SIZE = 10
    config.RESOURCE_REVALIDATE_AFTER_DAYS = 2
    config.RESOURCE_REVALIDATE_LIMIT = 1000
    config.SECTION_PROGRESSION = [
        "Getting Started", "Core Concepts", "Practical Applications", "Advanced Topics"
    ]
    config.YOUTUBE_API_KEY = None

    return config


@pytest.fixture
def clock():
    """Manual clock starting at 2024-01-01 UTC"""
    return ManualClock()


@pytest.fixture
def id_generator():
    """Deterministic ids: id-1, id-2, ..."""
    return SequentialIdGenerator()


def make_response(status_code=200, content_type="text/html", url=None, history=None):
    """Create a mock requests.Response"""
    response = MagicMock()
    response.status_code = status_code
    response.headers = {"content-type": content_type} if content_type else {}
    response.history = history or []
    response.url = url
    return response


def make_result(url, is_valid=True, clock=None, **kwargs):
    """Create a ValidationResult for parser and revalidator tests"""
    clock = clock or ManualClock()
    return ValidationResult(url=url, is_valid=is_valid, validated_at=clock.now(), **kwargs)


def make_topic(topic_id, title, week=1, roadmap_id="roadmap-1", keep=False, completed=False):
    """Create a Topic with a default section"""
    return Topic(
        id=topic_id,
        roadmap_id=roadmap_id,
        title=title,
        week_number=week,
        sort_order=week,
        section=Section(name="Getting Started"),
        keep=keep,
        completed=completed,
    )


def make_resource(resource_id, topic_id, roadmap_id="roadmap-1", url=None, **kwargs):
    """Create a Resource for a topic"""
    return Resource(
        id=resource_id,
        topic_id=topic_id,
        roadmap_id=roadmap_id,
        title=f"Resource {resource_id}",
        url=url or f"https://docs.python.org/3/{resource_id}",
        **kwargs
    )


class StubValidator:
    """Validator double that answers from a fixed table and records calls"""

    def __init__(self, invalid_urls=(), clock=None):
        self.invalid_urls = set(invalid_urls)
        self.clock = clock or ManualClock()
        self.calls = []

    def _verdict(self, url):
        if url in self.invalid_urls:
            return make_result(url, False, self.clock, status_code=404, error="Page not found")
        return make_result(url, True, self.clock, status_code=200)

    async def validate_many(self, urls):
        self.calls.append(list(urls))
        return {url: self._verdict(url) for url in urls}

    async def validate_batch(self, urls):
        self.calls.append(list(urls))
        return {url: self._verdict(url) for url in urls}


@pytest.fixture
def stub_validator(clock):
    return StubValidator(clock=clock)


SAMPLE_ROADMAP = """Here is your personalised roadmap!

# Week 1: Python Basics (ID: 3f2a-99bc)

Learn the syntax and core data types.

Second paragraph that is not part of the description.

### Objectives:
- Understand variables and types
- Write simple functions

### Resources:
- [VIDEO][TUTORIAL][FREE] "Python for Beginners" - A full beginner course: https://www.youtube.com/watch?v=rfscVS0vtbw
- [ARTICLE][REFERENCE][PAID $29] "Fluent Python" - Deeper reference material: https://www.oreilly.com/library/view/fluent-python/9781491946237/

### Exercise:
- Build a number guessing game ##

# Week 2: Control Flow

Conditionals and loops.

### Objectives:
1. Use if statements
2. Write for loops

### Exercise:
- Solve FizzBuzz...
"""
