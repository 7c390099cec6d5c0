"""
Pytest configuration and fixtures for chapter navigator tests.
"""

import pytest
import tempfile
from pathlib import Path

from navigator.caching import MemoryCache
from navigator.content_scraper import ScrapeResult
from navigator.navigation_scraper import NavigationScraper
from navigator.pattern_storage import InMemoryPatternStore


class FakeValidator:
    """Stands in for UrlValidator: a URL exists iff it is in ``existing``."""

    def __init__(self, existing=()):
        self.existing = set(existing)
        self.calls = []

    def exists(self, url):
        return bool(url) and url in self.existing

    def exists_all(self, urls):
        urls = list(urls)
        self.calls.append(urls)
        return [self.exists(url) for url in urls]


class FakeContentScraper:
    """Returns canned markdown per URL; unknown URLs fail like a dead page."""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.fetched = []

    def fetch_content(self, url):
        self.fetched.append(url)
        if url not in self.pages:
            return ScrapeResult(content="", title="", source_url=url, error=f"Could not fetch {url}")
        return ScrapeResult(content=self.pages[url], title="", source_url=url)


@pytest.fixture
def temp_test_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def memory_store():
    return InMemoryPatternStore()


@pytest.fixture
def memory_cache():
    return MemoryCache(max_size=100)


@pytest.fixture
def fake_validator():
    return FakeValidator()


@pytest.fixture
def fake_content_scraper():
    return FakeContentScraper()


@pytest.fixture
def navigation_scraper(fake_content_scraper, memory_cache):
    return NavigationScraper(content_scraper=fake_content_scraper, cache=memory_cache, cache_ttl_ms=60_000)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test names."""
    for item in items:
        if "scenario" in item.name or "integration" in item.name:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
