"""
Scenario tests for the three-tier navigation engine.

Validation and scraping are replaced by the fakes from conftest, so these
tests exercise tier selection and confidence bookkeeping only.
"""

from unittest.mock import MagicMock, patch

import pytest

from navigator.caching import MemoryCache
from navigator.exceptions import PatternStorageError
from navigator.models import IdentifierKind, PredictionMethod, UrlPattern
from navigator.navigation_engine import ChapterNavigationEngine
from navigator.navigation_scraper import NavigationScraper
from navigator.pattern_storage import InMemoryPatternStore, JsonFilePatternStore
from navigator.url_validator import UrlValidator

from conftest import FakeContentScraper, FakeValidator

SOURCE = "https://site.example/novel/story/chapter-50"
NEXT = "https://site.example/novel/story/chapter-51"
PREVIOUS = "https://site.example/novel/story/chapter-49"


def stored_pattern(confidence, template="/novel/story/chapter-{number}"):
    return UrlPattern(
        domain="site.example",
        template=template,
        example_url="https://site.example/novel/story/chapter-10",
        identifier_kind=IdentifierKind.NUMERIC,
        confidence=confidence,
        success_rate=confidence,
        last_used=0,
    )


def make_engine(store, existing=(), pages=None):
    validator = FakeValidator(existing)
    scraper = NavigationScraper(
        content_scraper=FakeContentScraper(pages), cache=MemoryCache(), cache_ttl_ms=60_000,
    )
    return ChapterNavigationEngine(store, validator=validator, scraper=scraper), validator


def test_scenario_first_visit_learns_pattern(memory_store):
    engine, validator = make_engine(memory_store, existing={NEXT, PREVIOUS})

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.PATTERN
    assert result.next_url == NEXT
    assert result.previous_url == PREVIOUS
    assert result.confidence == 0.7
    assert result.validated
    assert result.source_url == SOURCE
    assert validator.calls == [[NEXT, PREVIOUS]]

    stored = memory_store.get_pattern("site.example")
    assert stored.template == "/novel/story/chapter-{number}"
    assert stored.identifier_kind == IdentifierKind.NUMERIC
    assert stored.confidence == 0.7
    assert stored.success_rate == 0.7
    assert stored.last_used > 0


def test_scenario_second_visit_reuses_stored_pattern(memory_store):
    engine, _ = make_engine(memory_store, existing={NEXT, PREVIOUS})
    engine.predict_navigation(SOURCE)

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.PATTERN
    assert result.confidence == pytest.approx(0.79)
    assert result.pattern.success_rate == pytest.approx(0.79)
    assert memory_store.get_pattern("site.example").confidence == pytest.approx(0.79)


def test_scenario_nothing_validates_falls_back_to_scraping(memory_store):
    page = "[Previous](/novel/story/chapter-49-b) [Next](/novel/story/chapter-51-b)"
    engine, _ = make_engine(memory_store, pages={SOURCE: page})

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.SCRAPING
    assert result.confidence == 0.3
    assert result.pattern is None
    assert result.next_url == "https://site.example/novel/story/chapter-51-b"
    assert result.previous_url == "https://site.example/novel/story/chapter-49-b"
    assert memory_store.get_all_patterns() == []


def test_scenario_scrape_failure_returns_empty_prediction(memory_store):
    engine, _ = make_engine(memory_store)

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.SCRAPING
    assert result.next_url is None
    assert result.previous_url is None
    assert result.confidence == 0.3


def test_scenario_url_without_identifier_goes_straight_to_scraping(memory_store):
    source = "https://site.example/novel/story/第五十章"
    page = "[目录](/novel/story) [Next Chapter](https://site.example/novel/story/第五十一章)"
    engine, validator = make_engine(memory_store, existing={NEXT, PREVIOUS}, pages={source: page})

    result = engine.predict_navigation(source)

    assert result.method == PredictionMethod.SCRAPING
    assert result.next_url == "https://site.example/novel/story/第五十一章"
    assert result.previous_url is None
    assert result.confidence == 0.3
    assert result.validated
    assert validator.calls == []


def test_scenario_stored_pattern_with_one_valid_neighbour(memory_store):
    memory_store.add_pattern(stored_pattern(0.7))
    source = "https://site.example/novel/story/chapter-100"
    next_url = "https://site.example/novel/story/chapter-101"
    engine, validator = make_engine(memory_store, existing={next_url})

    result = engine.predict_navigation(source)

    assert result.method == PredictionMethod.PATTERN
    assert result.next_url == next_url
    assert result.previous_url is None
    assert result.validated
    assert result.confidence == pytest.approx(0.79)
    # Tier 1 only: one validation round, the stored record was updated not re-learned
    assert validator.calls == [[next_url, "https://site.example/novel/story/chapter-99"]]
    stored = memory_store.get_pattern("site.example")
    assert stored.example_url == "https://site.example/novel/story/chapter-10"
    assert stored.success_rate == pytest.approx(0.79)


def test_threshold_is_strict(memory_store):
    memory_store.add_pattern(stored_pattern(0.6))
    engine, validator = make_engine(memory_store, existing={NEXT})

    result = engine.predict_navigation(SOURCE)

    # 0.6 is not trusted, so the pattern is re-learned; only the success rate carries over
    assert result.method == PredictionMethod.PATTERN
    assert result.next_url == NEXT
    assert result.previous_url is None
    assert result.confidence == 0.7
    assert len(validator.calls) == 1
    stored = memory_store.get_pattern("site.example")
    assert stored.confidence == 0.7
    assert stored.success_rate == 0.6
    assert stored.example_url == SOURCE


def test_failed_stored_pattern_decays_without_fallback(memory_store):
    memory_store.add_pattern(stored_pattern(0.8))
    page = "[Next Chapter](https://site.example/novel/story/chapter-51)"
    engine, validator = make_engine(memory_store, pages={SOURCE: page})

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.PATTERN
    assert result.next_url is None
    assert result.previous_url is None
    assert result.validated
    assert result.confidence == pytest.approx(0.56)
    assert result.pattern.confidence == pytest.approx(0.56)
    assert len(validator.calls) == 1
    assert engine.scraper.content_scraper.fetched == []
    assert memory_store.get_pattern("site.example").confidence == pytest.approx(0.56)


def test_repeated_failures_demote_stored_pattern(memory_store):
    memory_store.add_pattern(stored_pattern(0.9))
    engine, validator = make_engine(memory_store)

    engine.predict_navigation(SOURCE)
    assert memory_store.get_pattern("site.example").confidence == pytest.approx(0.63)

    engine.predict_navigation(SOURCE)
    assert memory_store.get_pattern("site.example").confidence == pytest.approx(0.441)

    # Below the threshold tier 1 is skipped entirely: only the learning round runs
    validator.calls.clear()
    engine.predict_navigation(SOURCE)
    assert len(validator.calls) == 1
    assert memory_store.get_pattern("site.example").confidence == pytest.approx(0.441)


def test_malformed_stored_template_is_relearned(memory_store):
    memory_store.add_pattern(stored_pattern(0.9, template="/novel/story/chapter-50"))
    engine, _ = make_engine(memory_store, existing={NEXT, PREVIOUS})

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.PATTERN
    assert result.confidence == 0.7
    stored = memory_store.get_pattern("site.example")
    assert stored.template == "/novel/story/chapter-{number}"
    assert stored.confidence == 0.7
    assert stored.success_rate == 0.9


def test_unreadable_store_is_ignored(temp_test_dir):
    path = temp_test_dir / "url_patterns.json"
    path.write_text("{broken", encoding="utf-8")
    engine, _ = make_engine(JsonFilePatternStore(str(path)), existing={NEXT, PREVIOUS})

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.PATTERN
    assert result.next_url == NEXT
    assert result.confidence == 0.7


def test_store_write_failure_is_ignored():
    class ReadOnlyStore(InMemoryPatternStore):
        def _save(self, patterns):
            raise PatternStorageError("read-only")

    engine, _ = make_engine(ReadOnlyStore(), existing={NEXT})

    result = engine.predict_navigation(SOURCE)

    assert result.method == PredictionMethod.PATTERN
    assert result.next_url == NEXT


def test_chapter_one_has_no_previous_candidate(memory_store):
    source = "https://site.example/novel/story/chapter-1"
    engine, validator = make_engine(memory_store, existing={"https://site.example/novel/story/chapter-2"})

    result = engine.predict_navigation(source)

    assert validator.calls == [["https://site.example/novel/story/chapter-2", None]]
    assert result.next_url == "https://site.example/novel/story/chapter-2"
    assert result.previous_url is None


def test_predicted_urls_differ_only_in_identifier(memory_store):
    source = "https://site.example/series-50/chapter-50?lang=en"
    next_url = "https://site.example/series-50/chapter-51?lang=en"
    previous_url = "https://site.example/series-50/chapter-49?lang=en"
    engine, _ = make_engine(memory_store, existing={next_url, previous_url})

    result = engine.predict_navigation(source)

    assert (result.next_url, result.previous_url) == (next_url, previous_url)
    assert memory_store.get_pattern("site.example").template == "/series-50/chapter-{number}?lang=en"


def test_result_serializes_for_api(memory_store):
    engine, _ = make_engine(memory_store, existing={NEXT, PREVIOUS})

    body = engine.predict_navigation(SOURCE).to_dict()

    assert body["nextUrl"] == NEXT
    assert body["previousUrl"] == PREVIOUS
    assert body["method"] == "pattern"
    assert body["pattern"]["pattern"] == "/novel/story/chapter-{number}"
    assert body["pattern"]["chapterIdentifier"] == "numeric"
    assert body["sourceUrl"] == SOURCE


@patch('navigator.url_validator.requests.head')
def test_repeated_predictions_are_stable(mock_head, memory_store):
    existing = {NEXT, PREVIOUS}
    mock_head.side_effect = lambda url, **kwargs: MagicMock(status_code=200 if url in existing else 404)
    validator = UrlValidator(cache=MemoryCache(), timeout=5, cache_ttl_ms=60_000, max_workers=2, user_agent="test")
    scraper = NavigationScraper(content_scraper=FakeContentScraper(), cache=MemoryCache(), cache_ttl_ms=60_000)
    engine = ChapterNavigationEngine(memory_store, validator=validator, scraper=scraper)

    first = engine.predict_navigation(SOURCE)
    second = engine.predict_navigation(SOURCE)

    assert (first.next_url, first.previous_url) == (NEXT, PREVIOUS)
    assert (second.next_url, second.previous_url) == (first.next_url, first.previous_url)
    # Second round is answered from the validator cache
    assert mock_head.call_count == 2
