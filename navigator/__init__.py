"""
Chapter Navigator - next/previous chapter URL prediction

Given the URL of one chapter, predicts the URLs of its neighbours by reusing
learned per-domain URL templates, learning new ones, or scraping the page.

Modules:
    config: Settings from environment, .env and config.json
    logging_config: Project logger with TRACE/COMPONENT levels
    models: ChapterIdentifier, UrlPattern, PredictionResult
    identifier: Chapter identifier extraction
    pattern_learning: Template learning and confidence scoring
    url_generator: Sibling URL synthesis
    url_validator: Cached existence checks
    content_scraper: Page fetching and HTML to markdown conversion
    navigation_scraper: Next/previous link scraping fallback
    pattern_storage: Pattern store interface and backends
    navigation_engine: Three-tier prediction orchestrator
    api: Request validation, response caching, pattern statistics

Usage:
    from navigator import ChapterNavigationEngine, InMemoryPatternStore
    engine = ChapterNavigationEngine(InMemoryPatternStore())
    result = engine.predict_navigation("https://example.com/novel/chapter-50")
"""

# Configuration and setup
from .config import (
    load_navigator_config,
    get_config_value,
    get_setting,
    show_config_status,
)

# Logging
from .logging_config import logger, set_debug_level

# Errors
from .exceptions import (
    NavigatorError,
    PatternStorageError,
    ScrapeError,
    RequestValidationError,
)

# Data model
from .models import (
    ChapterIdentifier,
    IdentifierKind,
    PredictionMethod,
    PredictionResult,
    UrlPattern,
)

# Prediction components
from .identifier import extract_chapter_identifier
from .pattern_learning import learn_pattern, update_pattern_confidence, get_domain
from .url_generator import generate_next_url, generate_previous_url
from .caching import MemoryCache, generate_cache_key
from .url_validator import UrlValidator
from .content_scraper import ContentScraper, ScrapeResult
from .navigation_scraper import NavigationScraper, NavigationLinks
from .pattern_storage import PatternStore, InMemoryPatternStore, JsonFilePatternStore
from .navigation_engine import ChapterNavigationEngine

# Request boundary
from .api import (
    NextChapterRequest,
    validate_next_chapter_request,
    parse_next_chapter_request,
    handle_next_chapter_request,
    get_pattern_statistics,
    get_default_engine,
)

__all__ = [
    # Configuration and setup
    'load_navigator_config', 'get_config_value', 'get_setting', 'show_config_status',

    # Logging
    'logger', 'set_debug_level',

    # Errors
    'NavigatorError', 'PatternStorageError', 'ScrapeError', 'RequestValidationError',

    # Data model
    'ChapterIdentifier', 'IdentifierKind', 'PredictionMethod', 'PredictionResult', 'UrlPattern',

    # Prediction components
    'extract_chapter_identifier', 'learn_pattern', 'update_pattern_confidence', 'get_domain',
    'generate_next_url', 'generate_previous_url',
    'MemoryCache', 'generate_cache_key',
    'UrlValidator', 'ContentScraper', 'ScrapeResult',
    'NavigationScraper', 'NavigationLinks',
    'PatternStore', 'InMemoryPatternStore', 'JsonFilePatternStore',
    'ChapterNavigationEngine',

    # Request boundary
    'NextChapterRequest', 'validate_next_chapter_request', 'parse_next_chapter_request',
    'handle_next_chapter_request', 'get_pattern_statistics', 'get_default_engine',
]
