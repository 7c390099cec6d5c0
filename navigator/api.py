"""
Request boundary for chapter navigation.

Framework-agnostic handlers: they take a decoded JSON payload and return
``(status_code, body)`` so the Streamlit page, the CLI or any HTTP server can
serve them without touching the engine directly.
"""

import json
import threading
import time
import uuid
from dataclasses import dataclass
from urllib.parse import urlsplit

from .caching import MemoryCache, generate_cache_key
from .config import load_navigator_config
from .exceptions import RequestValidationError
from .logging_config import logger
from .navigation_engine import ChapterNavigationEngine
from .pattern_storage import JsonFilePatternStore

MAX_URL_LENGTH = 2048
RESPONSE_CACHE_PREFIX = "chapter-nav"

_default_engine = None
_default_cache = None
_default_lock = threading.Lock()


@dataclass(frozen=True)
class NextChapterRequest:
    url: str


def validate_next_chapter_request(payload):
    """Turn an untyped payload into a NextChapterRequest.

    Returns:
        tuple: (NextChapterRequest, []) on success, (None, [field errors]) otherwise.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None, ["body: must be valid JSON"]

    if not isinstance(payload, dict):
        return None, ["body: must be a JSON object"]

    errors = []
    url = payload.get("url")
    if url is None:
        errors.append("url: is required")
    elif not isinstance(url, str):
        errors.append("url: must be a string")
    else:
        url = url.strip()
        if not url:
            errors.append("url: must not be empty")
        elif len(url) > MAX_URL_LENGTH:
            errors.append(f"url: must be at most {MAX_URL_LENGTH} characters")
        else:
            try:
                parts = urlsplit(url)
                if parts.scheme not in ("http", "https"):
                    errors.append("url: must use http or https")
                elif not parts.hostname:
                    errors.append("url: must include a host")
            except ValueError:
                errors.append("url: is not a valid URL")

    if errors:
        return None, errors
    return NextChapterRequest(url=url), []


def parse_next_chapter_request(payload):
    """Like validate_next_chapter_request but raises RequestValidationError."""
    request, errors = validate_next_chapter_request(payload)
    if errors:
        raise RequestValidationError(errors)
    return request


def get_default_engine():
    """Engine backed by the configured JSON pattern store, created once per process."""
    global _default_engine, _default_cache
    with _default_lock:
        if _default_engine is None:
            config = load_navigator_config()
            _default_cache = MemoryCache(config['cache_max_entries'])
            store = JsonFilePatternStore(config['pattern_store_path'])
            _default_engine = ChapterNavigationEngine(store, confidence_threshold=config['confidence_threshold'])
            logger.component(f"[API] Navigation engine ready (patterns: {config['pattern_store_path']})")
        return _default_engine


def get_default_response_cache():
    get_default_engine()
    return _default_cache


def handle_next_chapter_request(payload, engine=None, cache=None, cache_ttl_ms=None):
    """Serve one navigation prediction. Returns (status_code, body)."""
    start_time = time.time()

    def elapsed_ms():
        return int((time.time() - start_time) * 1000)

    request, errors = validate_next_chapter_request(payload)
    if errors:
        logger.warning(f"[API] Rejected navigation request: {errors}")
        return 400, {
            "error": "Request validation failed",
            "message": "The request parameters are invalid",
            "details": errors,
        }

    engine = engine or get_default_engine()
    cache = cache if cache is not None else get_default_response_cache()
    if cache_ttl_ms is None:
        cache_ttl_ms = load_navigator_config()['response_cache_ttl_ms']

    cache_key = generate_cache_key(RESPONSE_CACHE_PREFIX, request.url)
    cached = cache.get(cache_key)
    if cached is not None:
        logger.info(f"[API] Cache hit for {request.url}")
        return 200, {**cached, "cached": True, "responseTime": elapsed_ms()}

    try:
        prediction = engine.predict_navigation(request.url)
    except Exception as e:
        request_id = uuid.uuid4().hex[:12]
        logger.error(f"[API] Prediction failed for {request.url} (request {request_id}): {e}", exc_info=True)
        return 500, {
            "error": "Navigation prediction failed",
            "message": "Unable to predict next/previous chapter URLs",
            "requestId": request_id,
            "responseTime": elapsed_ms(),
        }

    body = prediction.to_dict()
    cache.set(cache_key, body, cache_ttl_ms)
    response_time = elapsed_ms()
    logger.info(
        f"[API] {request.url}: method={body['method']} confidence={body['confidence']} "
        f"next={body['nextUrl']} previous={body['previousUrl']} ({response_time}ms)"
    )
    return 200, {**body, "cached": False, "responseTime": response_time}


def get_pattern_statistics(store=None):
    """Pattern counts bucketed by confidence: high >= 0.8, medium [0.5, 0.8), low < 0.5."""
    if store is None:
        store = get_default_engine().store
    patterns = store.get_all_patterns()
    return {
        "totalPatterns": len(patterns),
        "patternsByConfidence": {
            "high": sum(1 for p in patterns if p.confidence >= 0.8),
            "medium": sum(1 for p in patterns if 0.5 <= p.confidence < 0.8),
            "low": sum(1 for p in patterns if p.confidence < 0.5),
        },
    }
