"""
Pattern learning and confidence scoring.

A learned pattern is the chapter URL's path+query with the identifier swapped
for a typed placeholder. Its trust is an exponentially weighted success rate,
so a site that changes its URL scheme decays within a handful of predictions.
"""

from dataclasses import replace
from urllib.parse import urlsplit

from .config import (
    LEARNED_PATTERN_SEED,
    MAX_PATTERN_CONFIDENCE,
    SUCCESS_RATE_WEIGHT,
)
from .identifier import extract_chapter_identifier, split_path_and_query
from .logging_config import logger
from .models import PLACEHOLDERS, UrlPattern, now_ms


def get_domain(url):
    """Hostname the pattern is keyed on (lowercased, port dropped)."""
    return (urlsplit(url).hostname or "").lower()


def learn_pattern(url):
    """Build an unpersisted UrlPattern from a chapter URL.

    Returns:
        UrlPattern | None: seeded at 0.5 confidence, or None if the URL carries
        no recognisable chapter identifier.
    """
    identifier = extract_chapter_identifier(url)
    if not identifier.found:
        logger.debug(f"[LEARNER] Nothing to learn from {url}")
        return None

    domain = get_domain(url)
    if not domain:
        logger.debug(f"[LEARNER] URL has no host, not learning: {url}")
        return None

    target = split_path_and_query(url)
    placeholder = PLACEHOLDERS[identifier.kind]
    template = target[:identifier.start] + placeholder + target[identifier.end:]

    pattern = UrlPattern(
        domain=domain,
        template=template,
        example_url=url,
        identifier_kind=identifier.kind,
        confidence=LEARNED_PATTERN_SEED,
        success_rate=LEARNED_PATTERN_SEED,
        last_used=now_ms(),
    )
    logger.component(f"[LEARNER] Learned template '{template}' for {domain} ({identifier.matched_pattern})")
    return pattern


def update_pattern_confidence(pattern, success, weight=SUCCESS_RATE_WEIGHT):
    """Fold one validation outcome into a pattern's statistics.

    success_rate' = (1 - w) * success_rate + w * outcome
    confidence'   = min(0.95, success_rate')

    Returns a new UrlPattern; the argument is left untouched.
    """
    success_rate = (1 - weight) * pattern.success_rate + weight * (1.0 if success else 0.0)
    confidence = min(MAX_PATTERN_CONFIDENCE, success_rate)
    logger.debug(
        f"[LEARNER] {pattern.domain}: {'success' if success else 'failure'} "
        f"success_rate {pattern.success_rate:.3f} -> {success_rate:.3f}"
    )
    return replace(pattern, success_rate=success_rate, confidence=confidence, last_used=now_ms())
