"""
Chapter Navigation Engine

Predicts the next/previous chapter URLs for a chapter URL in three tiers:

1. Pattern reuse   -- the domain has a stored, usable pattern with confidence > 0.6
2. Pattern learning -- learn a template from this URL and keep it if a sibling validates
3. Scraping        -- read the links off the page itself

A trusted pattern is final: if neither neighbour validates, its confidence
drops and the result carries no URLs. Every tier returns the same
PredictionResult shape; expected failures never raise.
"""

from dataclasses import replace

from .config import (
    PATTERN_CONFIDENCE_THRESHOLD,
    SCRAPING_CONFIDENCE,
    VALIDATED_PATTERN_SEED,
)
from .exceptions import PatternStorageError
from .identifier import extract_chapter_identifier
from .logging_config import logger
from .models import PredictionMethod, PredictionResult, now_ms
from .navigation_scraper import NavigationScraper
from .pattern_learning import get_domain, learn_pattern, update_pattern_confidence
from .url_generator import generate_next_url, generate_previous_url
from .url_validator import UrlValidator


class ChapterNavigationEngine:
    """Orchestrates extraction, pattern reuse/learning, validation and scraping."""

    def __init__(self, store, validator=None, scraper=None, confidence_threshold=PATTERN_CONFIDENCE_THRESHOLD):
        self.store = store
        self.validator = validator or UrlValidator()
        self.scraper = scraper or NavigationScraper()
        self.confidence_threshold = confidence_threshold

    def _get_stored_pattern(self, domain):
        try:
            return self.store.get_pattern(domain)
        except PatternStorageError as e:
            logger.error(f"[ENGINE] Stored pattern for {domain} is unreadable, ignoring it: {e}")
            return None

    def _merge(self, domain, merge_fn, fallback):
        try:
            return self.store.merge_pattern(domain, merge_fn)
        except PatternStorageError as e:
            logger.error(f"[ENGINE] Could not persist pattern for {domain}: {e}")
            return fallback

    def _is_trusted(self, pattern):
        if not pattern.is_usable():
            logger.warning(f"[ENGINE] Stored template '{pattern.template}' for {pattern.domain} is malformed, not using it")
            return False
        return pattern.confidence > self.confidence_threshold

    def _validate_candidates(self, url, identifier):
        """Generate both siblings and check them in parallel.

        Returns:
            tuple | None: (next_url, previous_url) for the sides that validated,
            or None when no candidate could be generated.
        """
        next_url = generate_next_url(url, identifier)
        previous_url = generate_previous_url(url, identifier)
        if next_url is None and previous_url is None:
            logger.debug(f"[ENGINE] No sibling candidates could be generated for {url}")
            return None

        next_valid, previous_valid = self.validator.exists_all([next_url, previous_url])
        logger.debug(f"[ENGINE] Candidates next={next_url} ({next_valid}) previous={previous_url} ({previous_valid})")
        return (next_url if next_valid else None, previous_url if previous_valid else None)

    def _predict_from_stored(self, url, identifier, stored):
        validated = self._validate_candidates(url, identifier)
        if validated is None:
            return None

        success = any(validated)
        updated = self._merge(
            stored.domain,
            lambda existing: update_pattern_confidence(existing or stored, success),
            fallback=update_pattern_confidence(stored, success),
        )
        next_url, previous_url = validated
        if success:
            logger.component(f"[ENGINE] Tier 1 (stored pattern) hit for {url}, confidence {updated.confidence:.3f}")
        else:
            # A trusted pattern answers on its own, even with no neighbours
            logger.component(
                f"[ENGINE] Stored pattern for {stored.domain} failed validation; "
                f"confidence now {updated.confidence:.3f}"
            )
        return PredictionResult(
            next_url=next_url,
            previous_url=previous_url,
            pattern=updated,
            confidence=updated.confidence,
            method=PredictionMethod.PATTERN,
            source_url=url,
            validated=True,
        )

    def _predict_from_learned(self, url, identifier):
        learned = learn_pattern(url)
        if learned is None:
            return None

        validated = self._validate_candidates(url, identifier)
        if validated is None or not any(validated):
            logger.debug(f"[ENGINE] Learned pattern for {learned.domain} did not validate, discarding it")
            return None

        seeded = replace(
            learned,
            confidence=VALIDATED_PATTERN_SEED,
            success_rate=VALIDATED_PATTERN_SEED,
            last_used=now_ms(),
        )

        try:
            stored = self.store.add_pattern(seeded)
        except PatternStorageError as e:
            logger.error(f"[ENGINE] Could not persist pattern for {seeded.domain}: {e}")
            stored = seeded

        next_url, previous_url = validated
        logger.component(f"[ENGINE] Tier 2 (learned pattern '{stored.template}') stored for {stored.domain}")
        return PredictionResult(
            next_url=next_url,
            previous_url=previous_url,
            pattern=stored,
            confidence=seeded.confidence,
            method=PredictionMethod.PATTERN,
            source_url=url,
            validated=True,
        )

    def _predict_from_scraping(self, url):
        links = self.scraper.scrape_links(url)
        logger.component(f"[ENGINE] Tier 3 (scraping) for {url}: next={links.next_url} previous={links.previous_url}")
        return PredictionResult(
            next_url=links.next_url,
            previous_url=links.previous_url,
            pattern=None,
            confidence=SCRAPING_CONFIDENCE,
            method=PredictionMethod.SCRAPING,
            source_url=url,
            validated=True,
        )

    def predict_navigation(self, url):
        """Predict the neighbouring chapter URLs of ``url``. Always returns a PredictionResult."""
        logger.info(f"[ENGINE] Predicting navigation for {url}")
        identifier = extract_chapter_identifier(url)
        domain = get_domain(url)

        if identifier.found and domain:
            stored = self._get_stored_pattern(domain)
            if stored is not None and self._is_trusted(stored):
                result = self._predict_from_stored(url, identifier, stored)
                if result is not None:
                    return result
            elif stored is not None:
                logger.debug(f"[ENGINE] Pattern for {domain} not trusted (confidence {stored.confidence:.3f})")

            result = self._predict_from_learned(url, identifier)
            if result is not None:
                return result

        return self._predict_from_scraping(url)
