"""
Pattern storage.

One UrlPattern per domain. Every read-modify-write goes through a store-level
lock, and ``merge_pattern`` exposes that as a single atomic operation so
concurrent predictions for the same domain cannot drop each other's updates.

Backends:
    InMemoryPatternStore   -- process-local, used in tests and short sessions
    JsonFilePatternStore   -- JSON list on disk, same format the scrapers use for metadata
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from dataclasses import fields, replace

from .exceptions import PatternStorageError
from .logging_config import logger
from .models import UrlPattern, now_ms

_PATTERN_FIELDS = {f.name for f in fields(UrlPattern)}


class PatternStore(ABC):
    """Base class: subclasses only provide whole-collection load and save."""

    def __init__(self):
        self._lock = threading.RLock()

    @abstractmethod
    def _load(self):
        """Return {domain: UrlPattern}."""

    @abstractmethod
    def _save(self, patterns):
        """Persist {domain: UrlPattern}."""

    def get_pattern(self, domain):
        with self._lock:
            return self._load().get(domain)

    def get_all_patterns(self):
        with self._lock:
            return list(self._load().values())

    def add_pattern(self, pattern):
        """Upsert by domain. Only the existing record's success rate is carried over."""
        with self._lock:
            patterns = self._load()
            existing = patterns.get(pattern.domain)
            if existing is not None:
                pattern = replace(pattern, success_rate=existing.success_rate)
                logger.debug(f"[PATTERN STORE] Replacing pattern for {pattern.domain}, keeping success rate {existing.success_rate:.3f}")
            patterns[pattern.domain] = pattern
            self._save(patterns)
            return pattern

    def update_pattern(self, domain, **updates):
        """Apply a partial update. Returns the updated pattern, or None if the domain is unknown."""
        unknown = set(updates) - _PATTERN_FIELDS
        if unknown:
            raise PatternStorageError(f"Unknown pattern fields: {sorted(unknown)}")
        with self._lock:
            patterns = self._load()
            if domain not in patterns:
                return None
            patterns[domain] = replace(patterns[domain], **updates)
            self._save(patterns)
            return patterns[domain]

    def merge_pattern(self, domain, merge_fn):
        """Atomically replace a domain's pattern with ``merge_fn(existing_or_None)``.

        If ``merge_fn`` returns None the store is left unchanged.
        """
        with self._lock:
            patterns = self._load()
            merged = merge_fn(patterns.get(domain))
            if merged is None:
                return patterns.get(domain)
            if merged.domain != domain:
                raise PatternStorageError(f"Merge for {domain} returned a pattern for {merged.domain}")
            patterns[domain] = merged
            self._save(patterns)
            return merged

    def remove_stale_patterns(self, max_age_ms, now=None):
        """Drop patterns not used for ``max_age_ms``. Returns the removed domains."""
        now = now if now is not None else now_ms()
        with self._lock:
            patterns = self._load()
            stale = [domain for domain, p in patterns.items() if now - p.last_used > max_age_ms]
            for domain in stale:
                del patterns[domain]
            if stale:
                self._save(patterns)
                logger.info(f"[PATTERN STORE] Evicted {len(stale)} stale patterns: {stale}")
            return stale


class InMemoryPatternStore(PatternStore):
    def __init__(self, patterns=None):
        super().__init__()
        self._patterns = {p.domain: p for p in (patterns or [])}

    def _load(self):
        return dict(self._patterns)

    def _save(self, patterns):
        self._patterns = dict(patterns)


class JsonFilePatternStore(PatternStore):
    """Patterns as a JSON list of records, rewritten on every change."""

    def __init__(self, path):
        super().__init__()
        self.path = path

    def _load(self):
        if not os.path.exists(self.path):
            return {}
        logger.trace(f"[PATTERN STORE] Loading patterns from {self.path}")
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                records = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            raise PatternStorageError(f"Could not read pattern store {self.path}: {e}") from e

        if not isinstance(records, list):
            raise PatternStorageError(f"Pattern store {self.path} must contain a JSON list")
        patterns = {}
        for record in records:
            if not isinstance(record, dict):
                raise PatternStorageError(f"Malformed pattern record {record!r}")
            pattern = UrlPattern.from_dict(record)
            patterns[pattern.domain] = pattern
        return patterns

    def _save(self, patterns):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        temp_path = f"{self.path}.tmp"
        try:
            with open(temp_path, 'w', encoding='utf-8') as f:
                json.dump([p.to_dict() for p in patterns.values()], f, indent=2, ensure_ascii=False)
            os.replace(temp_path, self.path)
        except IOError as e:
            raise PatternStorageError(f"Could not write pattern store {self.path}: {e}") from e
        logger.trace(f"[PATTERN STORE] Saved {len(patterns)} patterns to {self.path}")
