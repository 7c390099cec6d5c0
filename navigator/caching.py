"""
TTL Caching Module

In-process key/value cache with per-entry time-to-live, shared by the URL
validator (existence results), the navigation scraper (extracted link pairs)
and the request boundary (whole prediction responses).

This module handles:
- Hashed cache keys
- Expiry on read plus periodic cleanup
- Bounded size with oldest-first eviction
- Cache statistics
"""

import hashlib
import threading
import time


def generate_cache_key(prefix, text):
    """Build a namespaced cache key from arbitrary text (usually a URL)."""
    digest = hashlib.sha256(text.encode('utf-8')).hexdigest()
    return f"{prefix}:{digest}"


class MemoryCache:
    """Thread-safe TTL cache. TTLs are in milliseconds."""

    def __init__(self, max_size=1000, clock=time.time):
        self.max_size = max_size
        self._clock = clock
        self._store = {}
        self._lock = threading.Lock()

    def _now_ms(self):
        return self._clock() * 1000

    def get(self, key):
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._now_ms() > expires_at:
                del self._store[key]
                return None
            return value

    def set(self, key, value, ttl_ms):
        with self._lock:
            if key not in self._store and len(self._store) >= self.max_size:
                # dicts keep insertion order, so the first key is the oldest
                oldest_key = next(iter(self._store))
                del self._store[oldest_key]
            self._store.pop(key, None)
            self._store[key] = (value, self._now_ms() + ttl_ms)

    def delete(self, key):
        with self._lock:
            self._store.pop(key, None)

    def clear(self):
        with self._lock:
            self._store.clear()

    def cleanup(self):
        """Drop every expired entry. Returns the number removed."""
        now = self._now_ms()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._store.items() if now > expires_at]
            for key in expired:
                del self._store[key]
        return len(expired)

    def stats(self):
        """Count entries per key prefix (``url-valid``, ``nav-links``, ``chapter-nav``)."""
        with self._lock:
            by_prefix = {}
            for key in self._store:
                prefix = key.split(':', 1)[0]
                by_prefix[prefix] = by_prefix.get(prefix, 0) + 1
            return {"total_entries": len(self._store), "by_prefix": by_prefix}

    def __len__(self):
        with self._lock:
            return len(self._store)
