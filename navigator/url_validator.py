"""
URL existence validation.

A candidate chapter URL "exists" when a HEAD request answers 2xx, 403 or 405.
403/405 mean the server knows the path and only refuses the method or the
client. If the HEAD request cannot complete, one GET is tried; anything that is
still unknown after that counts as missing. Results are cached, positive and
negative alike.
"""

from concurrent.futures import ThreadPoolExecutor

import requests

from .caching import MemoryCache, generate_cache_key
from .config import load_navigator_config
from .logging_config import logger

EXISTS_STATUSES = {403, 405}


def _is_success(status_code):
    return 200 <= status_code < 300


class UrlValidator:
    """Network-backed existence check with a shared TTL cache."""

    CACHE_PREFIX = "url-valid"

    def __init__(self, cache=None, timeout=None, cache_ttl_ms=None, max_workers=None, user_agent=None):
        config = load_navigator_config()
        self.cache = cache if cache is not None else MemoryCache(config['cache_max_entries'])
        self.timeout = timeout if timeout is not None else config['validation_timeout']
        self.cache_ttl_ms = cache_ttl_ms if cache_ttl_ms is not None else config['validation_cache_ttl_ms']
        self.max_workers = max_workers if max_workers is not None else config['validator_workers']
        self.headers = {'User-Agent': user_agent or config['user_agent']}

    def _check(self, url):
        try:
            response = requests.head(url, headers=self.headers, timeout=self.timeout, allow_redirects=True)
            exists = _is_success(response.status_code) or response.status_code in EXISTS_STATUSES
            logger.debug(f"[VALIDATOR] HEAD {url} -> {response.status_code} ({'exists' if exists else 'missing'})")
            return exists
        except requests.exceptions.RequestException as e:
            logger.debug(f"[VALIDATOR] HEAD failed for {url}: {e}. Falling back to GET.")

        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout, allow_redirects=True, stream=True)
            try:
                exists = _is_success(response.status_code)
            finally:
                response.close()
            logger.debug(f"[VALIDATOR] GET {url} -> {response.status_code} ({'exists' if exists else 'missing'})")
            return exists
        except requests.exceptions.RequestException as e:
            logger.info(f"[VALIDATOR] GET fallback failed for {url}: {e}. Treating as missing.")
            return False

    def exists(self, url):
        """True if ``url`` plausibly exists. Never raises for network problems."""
        if not url:
            return False

        cache_key = generate_cache_key(self.CACHE_PREFIX, url)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.trace(f"[VALIDATOR] Cache hit for {url}: {cached}")
            return cached

        exists = self._check(url)
        self.cache.set(cache_key, exists, self.cache_ttl_ms)
        return exists

    def exists_all(self, urls):
        """Validate several candidates concurrently; order is preserved, None entries are False."""
        urls = list(urls)
        results = [False] * len(urls)
        pending = [(index, url) for index, url in enumerate(urls) if url]
        if not pending:
            return results

        workers = max(1, min(self.max_workers, len(pending)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(index, executor.submit(self.exists, url)) for index, url in pending]
            for index, future in futures:
                results[index] = future.result()
        return results
