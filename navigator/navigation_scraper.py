"""
Navigation link scraping fallback.

Used when no URL pattern can be trusted: fetch the chapter page, then pick
the next/previous links out of its markdown by their anchor text. Best effort
only, every failure ends up as (None, None).
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin, urlsplit

from .caching import MemoryCache, generate_cache_key
from .config import load_navigator_config
from .content_scraper import ContentScraper
from .logging_config import logger

NEXT_KEYWORDS = [
    'next chapter', 'next page', 'next', 'continue', 'forward', '→', '>>',
    '下一章', '下一页', '下一頁', '次へ', '次の話', '다음',
]
PREVIOUS_KEYWORDS = [
    'previous chapter', 'previous page', 'previous', 'prev', 'back', '←', '<<',
    '上一章', '上一页', '上一頁', '前へ', '前の話', '이전',
]

MARKDOWN_LINK = re.compile(r'(?<!!)\[([^\]]+)\]\(([^)\s]+)(?:\s+"[^"]*")?\)')

# keyword, then only separator characters, then a bare URL
_SEPARATORS = r'[\s:：\-–—>→(\[]{0,10}'
_BARE_URL = r'(https?://[^\s)\]>"\']+)'


def _keyword_url_regex(keywords):
    alternation = '|'.join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))
    return re.compile(rf'(?:{alternation}){_SEPARATORS}{_BARE_URL}', re.IGNORECASE)


NEXT_TEXT_PATTERN = _keyword_url_regex(NEXT_KEYWORDS)
PREVIOUS_TEXT_PATTERN = _keyword_url_regex(PREVIOUS_KEYWORDS)


@dataclass
class NavigationLinks:
    next_url: Optional[str] = None
    previous_url: Optional[str] = None


def extract_markdown_links(content):
    """All ``[text](url)`` tokens as (lowercased text, url) pairs, in page order."""
    return [(text.strip().lower(), url.strip('<>')) for text, url in MARKDOWN_LINK.findall(content)]


def _resolve(href, base_url):
    if not href or href.startswith('#'):
        return None
    absolute = urljoin(base_url, href)
    if urlsplit(absolute).scheme not in ('http', 'https'):
        return None
    return absolute


def find_link(links, keywords, base_url):
    """First link whose text contains any keyword, resolved against the page URL."""
    for text, href in links:
        if any(keyword in text for keyword in keywords):
            resolved = _resolve(href, base_url)
            if resolved:
                return resolved
    return None


def find_link_in_text(content, pattern, base_url):
    """Raw-text fallback: a keyword directly followed by a bare URL."""
    match = pattern.search(content)
    if not match:
        return None
    return _resolve(match.group(1).rstrip('.,;'), base_url)


def parse_navigation_links(content, base_url):
    """Classify the next/previous links found in scraped markdown."""
    links = extract_markdown_links(content)
    logger.trace(f"[NAV SCRAPER] {len(links)} markdown links on {base_url}")

    next_url = find_link(links, NEXT_KEYWORDS, base_url) or \
        find_link_in_text(content, NEXT_TEXT_PATTERN, base_url)
    previous_url = find_link(links, PREVIOUS_KEYWORDS, base_url) or \
        find_link_in_text(content, PREVIOUS_TEXT_PATTERN, base_url)
    return NavigationLinks(next_url=next_url, previous_url=previous_url)


class NavigationScraper:
    """Scrape next/previous chapter links from page content, with a 24h cache."""

    CACHE_PREFIX = "nav-links"

    def __init__(self, content_scraper=None, cache=None, cache_ttl_ms=None):
        config = load_navigator_config()
        self.content_scraper = content_scraper or ContentScraper()
        self.cache = cache if cache is not None else MemoryCache(config['cache_max_entries'])
        self.cache_ttl_ms = cache_ttl_ms if cache_ttl_ms is not None else config['nav_links_cache_ttl_ms']

    def scrape_links(self, url):
        """Return NavigationLinks for ``url``; never raises."""
        try:
            cache_key = generate_cache_key(self.CACHE_PREFIX, url)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"[NAV SCRAPER] Cache hit for {url}")
                return NavigationLinks(**cached)

            result = self.content_scraper.fetch_content(url)
            if result.error or not result.content:
                logger.warning(f"[NAV SCRAPER] No content for {url}: {result.error or 'empty page'}")
                return NavigationLinks()

            links = parse_navigation_links(result.content, url)
            logger.info(f"[NAV SCRAPER] {url}: next={links.next_url} previous={links.previous_url}")
            self.cache.set(
                cache_key,
                {"next_url": links.next_url, "previous_url": links.previous_url},
                self.cache_ttl_ms,
            )
            return links
        except Exception as e:
            logger.error(f"[NAV SCRAPER] Error scraping navigation links for {url}: {e}", exc_info=True)
            return NavigationLinks()
