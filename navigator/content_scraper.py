"""
Page content scraper.

Fetches a chapter page with requests, strips scripts and ads with
BeautifulSoup and converts what is left to markdown-like text with html2text.
Links survive the conversion as ``[text](href)`` tokens, which is what the
navigation scraper looks for.
"""

import time
from dataclasses import dataclass
from typing import Optional

import html2text
import requests
from bs4 import BeautifulSoup

from .config import load_navigator_config
from .exceptions import ScrapeError
from .logging_config import logger

REMOVE_SELECTORS = [
    'script', 'style', 'noscript', 'iframe', 'ins',
    '.adsbygoogle', '.advertisement', '.ad-container',
]

TITLE_SELECTORS = ['h1', '.chapter-title', 'title', 'h2']


@dataclass
class ScrapeResult:
    content: str
    title: str
    source_url: str
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None and bool(self.content)


class ContentScraper:
    """Fetch a URL and return its readable content as markdown-like text."""

    def __init__(self, timeout=None, max_bytes=None, max_attempts=None, retry_delay=1.0, user_agent=None):
        config = load_navigator_config()
        self.timeout = timeout if timeout is not None else config['scrape_timeout']
        self.max_bytes = max_bytes if max_bytes is not None else config['scrape_max_bytes']
        self.max_attempts = max_attempts if max_attempts is not None else config['scrape_attempts']
        self.retry_delay = retry_delay
        self.headers = {'User-Agent': user_agent or config['user_agent']}

    def _download(self, url):
        response = requests.get(url, headers=self.headers, timeout=self.timeout, stream=True)
        try:
            response.raise_for_status()
            declared = response.headers.get('Content-Length')
            if declared and declared.isdigit() and int(declared) > self.max_bytes:
                raise ScrapeError(f"Page too large: {declared} bytes (max: {self.max_bytes})")

            chunks = []
            received = 0
            for chunk in response.iter_content(chunk_size=64 * 1024):
                received += len(chunk)
                if received > self.max_bytes:
                    raise ScrapeError(f"Page exceeded {self.max_bytes} bytes")
                chunks.append(chunk)
            body = b"".join(chunks)
            encoding = response.encoding or response.apparent_encoding or 'utf-8'
            return body.decode(encoding, errors='replace')
        finally:
            response.close()

    def fetch_with_retry(self, url):
        """Download ``url`` with up to ``max_attempts`` tries. Returns the HTML or None."""
        for attempt in range(1, self.max_attempts + 1):
            try:
                logger.debug(f"    [FETCH] Attempt {attempt}/{self.max_attempts} for {url}")
                return self._download(url)
            except ScrapeError as e:
                logger.error(f"    [FETCH ERROR] {e}")
                return None
            except requests.exceptions.RequestException as e:
                logger.error(f"    [FETCH ERROR] Request failed on attempt {attempt}: {e}")
            if attempt < self.max_attempts:
                sleep_duration = self.retry_delay * attempt
                logger.info(f"    [FETCH RETRY] Waiting {sleep_duration} seconds before next attempt.")
                time.sleep(sleep_duration)
        logger.error(f"    [FETCH FATAL] All {self.max_attempts} attempts failed for {url}.")
        return None

    @staticmethod
    def html_to_markdown(html, base_url=""):
        """Convert a page to (title, markdown) after removing non-content elements."""
        soup = BeautifulSoup(html, 'html.parser')

        title = ""
        for selector in TITLE_SELECTORS:
            tag = soup.select_one(selector)
            if tag and tag.get_text(strip=True):
                title = tag.get_text(strip=True)
                break

        for selector in REMOVE_SELECTORS:
            for tag in soup.select(selector):
                tag.decompose()

        converter = html2text.HTML2Text(baseurl=base_url)
        converter.body_width = 0  # Disable line wrapping
        converter.ignore_links = False
        converter.ignore_images = True
        body = soup.body or soup
        return title, converter.handle(str(body)).strip()

    def fetch_content(self, url):
        """Fetch ``url`` and return a ScrapeResult; failures are reported in ``error``."""
        html = self.fetch_with_retry(url)
        if html is None:
            return ScrapeResult(content="", title="", source_url=url, error=f"Could not fetch {url}")

        try:
            title, content = self.html_to_markdown(html, base_url=url)
        except Exception as e:
            logger.error(f"[SCRAPER] Failed to convert page {url}: {e}")
            return ScrapeResult(content="", title="", source_url=url, error=str(e))

        logger.debug(f"[SCRAPER] Extracted {len(content)} characters from {url} (title: '{title}')")
        return ScrapeResult(content=content, title=title, source_url=url)
