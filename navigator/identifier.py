"""
Chapter identifier extraction.

Finds the token in a chapter URL that distinguishes it from its siblings
(``50`` in ``/novel/chapter-50``, ``12a`` in ``/ch-12a``, ``prologue`` in
``/story/prologue``). Only the path and query string are inspected so the
result does not depend on scheme or host.
"""

import re
from urllib.parse import urlsplit

from .logging_config import logger
from .models import ChapterIdentifier, IdentifierKind

# A numeric capture must be a complete digit run. A single trailing letter
# ("ch-2b") marks a sub-chapter and is left to the alphanumeric rules; a
# word suffix ("chapter-12th-day") does not.
_NUM = r'(\d+)(?![a-z](?![a-z])|\d)'
_ALNUM = r'(\d+[a-z]?)(?![a-z\d])'

# Ordered: first match wins.
IDENTIFIER_RULES = [
    # Numeric
    ('chapter-numeric', r'chapter[-_]?s?[-_]?' + _NUM, IdentifierKind.NUMERIC),
    ('ch-numeric', r'ch[-_]?' + _NUM, IdentifierKind.NUMERIC),
    ('slash-c-numeric', r'/ch?[-_]?(\d+)\b', IdentifierKind.NUMERIC),
    ('slash-numeric', r'/(\d+)/[^/]*$', IdentifierKind.NUMERIC),
    ('html-numeric', r'(\d+)\.html$', IdentifierKind.NUMERIC),
    ('page-numeric', r'page[-_]?' + _NUM, IdentifierKind.NUMERIC),
    ('part-numeric', r'part[-_]?' + _NUM, IdentifierKind.NUMERIC),
    ('volume-numeric', r'vol[-_]?' + _NUM, IdentifierKind.NUMERIC),
    ('episode-numeric', r'episode[-_]?' + _NUM, IdentifierKind.NUMERIC),

    # Alphanumeric (chapter-1a, ch-01b)
    ('chapter-alphanumeric', r'chapter[-_]?' + _ALNUM, IdentifierKind.ALPHANUMERIC),
    ('ch-alphanumeric', r'ch[-_]?' + _ALNUM, IdentifierKind.ALPHANUMERIC),
    ('slash-c-alphanumeric', r'/ch?[-_]?(\d+[a-z]?)\b', IdentifierKind.ALPHANUMERIC),
    ('html-alphanumeric', r'(\d+[a-z]?)\.html$', IdentifierKind.ALPHANUMERIC),

    # Named special chapters
    ('special-chapter', r'(prologue|epilogue|bonus|extra|special)[-_]?(\d*)', IdentifierKind.ALPHANUMERIC),
]

_COMPILED_RULES = [(name, re.compile(regex, re.IGNORECASE), kind) for name, regex, kind in IDENTIFIER_RULES]

SPECIAL_CHAPTER_RULE = 'special-chapter'


def split_path_and_query(url):
    """Return ``path`` plus ``?query`` when the URL has a query string."""
    parts = urlsplit(url)
    return parts.path + (f"?{parts.query}" if parts.query else "")


def extract_chapter_identifier(url: str) -> ChapterIdentifier:
    """Find the chapter identifier in a URL.

    Args:
        url: Absolute chapter URL.

    Returns:
        ChapterIdentifier: kind NONE when no rule matches (for example CJK-only
        markers such as ``第50章``).
    """
    try:
        target = split_path_and_query(url)
    except ValueError as e:
        logger.warning(f"[IDENTIFIER] Could not parse URL '{url}': {e}")
        return ChapterIdentifier()

    for name, regex, kind in _COMPILED_RULES:
        match = regex.search(target)
        if not match:
            continue
        for group_index, group in enumerate(match.groups(), start=1):
            if group:
                logger.trace(f"[IDENTIFIER] '{target}' matched {name} -> '{group}'")
                return ChapterIdentifier(
                    value=group,
                    kind=kind,
                    matched_pattern=name,
                    start=match.start(group_index),
                )

    logger.debug(f"[IDENTIFIER] No chapter identifier found in '{target}'")
    return ChapterIdentifier()
