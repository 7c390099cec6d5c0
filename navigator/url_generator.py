"""
Sibling chapter URL synthesis.

The identifier is replaced at the position where it was matched inside the
path+query, so a domain or earlier path segment that happens to contain the
same digits is never rewritten.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

from .identifier import extract_chapter_identifier, split_path_and_query
from .logging_config import logger
from .models import ChapterIdentifier, IdentifierKind

_ALPHANUMERIC = re.compile(r'^(\d+)([a-z]?)$', re.IGNORECASE)


def _step_number(digits, delta):
    """Shift a digit string, keeping zero padding. None below chapter 1."""
    number = int(digits) + delta
    if number < 1 and delta < 0:
        return None
    if digits.startswith('0') and len(digits) > 1:
        return f"{number:0{len(digits)}d}"
    return str(number)


def _step_letter(letter, delta):
    """Shift a single letter suffix; None when it would leave a..z."""
    lower = letter.lower()
    if (delta > 0 and lower == 'z') or (delta < 0 and lower == 'a'):
        return None
    return chr(ord(letter) + delta)


def step_identifier(identifier: ChapterIdentifier, delta: int) -> Optional[str]:
    """Return the identifier ``delta`` chapters away, or None if there is none."""
    if not identifier.found:
        return None

    if identifier.kind == IdentifierKind.NUMERIC:
        if not identifier.value.isdigit():
            return None
        if delta < 0 and int(identifier.value) <= 1:
            return None
        return _step_number(identifier.value, delta)

    match = _ALPHANUMERIC.match(identifier.value)
    if not match:
        # prologue, epilogue, bonus... have no defined neighbour
        logger.debug(f"[GENERATOR] No successor rule for identifier '{identifier.value}'")
        return None

    digits, letter = match.groups()
    if letter:
        stepped = _step_letter(letter, delta)
        return digits + stepped if stepped else None
    if delta < 0 and int(digits) <= 1:
        return None
    return _step_number(digits, delta)


def _path_offset(url):
    """Offset of the path+query string inside ``url``, or None if it cannot be located."""
    head = url.split('#', 1)[0]
    target = split_path_and_query(url)
    if head.endswith('?') and not urlsplit(url).query:
        head = head[:-1]
    offset = len(head) - len(target)
    if offset < 0 or head[offset:] != target:
        return None
    return offset


def replace_identifier(url, identifier: ChapterIdentifier, new_value):
    """Swap the matched identifier for ``new_value``, leaving every other byte as is."""
    offset = _path_offset(url)
    if offset is not None and identifier.start is not None:
        start = offset + identifier.start
        end = start + len(identifier.value)
        if url[start:end] == identifier.value:
            return url[:start] + new_value + url[end:]

    # No recorded position: first occurrence inside path+query, never the host
    if offset is not None:
        index = url.find(identifier.value, offset)
        if index >= 0:
            return url[:index] + new_value + url[index + len(identifier.value):]

    logger.warning(f"[GENERATOR] Could not locate '{identifier.value}' in {url}")
    return None


def _generate(url, identifier, delta):
    if identifier is None:
        identifier = extract_chapter_identifier(url)
    new_value = step_identifier(identifier, delta)
    if new_value is None:
        return None
    return replace_identifier(url, identifier, new_value)


def generate_next_url(url, identifier: Optional[ChapterIdentifier] = None):
    """URL of the following chapter, or None."""
    return _generate(url, identifier, 1)


def generate_previous_url(url, identifier: Optional[ChapterIdentifier] = None):
    """URL of the preceding chapter, or None (chapter 1, letter 'a', special chapters)."""
    return _generate(url, identifier, -1)
