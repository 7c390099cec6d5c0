"""
Data model for chapter navigation prediction.

ChapterIdentifier is produced per URL and thrown away, UrlPattern is the
one-per-domain record kept by a pattern store, and PredictionResult is what
the navigation engine hands back to callers.
"""

import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional

from .exceptions import PatternStorageError


class IdentifierKind(str, Enum):
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"
    NONE = "none"


class PredictionMethod(str, Enum):
    PATTERN = "pattern"
    SCRAPING = "scraping"


PLACEHOLDERS = {
    IdentifierKind.NUMERIC: "{number}",
    IdentifierKind.ALPHANUMERIC: "{id}",
}


def now_ms():
    return int(time.time() * 1000)


@dataclass(frozen=True)
class ChapterIdentifier:
    """The chapter token found in a URL's path+query, if any."""
    value: Optional[str] = None
    kind: IdentifierKind = IdentifierKind.NONE
    matched_pattern: Optional[str] = None
    start: Optional[int] = None

    def __post_init__(self):
        if (self.value is None) != (self.kind == IdentifierKind.NONE):
            raise ValueError("ChapterIdentifier value must be set exactly when kind is not NONE")

    @property
    def found(self):
        return self.kind != IdentifierKind.NONE

    @property
    def end(self):
        if self.start is None or self.value is None:
            return None
        return self.start + len(self.value)


@dataclass
class UrlPattern:
    """A learned per-domain URL template plus its trust statistics."""
    domain: str
    template: str
    example_url: str
    identifier_kind: IdentifierKind
    confidence: float
    success_rate: float
    last_used: int = field(default_factory=now_ms)

    @property
    def placeholder(self):
        return PLACEHOLDERS.get(self.identifier_kind)

    def is_usable(self):
        """A template without exactly one placeholder of its own kind cannot generate URLs."""
        if self.identifier_kind not in PLACEHOLDERS:
            return False
        placeholders = [p for p in PLACEHOLDERS.values() if p in self.template]
        return placeholders == [self.placeholder] and self.template.count(self.placeholder) == 1

    def render(self, identifier):
        """Fill the template's placeholder with a concrete identifier."""
        if not self.is_usable():
            return None
        return self.template.replace(self.placeholder, identifier, 1)

    def to_dict(self):
        data = asdict(self)
        data["identifier_kind"] = self.identifier_kind.value
        return data

    @classmethod
    def from_dict(cls, data):
        try:
            return cls(
                domain=data["domain"],
                template=data["template"],
                example_url=data["example_url"],
                identifier_kind=IdentifierKind(data["identifier_kind"]),
                confidence=float(data["confidence"]),
                success_rate=float(data["success_rate"]),
                last_used=int(data.get("last_used") or 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PatternStorageError(f"Malformed pattern record {data!r}: {e}") from e


@dataclass
class PredictionResult:
    next_url: Optional[str]
    previous_url: Optional[str]
    pattern: Optional[UrlPattern]
    confidence: float
    method: PredictionMethod
    source_url: str
    validated: bool

    def to_dict(self):
        """JSON shape served by the request boundary."""
        pattern = None
        if self.pattern is not None:
            pattern = {
                "domain": self.pattern.domain,
                "pattern": self.pattern.template,
                "chapterIdentifier": self.pattern.identifier_kind.value,
                "confidence": self.pattern.confidence,
                "successRate": self.pattern.success_rate,
                "lastUsed": self.pattern.last_used,
            }
        return {
            "nextUrl": self.next_url,
            "previousUrl": self.previous_url,
            "pattern": pattern,
            "confidence": self.confidence,
            "method": self.method.value,
            "sourceUrl": self.source_url,
            "validated": self.validated,
        }
