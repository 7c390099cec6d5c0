"""Exceptions raised by the chapter navigator."""


class NavigatorError(Exception):
    """Base class for navigator errors."""


class PatternStorageError(NavigatorError):
    """A stored URL pattern could not be read, decoded or written."""


class ScrapeError(NavigatorError):
    """Page content could not be fetched or converted."""


class RequestValidationError(NavigatorError):
    """A navigation request payload failed validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
