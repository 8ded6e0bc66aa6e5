"""Exceptions raised by the versioning package."""

from __future__ import annotations


class VersioningError(ValueError):
    """Base class for versioning errors."""


class MalformedVersion(VersioningError):
    """Raised when text is not a valid semantic version."""

    def __init__(self, text: object, reason: str = "invalid version"):
        self.text = text
        self.reason = reason
        super().__init__(f"Malformed version {text!r}: {reason}")


class MalformedRange(VersioningError):
    """Raised when text is not a valid range expression."""

    def __init__(self, text: object, reason: str = "invalid range"):
        self.text = text
        self.reason = reason
        super().__init__(f"Malformed range {text!r}: {reason}")


class CatalogUnavailable(VersioningError):
    """Raised by catalog adapters when no candidate list can be produced."""

    def __init__(self, name: str, reason: str = "catalog unavailable"):
        self.name = name
        self.reason = reason
        super().__init__(f"Catalog unavailable for {name!r}: {reason}")
