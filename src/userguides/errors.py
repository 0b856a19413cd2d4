"""Exceptions raised while loading and validating the guide library."""

from __future__ import annotations


class GuideLibraryError(ValueError):
    """Base error for any failure that prevents a library from loading."""

    def with_context(self, context: str) -> GuideLibraryError:
        """Return a copy of this error with ``context`` prefixed to the message.

        The copy keeps the concrete error class so callers can still tell an
        I/O failure from a validation failure after it has been wrapped by
        every level of the loader. Callers chain it with ``raise ... from``.
        """
        return type(self)(f"{context}: {self}")


class ContentReadError(GuideLibraryError):
    """A declaration file or collection could not be read."""


class ContentDecodeError(GuideLibraryError):
    """Declaration content is not valid YAML or has the wrong shape."""


class FieldValidationError(GuideLibraryError):
    """A single entity violates one of its field rules."""


class CrossReferenceError(GuideLibraryError):
    """A duplicate identifier or a dangling reference across the tree."""
