"""
Exception classes for tagstrings.

Only ConfigurationError is fatal for a run. Everything else is caught close
to where it happens and degraded to a warning or an untranslated entry.
"""

from __future__ import annotations


class TagStringsError(Exception):
    """Base exception class for tagstrings errors."""

    def __init__(self, message: str, context: object | None = None) -> None:
        super().__init__(message)
        self.context = context


class ConfigurationError(TagStringsError):
    """Invalid project root, missing API key, unreadable project."""


class TranslationError(TagStringsError):
    """A translation provider could not translate a string."""

    def __init__(
        self,
        message: str,
        backend: str | None = None,
        target_lang: str | None = None,
    ) -> None:
        super().__init__(message, context={"backend": backend, "target_lang": target_lang})
        self.backend = backend
        self.target_lang = target_lang


class CatalogError(TagStringsError):
    """A catalog file could not be read or updated."""

    def __init__(self, message: str, path: object | None = None) -> None:
        super().__init__(message, context=path)
        self.path = path
