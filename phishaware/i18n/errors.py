"""
Translation errors.

Only `UnsupportedLanguageError` is meant to reach callers. Service failures
are raised by backends and absorbed by the batch client, which falls back
to the source text.
"""


class TranslationError(Exception):
    """Base exception for translation errors."""
    pass


class TranslationServiceError(TranslationError):
    """The translation service failed or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedLanguageError(TranslationError, ValueError):
    """Language code is not in the supported set."""

    def __init__(self, code: str):
        super().__init__(f"Unsupported language: {code}")
        self.code = code
