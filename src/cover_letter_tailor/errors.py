"""Exceptions raised by cover-letter-tailor."""

from __future__ import annotations


class CoverLetterError(Exception):
    """Base class for all application errors."""


class GenerationError(CoverLetterError):
    """A remote generation call failed or returned unusable content."""


class UnsupportedFileTypeError(CoverLetterError):
    """The selected resume is not a PDF."""

    def __init__(self, name: str, mime_type: str | None):
        self.name = name
        self.mime_type = mime_type
        super().__init__(
            f"Unsupported resume file {name!r} ({mime_type or 'unknown type'}). "
            "Currently only PDF resumes are supported."
        )


class InvalidTransitionError(CoverLetterError):
    """The wizard received an event its current step does not accept."""
