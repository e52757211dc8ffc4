"""Data models for cover-letter-tailor."""

from cover_letter_tailor.models.assessment import LetterResult, MatchAssessment, Source
from cover_letter_tailor.models.chat import ChatMessage, ChatReply, ChatRole
from cover_letter_tailor.models.resume import PDF_MIME_TYPE, ResumeFile

__all__ = [
    "ChatMessage",
    "ChatReply",
    "ChatRole",
    "LetterResult",
    "MatchAssessment",
    "PDF_MIME_TYPE",
    "ResumeFile",
    "Source",
]
