"""Resume ingestion: mime-type check, then base64 encoding.

The resume content is never parsed locally; it is forwarded to the model as
a PDF document block.
"""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Callable
from pathlib import Path

from cover_letter_tailor.errors import UnsupportedFileTypeError
from cover_letter_tailor.models.resume import PDF_MIME_TYPE, ResumeFile

logger = logging.getLogger(__name__)


def load_resume(file_path: str | Path) -> ResumeFile:
    """Load a resume from disk. The type is judged by file name before reading."""
    path = Path(file_path)
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type != PDF_MIME_TYPE:
        raise UnsupportedFileTypeError(path.name, mime_type)
    raw = path.read_bytes()
    logger.debug("Loaded resume %s (%d bytes)", path.name, len(raw))
    return ResumeFile.from_bytes(path.name, mime_type, raw)


def resume_from_upload(
    name: str, mime_type: str | None, read: Callable[[], bytes]
) -> ResumeFile:
    """Build a resume from an uploaded file.

    Args:
        name: Original file name.
        mime_type: Declared mime type of the upload.
        read: Zero-argument callable returning the file bytes. It is only
            called once the declared type has been accepted.
    """
    if mime_type != PDF_MIME_TYPE:
        raise UnsupportedFileTypeError(name, mime_type)
    return ResumeFile.from_bytes(name, mime_type, read())
