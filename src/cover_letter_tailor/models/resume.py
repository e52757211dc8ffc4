"""Pydantic model for the uploaded resume."""

from __future__ import annotations

import base64

from pydantic import BaseModel

from cover_letter_tailor.errors import UnsupportedFileTypeError

PDF_MIME_TYPE = "application/pdf"


class ResumeFile(BaseModel):
    name: str
    mime_type: str
    data: str  # base64

    model_config = {"frozen": True}

    @classmethod
    def from_bytes(cls, name: str, mime_type: str | None, raw: bytes) -> ResumeFile:
        """Build a resume from raw file bytes, rejecting anything but PDF."""
        if mime_type != PDF_MIME_TYPE:
            raise UnsupportedFileTypeError(name, mime_type)
        return cls(
            name=name,
            mime_type=mime_type,
            data=base64.b64encode(raw).decode("ascii"),
        )

    @property
    def display_name(self) -> str:
        """File name shortened for headers and status lines."""
        if len(self.name) > 15:
            return self.name[:12] + "..."
        return self.name
