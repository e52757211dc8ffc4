"""PDF export module for cover-letter-tailor."""
from cover_letter_tailor.export.letter_pdf import (
    pdf_filename,
    plan_layout,
    render_letter_pdf,
)

__all__ = ["render_letter_pdf", "plan_layout", "pdf_filename"]
