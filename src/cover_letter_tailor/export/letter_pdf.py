"""Cover letter PDF export using fpdf2.

The letter is split into blank-line separated blocks. Each block is
classified from its position and wording alone: salutation, application
line and signature blocks keep their line breaks and are left aligned, body
paragraphs are flattened and justified. Pagination is manual: a block that
would cross the bottom margin moves to a new page.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from io import BytesIO

from fpdf import FPDF

logger = logging.getLogger(__name__)

# A4 portrait, millimetres
PAGE_WIDTH = 210.0
PAGE_HEIGHT = 297.0
MARGIN_LEFT = 20.0
MARGIN_TOP = 20.0
MARGIN_BOTTOM = 20.0
CONTENT_WIDTH = 170.0

FONT_FAMILY = "Helvetica"
FONT_SIZE_PT = 11
TEXT_COLOR = (10, 10, 10)

LINE_HEIGHT_FACTOR = 2.0
DEFAULT_LINE_HEIGHT_FACTOR = 1.15
BLOCK_GAP = 8.0

SIGNATURE_MAX_CHARS = 200
DEFAULT_FILENAME_STEM = "Cover_Letter"

_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")
_SALUTATION_PREFIXES = ("dear", "to")
_APPLICATION_PREFIXES = ("application for", "subject:")
_SIGNATURE_PHRASES = ("sincerely", "regards", "best,", "warm regards")

# Characters LLMs like to emit that the core Helvetica font cannot encode
_TYPOGRAPHIC = str.maketrans({
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2026": "...",
    "\u2022": "-",
})

PT_TO_MM = 25.4 / 72
FONT_SIZE_MM = FONT_SIZE_PT * PT_TO_MM

# (text, align) -> number of wrapped lines at CONTENT_WIDTH
LineCounter = Callable[[str, str], int]


class BlockKind(str, Enum):
    SALUTATION = "salutation"
    APPLICATION_LINE = "application_line"
    SIGNATURE = "signature"
    BODY = "body"


@dataclass(frozen=True)
class LetterBlock:
    raw: str
    kind: BlockKind

    @property
    def align(self) -> str:
        """fpdf2 alignment: "L" for header/signature blocks, "J" for body."""
        return "J" if self.kind is BlockKind.BODY else "L"

    @property
    def text(self) -> str:
        """Printable text: body blocks are reflowed onto one line."""
        if self.kind is BlockKind.BODY:
            return " ".join(self.raw.splitlines()).strip()
        return self.raw.strip()


@dataclass(frozen=True)
class PlacedBlock:
    block: LetterBlock
    page: int  # 1-based
    y: float
    line_count: int
    height: float


@dataclass(frozen=True)
class LetterLayout:
    blocks: tuple[PlacedBlock, ...]

    @property
    def page_count(self) -> int:
        return max((p.page for p in self.blocks), default=1)


def split_blocks(text: str) -> list[str]:
    """Split on blank lines and drop blocks that are empty or whitespace.

    CRLF and lone CR line endings are normalised first.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return [b for b in _BLOCK_SPLIT_RE.split(text) if b.strip()]


def classify_block(raw: str, index: int, total: int) -> BlockKind:
    lower = raw.lower()
    if index == 0 and lower.startswith(_SALUTATION_PREFIXES):
        return BlockKind.SALUTATION
    # A short final block counts as a signature even without a closing phrase
    if any(p in lower for p in _SIGNATURE_PHRASES) or (
        index == total - 1 and len(raw) < SIGNATURE_MAX_CHARS
    ):
        return BlockKind.SIGNATURE
    if lower.startswith(_APPLICATION_PREFIXES):
        return BlockKind.APPLICATION_LINE
    return BlockKind.BODY


def classify_blocks(text: str) -> list[LetterBlock]:
    raws = split_blocks(text)
    return [
        LetterBlock(raw=raw, kind=classify_block(raw, i, len(raws)))
        for i, raw in enumerate(raws)
    ]


def block_height(line_count: int) -> float:
    """Height of a block at the custom line spacing.

    The natural height uses the default 1.15 spacing; scaling it by
    2.0 / 1.15 gives the height actually drawn.
    """
    natural = line_count * FONT_SIZE_MM * DEFAULT_LINE_HEIGHT_FACTOR
    return natural * (LINE_HEIGHT_FACTOR / DEFAULT_LINE_HEIGHT_FACTOR)


def plan_layout(text: str, count_lines: LineCounter | None = None) -> LetterLayout:
    """Classify and paginate the letter without drawing anything.

    Args:
        text: Cover letter text.
        count_lines: Optional wrapped-line counter; defaults to fpdf2's own
            line breaking at the fixed font and content width.
    """
    if count_lines is None:
        count_lines = _FpdfLineCounter()

    placed: list[PlacedBlock] = []
    page = 1
    cursor = MARGIN_TOP
    for block in classify_blocks(text):
        lines = count_lines(block.text, block.align)
        height = block_height(lines)
        if cursor + height > PAGE_HEIGHT - MARGIN_BOTTOM:
            page += 1
            cursor = MARGIN_TOP
        placed.append(PlacedBlock(block=block, page=page, y=cursor, line_count=lines, height=height))
        cursor += height + BLOCK_GAP

    layout = LetterLayout(blocks=tuple(placed))
    logger.debug("Planned %d blocks over %d page(s)", len(placed), layout.page_count)
    return layout


def render_letter_pdf(text: str) -> bytes:
    """Render the cover letter to PDF bytes."""
    pdf = _new_pdf()
    layout = plan_layout(text)

    line_height = FONT_SIZE_MM * LINE_HEIGHT_FACTOR
    pdf.add_page()
    current_page = 1
    for placed in layout.blocks:
        while current_page < placed.page:
            pdf.add_page()
            current_page += 1
        pdf.set_xy(MARGIN_LEFT, placed.y)
        pdf.multi_cell(
            w=CONTENT_WIDTH,
            h=line_height,
            text=safe_text(placed.block.text),
            align=placed.block.align,
        )

    buf = BytesIO()
    pdf.output(buf)
    return buf.getvalue()


def safe_text(text: str) -> str:
    """Make text encodable by the core font, replacing what cannot be mapped."""
    text = text.translate(_TYPOGRAPHIC)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def safe_filename_stem(company_name: str) -> str:
    """Collapse runs of non-alphanumerics to "_", e.g. "Acme, Inc.!" -> "Acme_Inc".

    Empty or symbol-only names fall back to the default stem.
    """
    stem = re.sub(r"[^A-Za-z0-9]+", "_", company_name or "").strip("_")
    return stem or DEFAULT_FILENAME_STEM


def pdf_filename(company_name: str) -> str:
    return f"{safe_filename_stem(company_name)}.pdf"


def _new_pdf() -> FPDF:
    pdf = FPDF(orientation="portrait", unit="mm", format="A4")
    pdf.set_margins(left=MARGIN_LEFT, top=MARGIN_TOP, right=PAGE_WIDTH - MARGIN_LEFT - CONTENT_WIDTH)
    pdf.set_auto_page_break(auto=False, margin=MARGIN_BOTTOM)
    pdf.set_font(FONT_FAMILY, size=FONT_SIZE_PT)
    pdf.set_text_color(*TEXT_COLOR)
    return pdf


class _FpdfLineCounter:
    """Counts wrapped lines with fpdf2's dry-run line breaking."""

    def __init__(self):
        self._scratch = _new_pdf()
        self._scratch.add_page()

    def __call__(self, text: str, align: str) -> int:
        lines = self._scratch.multi_cell(
            w=CONTENT_WIDTH,
            h=FONT_SIZE_MM * DEFAULT_LINE_HEIGHT_FACTOR,
            text=safe_text(text),
            align=align,
            dry_run=True,
            output="LINES",
        )
        return max(1, len(lines))
