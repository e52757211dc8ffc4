"""Tests for cover letter PDF layout and rendering."""

from __future__ import annotations

import pytest

from cover_letter_tailor.export.letter_pdf import (
    BLOCK_GAP,
    FONT_SIZE_MM,
    MARGIN_TOP,
    BlockKind,
    LetterBlock,
    block_height,
    classify_block,
    classify_blocks,
    pdf_filename,
    plan_layout,
    render_letter_pdf,
    safe_filename_stem,
    safe_text,
    split_blocks,
)


def _fixed_lines(n: int):
    return lambda text, align: n


class TestSplitBlocks:
    def test_blank_lines_with_whitespace_split(self):
        assert split_blocks("a\n\nb\n   \nc") == ["a", "b", "c"]

    def test_single_newline_keeps_block(self):
        assert split_blocks("line one\nline two") == ["line one\nline two"]

    def test_crlf_line_endings(self):
        assert split_blocks("Dear team,\r\n\r\nline one\r\nline two\r\n") == [
            "Dear team,",
            "line one\nline two\n",
        ]

    def test_empty_blocks_dropped(self):
        assert split_blocks("\n\n\na\n\n\n\n") == ["a"]
        assert split_blocks("") == []


class TestClassifyBlock:
    def test_sample_letter(self, sample_letter):
        kinds = [b.kind for b in classify_blocks(sample_letter)]
        assert kinds == [
            BlockKind.SALUTATION,
            BlockKind.APPLICATION_LINE,
            BlockKind.BODY,
            BlockKind.BODY,
            BlockKind.BODY,
            BlockKind.BODY,
            BlockKind.SIGNATURE,
        ]

    @pytest.mark.parametrize("raw", ["Dear Ms. Smith,", "To,\nThe Hiring Manager", "DEAR team"])
    def test_salutation_only_first(self, raw):
        assert classify_block(raw, 0, 5) is BlockKind.SALUTATION
        assert classify_block(raw, 1, 5) is not BlockKind.SALUTATION

    def test_signature_phrase_anywhere(self):
        body = "Thank you. " * 30 + "Sincerely"
        assert classify_block(body, 2, 5) is BlockKind.SIGNATURE

    def test_short_last_block_is_signature(self):
        assert classify_block("I look forward to hearing from you.", 4, 5) is BlockKind.SIGNATURE

    def test_long_last_block_is_body(self):
        assert classify_block("x" * 250, 4, 5) is BlockKind.BODY

    def test_application_line(self):
        assert classify_block("Subject: Backend Engineer role", 1, 5) is BlockKind.APPLICATION_LINE
        assert classify_block("Application for Data Analyst", 1, 5) is BlockKind.APPLICATION_LINE

    def test_salutation_beats_signature(self):
        assert classify_block("Dear team", 0, 1) is BlockKind.SALUTATION

    def test_signature_beats_application_line(self):
        assert classify_block("Application for X, warm regards", 1, 5) is BlockKind.SIGNATURE


class TestLetterBlock:
    def test_body_is_flattened_and_justified(self):
        block = LetterBlock(raw="line one\nline two\n", kind=BlockKind.BODY)
        assert block.text == "line one line two"
        assert block.align == "J"

    def test_signature_keeps_lines_left_aligned(self):
        block = LetterBlock(raw="Warm regards,\nJane Doe\n", kind=BlockKind.SIGNATURE)
        assert block.text == "Warm regards,\nJane Doe"
        assert block.align == "L"

    def test_body_from_crlf_text_has_no_carriage_returns(self):
        blocks = classify_blocks("Dear team,\r\n\r\n" + "I build APIs.\r\nI tune SQL. " * 30)
        assert blocks[1].kind is BlockKind.BODY
        assert "\r" not in blocks[1].text
        assert "\n" not in blocks[1].text

    def test_body_flattens_crlf_directly(self):
        block = LetterBlock(raw="line one\r\nline two", kind=BlockKind.BODY)
        assert block.text == "line one line two"


class TestPlanLayout:
    def test_block_height_uses_double_spacing(self):
        assert block_height(3) == pytest.approx(3 * FONT_SIZE_MM * 2.0)

    def test_blocks_advance_by_height_plus_gap(self, sample_letter):
        layout = plan_layout(sample_letter, count_lines=_fixed_lines(1))
        ys = [p.y for p in layout.blocks]
        assert ys[0] == MARGIN_TOP
        assert ys[1] == pytest.approx(MARGIN_TOP + block_height(1) + BLOCK_GAP)
        assert layout.page_count == 1

    def test_overflowing_block_moves_to_new_page(self):
        text = "\n\n".join(f"Paragraph {i} " * 20 for i in range(4))
        layout = plan_layout(text, count_lines=_fixed_lines(10))
        assert [p.page for p in layout.blocks] == [1, 1, 1, 2]
        assert layout.blocks[3].y == MARGIN_TOP

    def test_oversized_first_block_leaves_blank_page(self):
        layout = plan_layout("huge " * 500, count_lines=_fixed_lines(40))
        assert layout.blocks[0].page == 2
        assert layout.page_count == 2

    def test_empty_letter(self):
        layout = plan_layout("", count_lines=_fixed_lines(1))
        assert layout.blocks == ()
        assert layout.page_count == 1

    def test_counter_receives_printable_text_and_align(self):
        seen = []

        def counter(text, align):
            seen.append((text, align))
            return 1

        plan_layout("Dear team,\n\nfirst\nsecond " + "x" * 300, count_lines=counter)
        assert seen[0] == ("Dear team,", "L")
        assert seen[1][0].startswith("first second")
        assert seen[1][1] == "J"

    def test_fpdf_counter_wraps_long_body(self):
        layout = plan_layout("Dear team,\n\n" + "word " * 200)
        assert layout.blocks[0].line_count == 1
        assert layout.blocks[1].line_count > 3


class TestRenderLetterPdf:
    def test_returns_pdf_bytes(self, sample_letter):
        data = render_letter_pdf(sample_letter)
        assert data.startswith(b"%PDF")

    def test_multi_page_letter(self):
        text = "\n\n".join("Paragraph text that goes on. " * 40 for _ in range(6))
        assert plan_layout(text).page_count >= 2
        assert render_letter_pdf(text).startswith(b"%PDF")

    def test_typographic_characters_render(self):
        data = render_letter_pdf("Dear team,\n\nI’m excited — truly…\n\nRegards,\nJörg")
        assert data.startswith(b"%PDF")

    def test_same_layout_for_same_text(self, sample_letter):
        assert plan_layout(sample_letter) == plan_layout(sample_letter)


class TestSafeText:
    def test_smart_quotes_and_dashes(self):
        assert safe_text("“Hi” – it’s…") == '"Hi" - it\'s...'

    def test_latin1_kept_others_replaced(self):
        assert safe_text("Jörg 中") == "Jörg ?"


class TestFilenames:
    @pytest.mark.parametrize(
        "company, expected",
        [
            ("Acme, Inc.!", "Acme_Inc"),
            ("Globex Corporation", "Globex_Corporation"),
            ("", "Cover_Letter"),
            ("!!!", "Cover_Letter"),
        ],
    )
    def test_safe_filename_stem(self, company, expected):
        assert safe_filename_stem(company) == expected

    def test_pdf_filename(self):
        assert pdf_filename("Acme") == "Acme.pdf"
