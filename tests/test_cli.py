"""Tests for the typer CLI."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from cover_letter_tailor.cli import app
from cover_letter_tailor.errors import GenerationError
from cover_letter_tailor.models.assessment import LetterResult
from cover_letter_tailor.pipeline.chat_refiner import ChatRefiner
from cover_letter_tailor.pipeline.email_writer import EmailWriter
from cover_letter_tailor.pipeline.letter_writer import LetterWriter
from cover_letter_tailor.wizard.controller import WizardController

runner = CliRunner()


def _controller(assessment, letter) -> WizardController:
    letter_writer = AsyncMock(spec=LetterWriter)
    letter_writer.write.return_value = LetterResult(assessment=assessment, letter=letter)
    email_writer = AsyncMock(spec=EmailWriter)
    email_writer.write.return_value = "Hi Acme team, resume attached."
    return WizardController(letter_writer, email_writer, AsyncMock(spec=ChatRefiner))


class TestRender:
    def test_render_writes_pdf(self, tmp_path, sample_letter):
        letter = tmp_path / "letter.txt"
        letter.write_text(sample_letter, encoding="utf-8")
        out = tmp_path / "out"

        result = runner.invoke(app, ["render", str(letter), "--company", "Acme, Inc.", "-o", str(out)])

        assert result.exit_code == 0
        pdf = out / "Acme_Inc.pdf"
        assert pdf.read_bytes().startswith(b"%PDF")

    def test_render_default_name(self, tmp_path, sample_letter):
        letter = tmp_path / "letter.txt"
        letter.write_text(sample_letter, encoding="utf-8")
        result = runner.invoke(app, ["render", str(letter), "-o", str(tmp_path)])
        assert result.exit_code == 0
        assert (tmp_path / "Cover_Letter.pdf").exists()

    def test_render_missing_file(self, tmp_path):
        result = runner.invoke(app, ["render", str(tmp_path / "nope.txt")])
        assert result.exit_code == 1


class TestLayout:
    def test_layout_lists_blocks(self, tmp_path, sample_letter):
        letter = tmp_path / "letter.txt"
        letter.write_text(sample_letter, encoding="utf-8")
        result = runner.invoke(app, ["layout", str(letter)])
        assert result.exit_code == 0
        assert "salutation" in result.output
        assert "signature" in result.output
        assert "7 blocks" in result.output


class TestGenerate:
    def test_rejects_non_pdf_resume(self, tmp_path):
        resume = tmp_path / "resume.txt"
        resume.write_text("Jane Doe", encoding="utf-8")
        jd = tmp_path / "jd.txt"
        jd.write_text("Backend Engineer", encoding="utf-8")

        result = runner.invoke(app, ["generate", str(resume), "--jd", str(jd)])
        assert result.exit_code == 1
        assert "only PDF" in result.output

    def test_generate_writes_outputs(self, tmp_path, sample_assessment, sample_letter, sample_jd_text):
        resume = tmp_path / "resume.pdf"
        resume.write_bytes(b"%PDF-1.4\n%%EOF\n")
        jd = tmp_path / "jd.txt"
        jd.write_text(sample_jd_text, encoding="utf-8")
        out = tmp_path / "out"

        ctrl = _controller(sample_assessment, sample_letter)
        with patch.object(WizardController, "from_config", return_value=ctrl):
            result = runner.invoke(app, ["generate", str(resume), "--jd", str(jd), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert (out / "Acme_Inc.pdf").read_bytes().startswith(b"%PDF")
        assert (out / "Acme_Inc_cover_letter.txt").read_text(encoding="utf-8") == sample_letter
        assert "resume attached" in (out / "Acme_Inc_email.txt").read_text(encoding="utf-8")

    def test_generate_without_email(self, tmp_path, sample_assessment, sample_letter):
        resume = tmp_path / "resume.pdf"
        resume.write_bytes(b"%PDF-1.4\n%%EOF\n")
        jd = tmp_path / "jd.txt"
        jd.write_text("Backend Engineer", encoding="utf-8")
        out = tmp_path / "out"

        ctrl = _controller(sample_assessment, sample_letter)
        with patch.object(WizardController, "from_config", return_value=ctrl):
            result = runner.invoke(
                app, ["generate", str(resume), "--jd", str(jd), "-o", str(out), "--no-email"]
            )

        assert result.exit_code == 0, result.output
        ctrl.email_writer.write.assert_not_called()
        assert not (out / "Acme_Inc_email.txt").exists()

    def test_generation_failure_exits(self, tmp_path, sample_assessment, sample_letter):
        resume = tmp_path / "resume.pdf"
        resume.write_bytes(b"%PDF-1.4\n%%EOF\n")
        jd = tmp_path / "jd.txt"
        jd.write_text("Backend Engineer", encoding="utf-8")

        ctrl = _controller(sample_assessment, sample_letter)
        ctrl.letter_writer.write.side_effect = GenerationError("Failed to generate cover letter. Please try again.")
        with patch.object(WizardController, "from_config", return_value=ctrl):
            result = runner.invoke(app, ["generate", str(resume), "--jd", str(jd), "-o", str(tmp_path)])

        assert result.exit_code == 1
        assert "Failed to generate cover letter" in result.output
