"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from cover_letter_tailor.config import load_config
from cover_letter_tailor.errors import GenerationError, UnsupportedFileTypeError
from cover_letter_tailor.export.letter_pdf import (
    pdf_filename,
    plan_layout,
    render_letter_pdf,
    safe_filename_stem,
)
from cover_letter_tailor.models.assessment import MatchAssessment
from cover_letter_tailor.models.chat import ChatRole
from cover_letter_tailor.parsers.resume_loader import load_resume
from cover_letter_tailor.wizard.controller import WizardController
from cover_letter_tailor.wizard.state import WizardStep

app = typer.Typer(
    name="cover-letter-tailor",
    help="Tailored cover letters and outreach emails from your resume and a job posting",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _match_color(percentage: int) -> str:
    if percentage >= 80:
        return "green"
    if percentage >= 50:
        return "yellow"
    return "red"


def _print_assessment(assessment: MatchAssessment) -> None:
    color = _match_color(assessment.match_percentage)
    body = (
        f"[bold {color}]{assessment.match_percentage}%[/bold {color}] match"
        f" | {assessment.company_name or 'company not detected'}\n"
        f"{assessment.match_reason}"
    )
    if assessment.strengths:
        body += "\n\n[green]Strengths[/green]\n" + "\n".join(f"  + {s}" for s in assessment.strengths)
    if assessment.weaknesses:
        body += "\n\n[yellow]Gaps[/yellow]\n" + "\n".join(f"  - {w}" for w in assessment.weaknesses)
    console.print(Panel(body, title="Match Score"))

    if assessment.sources:
        console.print("[dim]Information sourced from:[/dim]")
        for source in assessment.sources:
            console.print(f"  [link={source.uri}]{source.title}[/link] [dim]{source.uri}[/dim]")


async def _chat_loop(controller: WizardController) -> None:
    """Read edit requests until an empty line; prints each reply."""
    label = "cover letter" if controller.state.step == WizardStep.LETTER_REVIEW else "email"
    console.print(f"\n[bold]Refine the {label}[/bold] (empty line to continue)")
    while True:
        message = await asyncio.to_thread(console.input, "[bold]You[/bold]: ")
        if not message.strip():
            return
        with console.status("Thinking..."):
            await controller.send_chat(message)
        last = controller.state.chat[-1]
        if last.role == ChatRole.ASSISTANT:
            console.print(f"[cyan]Assistant:[/cyan] {last.text}")
            if last.is_update:
                console.print("[green]Updated content[/green]")
                console.print(Panel(
                    controller.state.letter if label == "cover letter" else controller.state.email
                ))


@app.command()
def generate(
    resume: Path = typer.Argument(help="Resume file (PDF)"),
    jd: Path = typer.Option(..., "--jd", help="Job description text file"),
    output: Path = typer.Option(Path("./output"), "--output", "-o", help="Output directory"),
    email: bool = typer.Option(True, "--email/--no-email", help="Also draft the hiring manager email"),
    chat: bool = typer.Option(False, "--chat", help="Refine the results interactively"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """Generate a tailored cover letter (PDF + text) and an outreach email."""
    _setup_logging(verbose)
    if not jd.exists():
        console.print(f"[red]Job description file not found: {jd}[/red]")
        raise typer.Exit(1)
    if not resume.exists():
        console.print(f"[red]Resume file not found: {resume}[/red]")
        raise typer.Exit(1)

    try:
        resume_file = load_resume(resume)
    except UnsupportedFileTypeError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    jd_text = jd.read_text(encoding="utf-8")
    if not jd_text.strip():
        console.print("[red]The job description is empty.[/red]")
        raise typer.Exit(1)

    config = load_config()
    controller = WizardController.from_config(config)
    controller.set_resume(resume_file)
    controller.set_job_description(jd_text)

    if verbose:
        console.print(f"[dim]Resume: {resume_file.name}[/dim]")
        console.print(f"[dim]Job description: {len(jd_text)} chars[/dim]")

    async def _run() -> None:
        with console.status("Analyzing fit & writing..."):
            await controller.generate_letter()
        _print_assessment(controller.state.assessment)
        console.print(Panel(controller.state.letter, title="Cover Letter"))
        if chat:
            await _chat_loop(controller)
        if email:
            with console.status("Drafting message..."):
                await controller.generate_email()
            console.print(Panel(controller.state.email, title="Hiring Manager Message"))
            if chat:
                await _chat_loop(controller)

    try:
        asyncio.run(_run())
    except GenerationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    state = controller.state
    stem = safe_filename_stem(state.assessment.company_name)
    output.mkdir(parents=True, exist_ok=True)

    filename, pdf_bytes = controller.download_pdf()
    (output / filename).write_bytes(pdf_bytes)
    (output / f"{stem}_cover_letter.txt").write_text(state.letter, encoding="utf-8")
    console.print(f"\n[green]Cover letter saved: {output / filename}[/green]")
    if state.email:
        email_path = output / f"{stem}_email.txt"
        email_path.write_text(state.email, encoding="utf-8")
        console.print(f"[green]Email saved: {email_path}[/green]")


@app.command()
def render(
    letter: Path = typer.Argument(help="Cover letter text file"),
    company: str = typer.Option("", "--company", "-c", help="Company name used for the file name"),
    output: Path = typer.Option(Path("./output"), "--output", "-o", help="Output directory"),
) -> None:
    """Render an existing cover letter text file to PDF (no API calls)."""
    if not letter.exists():
        console.print(f"[red]File not found: {letter}[/red]")
        raise typer.Exit(1)

    text = letter.read_text(encoding="utf-8")
    output.mkdir(parents=True, exist_ok=True)
    pdf_path = output / pdf_filename(company)
    pdf_path.write_bytes(render_letter_pdf(text))
    console.print(f"[green]PDF saved: {pdf_path}[/green]")


@app.command()
def layout(
    letter: Path = typer.Argument(help="Cover letter text file"),
) -> None:
    """Show how each block of a cover letter will be classified and placed."""
    if not letter.exists():
        console.print(f"[red]File not found: {letter}[/red]")
        raise typer.Exit(1)

    plan = plan_layout(letter.read_text(encoding="utf-8"))
    table = Table(title=f"{len(plan.blocks)} blocks, {plan.page_count} page(s)")
    table.add_column("#", justify="right")
    table.add_column("Kind")
    table.add_column("Align")
    table.add_column("Page", justify="right")
    table.add_column("Y (mm)", justify="right")
    table.add_column("Lines", justify="right")
    table.add_column("Text")
    for i, placed in enumerate(plan.blocks, 1):
        preview = placed.block.text.replace("\n", " / ")
        table.add_row(
            str(i),
            placed.block.kind.value,
            "left" if placed.block.align == "L" else "justify",
            str(placed.page),
            f"{placed.y:.1f}",
            str(placed.line_count),
            preview[:50] + ("..." if len(preview) > 50 else ""),
        )
    console.print(table)


if __name__ == "__main__":
    app()
