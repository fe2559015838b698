"""Command-line entry points for the talent brief workflow."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.markup import escape

from .content_client import ContentClient
from .docx_builder import build_docx
from .models import Document
from .render import format_candidates, format_markdown
from .workflow import WorkflowController, WorkflowState

app = typer.Typer(
    help="Discover MEA HR news, curate 7-10 items and publish a shareable newsletter."
)

PROGRESS_MESSAGES = {
    WorkflowState.DISCOVERING: "Scanning strategic sources...",
    WorkflowState.SYNTHESIZING: "Synthesizing strategic content...",
    WorkflowState.FINALIZING: "Finalizing insights portal...",
}


def _build_content_client() -> ContentClient:
    return ContentClient()


def _print_progress(controller: WorkflowController) -> None:
    message = PROGRESS_MESSAGES.get(controller.state)
    if message:
        rprint(f"[magenta]{message}[/magenta]")


def parse_item_numbers(text: str, count: int) -> List[int]:
    """
    Parse "1, 3, 5-7" into zero-based indexes within ``count`` items.

    Raises ValueError on anything that is not a number or range in bounds.
    """
    indexes: List[int] = []
    for chunk in text.replace(" ", "").split(","):
        if not chunk:
            continue
        if "-" in chunk:
            start_text, end_text = chunk.split("-", 1)
            start, end = int(start_text), int(end_text)
            if start > end:
                start, end = end, start
            numbers = range(start, end + 1)
        else:
            numbers = range(int(chunk), int(chunk) + 1)
        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is not between 1 and {count}.")
            indexes.append(number - 1)
    return indexes


def _write_document(out_path: Path, document: Document) -> None:
    suffix = out_path.suffix.lower()
    if suffix == ".docx":
        build_docx(document, out_path)
        return
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".json":
        out_path.write_text(
            json.dumps(document.to_wire(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    else:
        out_path.write_text(format_markdown(document), encoding="utf-8")


def _show_published(controller: WorkflowController, out: Optional[Path]) -> None:
    document = controller.document
    rprint(escape(format_markdown(document)))
    share = controller.share_url()
    if share:
        rprint(f"[cyan]Share link:[/cyan] {share}")
    else:
        rprint("[yellow]Share link could not be created.[/yellow]")
    if out:
        _write_document(out, document)
        rprint(f"[cyan]Wrote output to {out}[/cyan]")


async def _curate(controller: WorkflowController) -> bool:
    """Loop over toggle/generate commands; returns False when the user quits."""
    while controller.state is WorkflowState.CURATING:
        rprint(escape(format_candidates(controller.candidates, controller.selection)))
        rprint(f"[cyan]{len(controller.selection)} / 10 selected[/cyan]")
        answer = typer.prompt(
            "Toggle numbers (e.g. 1,3,5-7), 'g' to generate, 'q' to quit"
        ).strip().lower()
        if answer == "q":
            return False
        if answer == "g":
            if not await controller.synthesize():
                rprint("[yellow]Select between 7 and 10 articles to generate.[/yellow]")
            elif controller.error:
                rprint(f"[red]{escape(controller.error.message)}[/red]")
            continue
        try:
            indexes = parse_item_numbers(answer, len(controller.candidates))
        except ValueError as exc:
            rprint(f"[red]{escape(str(exc))}[/red]")
            continue
        for idx in indexes:
            item = controller.candidates[idx]
            if not controller.toggle(item.id):
                rprint(f"[yellow]Limit reached; skipped {escape(item.title)}[/yellow]")
    return True


async def _interactive(controller: WorkflowController, out: Optional[Path]) -> int:
    if controller.error:
        rprint(f"[red]{escape(controller.error.message)}[/red]")
    if controller.read_only:
        _show_published(controller, out)
        if not typer.confirm("Start a new session?", default=False):
            return 0
        controller.reset()

    while controller.state is WorkflowState.IDLE:
        await controller.start_discovery()
        if controller.error:
            rprint(f"[red]{escape(controller.error.message)}[/red]")
            if not typer.confirm("Retry discovery?", default=False):
                return 1
    if not controller.candidates:
        rprint("[yellow]Discovery returned no articles.[/yellow]")

    if not await _curate(controller):
        return 0
    _show_published(controller, out)
    return 0


@app.callback()
def main_options(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Configure logging for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


@app.command("run")
def run_command(
    location: str = typer.Option(
        "",
        "--location",
        "-l",
        help="Entry URL; a shared newsletter link opens it read-only.",
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "-o",
        help="Optional path to write the newsletter (.md, .json or .docx).",
    ),
):
    """
    Interactive workflow: discover -> curate -> synthesize -> publish.
    """
    controller = WorkflowController(_build_content_client(), location=location)
    controller.subscribe(_print_progress)
    code = asyncio.run(_interactive(controller, out))
    if code:
        raise typer.Exit(code=code)


@app.command("view")
def view_command(
    url: str = typer.Argument(..., help="Shared newsletter link."),
):
    """Render a shared newsletter without contacting any service."""
    controller = WorkflowController(_build_content_client(), location=url)
    if not controller.read_only:
        message = controller.error.message if controller.error else "Not a newsletter link."
        rprint(f"[red]{message}[/red]")
        raise typer.Exit(code=1)
    rprint(escape(format_markdown(controller.document)))


@app.command("export")
def export_command(
    url: str = typer.Argument(..., help="Shared newsletter link."),
    out: Path = typer.Option(
        ..., "--out", "-o", help="Destination file (.md, .json or .docx)."
    ),
):
    """Write a shared newsletter to disk."""
    controller = WorkflowController(_build_content_client(), location=url)
    if not controller.read_only:
        message = controller.error.message if controller.error else "Not a newsletter link."
        rprint(f"[red]{message}[/red]")
        raise typer.Exit(code=1)
    _write_document(out, controller.document)
    rprint(f"[green]Wrote output to {out}[/green]")


def main():
    app()


if __name__ == "__main__":
    main()
