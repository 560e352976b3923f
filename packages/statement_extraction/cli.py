# ruff: noqa: I001
"""CLI for the ``statement_extraction`` package.

Exposes callable command handlers (``cmd_extract``) and a Typer-based console
interface. Environment variables (notably ``OPENAI_API_KEY`` for the optional
assist step) are loaded from a local ``.env`` with ``python-dotenv`` before any
command runs. Business logic lives in :mod:`statement_extraction.processing`.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging
from .models import ProcessingResult
from .text_sources import PdfTextSource, StaticTextSource, TextSource, TextSourceError


def _print_progress(label: str, percent: int) -> None:
    print(f"[{percent:3d}%] {label}", file=sys.stderr)


def _print_result(result: ProcessingResult, *, as_json: bool) -> None:
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return
    for tx in result.transactions:
        print(f"{tx.date}\t{tx.amount:.2f}\t{tx.category}\t{tx.tag or ''}\t{tx.description}")
    period = (
        f"{result.period_start}..{result.period_end}" if result.period_start else "n/a"
    )
    print(
        f"# {result.transaction_count} transactions, status={result.status}, "
        f"reimbursable_total={result.reimbursable_total:.2f}, "
        f"bank={result.bank_name or 'unknown'}, period={period}",
        file=sys.stderr,
    )


def cmd_extract(
    source: TextSource,
    *,
    ai_assist: bool = False,
    as_json: bool = False,
    taxonomy_path: Path | None = None,
    show_progress: bool = False,
) -> int:
    """Run the pipeline on ``source`` and print results; return an exit code."""

    from .processing import process_statement
    from .taxonomy import load_taxonomy

    try:
        taxonomy = load_taxonomy(taxonomy_path) if taxonomy_path is not None else None
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = process_statement(
        source,
        on_progress=_print_progress if show_progress else None,
        taxonomy=taxonomy,
        assist=ai_assist,
    )
    if not result.success:
        if as_json:
            _print_result(result, as_json=True)
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    _print_result(result, as_json=as_json)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Extract and classify reimbursable expenses from bank statements. "
        "Loads OPENAI_API_KEY from a local .env for the optional --ai-assist step."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
PDF_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--pdf-path",
    help="Path to a bank statement PDF",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
TEXT_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--text-path",
    help="Path to a UTF-8 text file with already-extracted statement text",
    dir_okay=False,
    file_okay=True,
    exists=False,
)
TAXONOMY_OPTION: OptionInfo = typer.Option(
    "--taxonomy",
    help="Keyword taxonomy JSON (defaults to the bundled v1 seed).",
    dir_okay=False,
)


@app.command("extract")
def extract_cmd(
    pdf_path: Annotated[Path, PDF_PATH_OPTION],
    taxonomy: Annotated[Path | None, TAXONOMY_OPTION] = None,
    *,
    ai_assist: bool = typer.Option(
        False, "--ai-assist", help="Send items left in review to the model (best effort)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
    progress: bool = typer.Option(False, "--progress", help="Print progress to stderr."),
) -> None:
    """Extract transactions from a statement PDF (text layer, OCR fallback)."""

    if not pdf_path.is_file():
        print(f"Error: File not found: {pdf_path}", file=sys.stderr)
        raise typer.Exit(1)
    code = cmd_extract(
        PdfTextSource(pdf_path),
        ai_assist=ai_assist,
        as_json=as_json,
        taxonomy_path=taxonomy,
        show_progress=progress,
    )
    raise typer.Exit(code)


@app.command("parse-text")
def parse_text_cmd(
    text_path: Annotated[Path, TEXT_PATH_OPTION],
    taxonomy: Annotated[Path | None, TAXONOMY_OPTION] = None,
    *,
    ai_assist: bool = typer.Option(
        False, "--ai-assist", help="Send items left in review to the model (best effort)."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
) -> None:
    """Extract transactions from a plain-text statement dump."""

    try:
        source = StaticTextSource.from_file(text_path)
    except TextSourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1) from e
    raise typer.Exit(
        cmd_extract(source, ai_assist=ai_assist, as_json=as_json, taxonomy_path=taxonomy)
    )


@app.callback()
def _root() -> None:
    """Load ``.env`` from the CWD (without overriding set variables) and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:  # pragma: no cover - console entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    app()
