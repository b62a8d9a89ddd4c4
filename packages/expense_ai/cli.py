# ruff: noqa: I001
"""CLI for the ``expense_ai`` package.

A Typer-based console interface. Environment variables (notably
``OPENAI_API_KEY`` and the ``EXPENSE_AI_*`` overrides) are loaded from a local
``.env`` using ``python-dotenv`` before delegating to
:func:`expense_ai.api.categorize_statement`.
"""

from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .logging_setup import configure_logging

# Module-level option object to satisfy ruff B008 (no calls in defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a CSV statement with Date, Description and Amount columns",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
    readable=True,
)


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Categorize bank statement transactions with an LLM and summarize expenses "
        "by category. Loads OPENAI_API_KEY from a local .env before running."
    ),
)


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None, help="Log level (defaults to EXPENSE_AI_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps already-set environment variables authoritative.
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


@app.command("categorize")
def categorize_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    chunk_size: int | None = typer.Option(
        None, min=1, help="Transactions per model call (default 100)."
    ),
    max_workers: int | None = typer.Option(
        None, min=1, help="Concurrent model calls (default 4)."
    ),
    default_category: str | None = typer.Option(
        None, help="Category applied when classification fails (default Other)."
    ),
    month: str | None = typer.Option(
        None, help="Only print and summarize transactions from this month (YYYY-MM)."
    ),
    insights: bool = typer.Option(
        False, help="Also ask the model for a short narrative spending summary."
    ),
) -> None:
    """Categorize a CSV statement and print rows, category totals and a summary line."""

    # Deferred imports keep `--help` fast.
    from .api import categorize_statement
    from .classifier import OpenAIResponsesModel
    from .config import CategorizerSettings
    from .errors import ExpenseAIError
    from .ingest import load_transactions_from_csv
    from .insights import summarize_spending
    from .summary import filter_by_month, month_key, summarize_by_category, total_expenses

    if not os.getenv("OPENAI_API_KEY"):
        typer.echo("Error: OPENAI_API_KEY is not set in the environment.", err=True)
        raise typer.Exit(1)

    if month is not None and month_key(f"{month}-01") is None:
        typer.echo(f"Error: --month must look like YYYY-MM, got {month!r}.", err=True)
        raise typer.Exit(2)

    try:
        settings = CategorizerSettings.from_env(
            max_chunk_size=chunk_size,
            concurrency=max_workers,
            default_category=default_category,
        )
    except ValueError as e:
        typer.echo(f"Error: invalid settings: {e}", err=True)
        raise typer.Exit(2) from e

    try:
        transactions = load_transactions_from_csv(csv_path)
    except FileNotFoundError as e:
        typer.echo(f"Error: File not found: {csv_path}", err=True)
        raise typer.Exit(1) from e
    except PermissionError as e:
        typer.echo(f"Error: Permission denied: {csv_path}", err=True)
        raise typer.Exit(1) from e
    except (csv.Error, ValueError) as e:
        typer.echo(f"Error: Failed to parse CSV: {e}", err=True)
        raise typer.Exit(1) from e

    if not transactions:
        typer.echo("No transactions found in the uploaded file.", err=True)
        raise typer.Exit(0)

    model = OpenAIResponsesModel(model=settings.model, timeout=settings.request_timeout)
    report = categorize_statement(transactions, model=model, settings=settings)

    rows = filter_by_month(report.transactions, month)
    for row in rows:
        typer.echo(f"{row.date}\t{row.description}\t{row.amount}\t{row.category}")

    typer.echo("")
    typer.echo("Expenses by category:")
    for entry in summarize_by_category(rows, default_category=settings.default_category):
        typer.echo(f"  {entry.category}\t{entry.total}")
    typer.echo(f"  Total\t{total_expenses(rows)}")

    if insights and rows and not report.failed:
        try:
            typer.echo("")
            typer.echo(summarize_spending(rows, model=model))
        except ExpenseAIError as e:
            typer.echo(f"Warning: {e}", err=True)
        except Exception as e:  # noqa: BLE001 - insights are optional
            typer.echo(f"Warning: spending summary unavailable ({e.__class__.__name__}).", err=True)

    typer.echo(report.notification, err=True)
    if report.failed:
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
