"""
Command-line interface for the bank reconciliation core.

Runs candidate generation over CSV exports so matching can be checked
outside the host application.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ReconConfig, generate_default_config, load_config
from .ledger import ReconciliationLedger
from .loaders.csv_loader import CsvSnapshotLoader
from .matching.engine import CandidateGenerator
from .models.match import Confidence, ReconciliationStats, SuggestedMatch
from .queries import reconciliation_stats
from .reports.excel_generator import ExcelReportGenerator
from .store.memory import InMemoryRecordStore
from .utils.exceptions import AlreadyReconciledError, ReconciliationError
from .utils.logging_config import setup_logging

console = Console()

CONFIDENCE_STYLES = {
    Confidence.HIGH: "green",
    Confidence.MEDIUM: "yellow",
    Confidence.LOW: "red",
}


@click.group()
@click.version_option(version="0.1.0")
def main():
    """Trades back-office bank reconciliation tool."""
    pass


@main.command()
@click.argument("transactions_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-e", "--expenses", type=click.Path(exists=True, path_type=Path), help="Expenses CSV"
)
@click.option(
    "-i", "--invoices", type=click.Path(exists=True, path_type=Path), help="Invoices CSV"
)
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (YAML)",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Write an Excel report")
@click.option(
    "--tie-break",
    type=click.Choice(["first", "closest"]),
    default=None,
    help="Override how one candidate is chosen among several",
)
@click.option("--vat-rate", type=float, default=None, help="Override the VAT rate (e.g. 0.2)")
@click.option(
    "--accept-high",
    is_flag=True,
    help="Commit every high-confidence suggestion and report the links",
)
@click.option("--limit", type=int, default=20, show_default=True, help="Rows to display")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
def suggest(
    transactions_file: Path,
    expenses: Optional[Path],
    invoices: Optional[Path],
    config: Optional[Path],
    output: Optional[Path],
    tie_break: Optional[str],
    vat_rate: Optional[float],
    accept_high: bool,
    limit: int,
    verbose: bool,
):
    """
    Suggest matches between bank transactions and expenses/invoices.

    TRANSACTIONS_FILE: CSV of bank transactions
    """
    try:
        recon_config = load_config(config)
        setup_logging(
            logging.DEBUG if verbose else recon_config.logging.level,
            log_format=recon_config.logging.format,
        )

        if tie_break is not None:
            recon_config.matching.tie_break = tie_break
        if vat_rate is not None:
            _apply_vat_rate_override(recon_config, vat_rate)

        loader = CsvSnapshotLoader(recon_config)
        snapshot = loader.load(transactions_file, expenses, invoices)

        store = InMemoryRecordStore(snapshot.transactions, snapshot.expenses, snapshot.invoices)
        generator = CandidateGenerator(recon_config)
        suggestions = generator.generate_from_snapshot(store.snapshot())

        _display_suggestions(suggestions, limit)

        if accept_high:
            ledger = ReconciliationLedger(store)
            accepted = _accept_high_confidence(ledger, suggestions)
            console.print(f"\n[green]Accepted {accepted} high-confidence match(es)[/green]")
            suggestions = generator.generate_from_snapshot(store.snapshot())

        transactions = store.list_transactions()
        stats = reconciliation_stats(transactions, suggestions)
        _display_stats(stats)

        if output is not None:
            suggested_ids = {s.transaction.id for s in suggestions}
            unmatched = [
                t for t in transactions if not t.is_reconciled and t.id not in suggested_ids
            ]
            report_path = ExcelReportGenerator(recon_config).generate_report(
                stats=stats,
                suggestions=suggestions,
                unmatched=unmatched,
                links=store.list_links(),
                output_path=output,
            )
            console.print(f"\n[green]Report generated: {report_path}[/green]")

    except ReconciliationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


@main.command("init-config")
@click.option(
    "-o", "--output", type=click.Path(path_type=Path), default=Path("config.yaml")
)
def init_config(output: Path):
    """Generate a sample configuration file."""
    generate_default_config(output)
    console.print(f"[green]Configuration file generated: {output}[/green]")


def _accept_high_confidence(
    ledger: ReconciliationLedger, suggestions: list[SuggestedMatch]
) -> int:
    """Commit high-confidence suggestions, skipping records claimed earlier in the run."""
    accepted = 0
    for match in suggestions:
        if match.confidence != Confidence.HIGH:
            continue
        try:
            ledger.accept(match)
        except AlreadyReconciledError as e:
            console.print(f"[yellow]Skipped {match.transaction.id}: {escape(str(e))}[/yellow]")
            continue
        accepted += 1
    return accepted


def _display_suggestions(suggestions: list[SuggestedMatch], limit: int) -> None:
    """Display suggested matches in console."""
    table = Table(title="Suggested Matches")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    table.add_column("Match")
    table.add_column("Confidence")
    table.add_column("Reason")

    for match in suggestions[:limit]:
        txn = match.transaction
        style = CONFIDENCE_STYLES.get(match.confidence, "white")
        confidence = match.confidence.value if match.confidence else "-"
        table.add_row(
            str(txn.date),
            txn.description[:40] + "..." if len(txn.description) > 40 else txn.description,
            f"£{txn.amount:,.2f}",
            match.record.label,
            f"[{style}]{confidence}[/{style}]",
            match.reason,
        )

    console.print(table)

    if len(suggestions) > limit:
        console.print(f"\n... and {len(suggestions) - limit} more matches available")


def _display_stats(stats: ReconciliationStats) -> None:
    """Display reconciliation counts in console."""
    table = Table(title="Reconciliation Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total Transactions", str(stats.total))
    table.add_row("Reconciled", str(stats.reconciled))
    table.add_row("Pending", str(stats.pending))
    table.add_row("Suggested", str(stats.suggested))
    table.add_row("Reconciled Rate", f"{stats.reconciled_rate:.1f}%")

    console.print(table)


def _apply_vat_rate_override(config: ReconConfig, rate: float) -> None:
    """Apply a VAT rate override, rejecting nonsensical values."""
    if not 0 <= rate < 1:
        raise click.BadParameter(f"VAT rate must be a fraction in [0, 1), got {rate}")
    config.matching.vat_rate = rate


if __name__ == "__main__":
    main()
