"""Read-side helpers for the reconciliation screens."""

from typing import Iterable, Literal, Sequence

from .models.match import ReconciliationStats, SuggestedMatch
from .models.records import BankTransaction, Expense, Invoice

StatusFilter = Literal["all", "unreconciled", "reconciled"]


def unreconciled_expenses(expenses: Iterable[Expense]) -> list[Expense]:
    """Expenses that can still be linked."""
    return [e for e in expenses if not e.is_reconciled]


def eligible_invoices(
    invoices: Iterable[Invoice],
    status: str = "paid",
    invoice_type: str = "invoice",
) -> list[Invoice]:
    """Paid, unlinked invoices that can still be linked."""
    return [
        i for i in invoices if not i.is_reconciled and i.is_eligible(status, invoice_type)
    ]


def filter_transactions(
    transactions: Iterable[BankTransaction],
    status: StatusFilter = "unreconciled",
    search: str = "",
) -> list[BankTransaction]:
    """
    Filter the transaction list by reconciliation state and description text.

    Args:
        transactions: Transactions to filter
        status: "all", "unreconciled" or "reconciled"
        search: Case-insensitive substring of the description

    Returns:
        Matching transactions, input order preserved
    """
    if status not in ("all", "unreconciled", "reconciled"):
        raise ValueError(f"Unknown status filter: {status}")

    needle = search.strip().lower()
    result: list[BankTransaction] = []
    for txn in transactions:
        if status == "unreconciled" and txn.is_reconciled:
            continue
        if status == "reconciled" and not txn.is_reconciled:
            continue
        if needle and needle not in txn.description.lower():
            continue
        result.append(txn)
    return result


def reconciliation_stats(
    transactions: Sequence[BankTransaction],
    suggestions: Sequence[SuggestedMatch] = (),
) -> ReconciliationStats:
    """Dashboard counts: total, reconciled, pending and suggested."""
    total = len(transactions)
    reconciled = sum(1 for t in transactions if t.is_reconciled)
    return ReconciliationStats(
        total=total,
        reconciled=reconciled,
        pending=total - reconciled,
        suggested=len(suggestions),
    )
