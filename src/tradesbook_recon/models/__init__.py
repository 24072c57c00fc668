"""Data models for reconciliation."""

from .records import (
    BankTransaction,
    Expense,
    Invoice,
    SettledRecord,
    ExpenseRef,
    InvoiceRef,
    SettledRef,
    ReconciliationLink,
    ref_for,
)
from .match import (
    MatchRule,
    Confidence,
    SuggestedMatch,
    ReconciliationStats,
)

__all__ = [
    "BankTransaction",
    "Expense",
    "Invoice",
    "SettledRecord",
    "ExpenseRef",
    "InvoiceRef",
    "SettledRef",
    "ReconciliationLink",
    "ref_for",
    "MatchRule",
    "Confidence",
    "SuggestedMatch",
    "ReconciliationStats",
]
