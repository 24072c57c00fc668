"""Candidate match and summary models."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from .records import BankTransaction, Expense, Invoice, SettledRecord


class MatchRule(Enum):
    """Rule that produced a candidate."""

    EXACT_AMOUNT = "exact_amount"  # outflow == expense amount
    VAT_UPLIFT = "vat_uplift"  # outflow == expense amount plus VAT
    INVOICE_AMOUNT = "invoice_amount"  # inflow == paid invoice total


class Confidence(Enum):
    """Coarse quality label for a candidate."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class SuggestedMatch:
    """A proposed, unconfirmed pairing of one transaction with one record."""

    transaction: BankTransaction
    record: SettledRecord
    rule: MatchRule
    day_gap: int
    reason: str
    confidence: Optional[Confidence] = None

    @property
    def expense(self) -> Optional[Expense]:
        return self.record if isinstance(self.record, Expense) else None

    @property
    def invoice(self) -> Optional[Invoice]:
        return self.record if isinstance(self.record, Invoice) else None

    @property
    def amount_variance(self) -> Decimal:
        """Transaction magnitude minus the record amount (VAT uplift shows here)."""
        return self.transaction.magnitude - self.record.settled_amount


@dataclass(frozen=True)
class ReconciliationStats:
    """Counts shown on the reconciliation dashboard."""

    total: int
    reconciled: int
    pending: int
    suggested: int

    @property
    def reconciled_rate(self) -> float:
        """Percentage of transactions reconciled."""
        if self.total == 0:
            return 0.0
        return (self.reconciled / self.total) * 100
