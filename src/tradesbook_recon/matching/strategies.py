"""
Matching strategies for candidate generation.
Each strategy handles one transaction polarity and one record kind.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..models.match import MatchRule
from ..models.records import BankTransaction, Expense, Invoice, SettledRecord
from ..queries import eligible_invoices, unreconciled_expenses


@dataclass(frozen=True)
class Candidate:
    """A qualifying record for one transaction, before selection."""

    record: SettledRecord
    rule: MatchRule
    day_gap: int


def day_gap(first: date, second: date) -> int:
    """Absolute distance in whole days."""
    return abs((first - second).days)


class MatchingStrategy(ABC):
    """Abstract base class for matching strategies."""

    @abstractmethod
    def applies_to(self, txn: BankTransaction) -> bool:
        """Whether this strategy handles the transaction's polarity."""
        pass

    @abstractmethod
    def eligible(self, records: Sequence[SettledRecord]) -> list[SettledRecord]:
        """
        Filter the record pool down to records that may still be matched.

        Args:
            records: Records of the kind this strategy handles

        Returns:
            Eligible records, input order preserved
        """
        pass

    @abstractmethod
    def find_matches(
        self,
        txn: BankTransaction,
        records: Sequence[SettledRecord],
    ) -> list[Candidate]:
        """
        Find qualifying records for a transaction.

        Args:
            txn: Unreconciled bank transaction
            records: Eligible records

        Returns:
            Qualifying candidates in input order (may be empty)
        """
        pass

    @abstractmethod
    def describe(self, txn: BankTransaction, candidate: Candidate) -> str:
        """Human-readable reason naming the rule and the day gap."""
        pass


class ExpenseMatchStrategy(MatchingStrategy):
    """
    Outflows against unreconciled expenses.

    A candidate's amount equals the expense amount, or the expense amount
    plus VAT, and its date falls within the window.
    """

    def __init__(
        self,
        window_days: int = 7,
        tolerance: Decimal = Decimal("0.01"),
        vat_rate: Decimal = Decimal("0.20"),
        apply_vat_uplift: bool = True,
    ):
        """
        Initialize with matching tolerances.

        Args:
            window_days: Maximum days between transaction and expense
            tolerance: Amounts closer than this are equal
            vat_rate: VAT fraction added for the uplift rule
            apply_vat_uplift: Whether the uplift rule is active
        """
        self.window_days = window_days
        self.tolerance = tolerance
        self.vat_rate = vat_rate
        self.vat_multiplier = Decimal("1") + vat_rate
        self.apply_vat_uplift = apply_vat_uplift

    def applies_to(self, txn: BankTransaction) -> bool:
        return txn.is_outflow

    def eligible(self, records: Sequence[SettledRecord]) -> list[SettledRecord]:
        return unreconciled_expenses(r for r in records if isinstance(r, Expense))

    def match_rule(self, txn: BankTransaction, expense: Expense) -> Optional[MatchRule]:
        """Return the amount rule an expense satisfies, exact first."""
        magnitude = txn.magnitude
        if abs(magnitude - expense.amount) < self.tolerance:
            return MatchRule.EXACT_AMOUNT
        if self.apply_vat_uplift:
            uplifted = expense.amount * self.vat_multiplier
            if abs(magnitude - uplifted) < self.tolerance:
                return MatchRule.VAT_UPLIFT
        return None

    def find_matches(
        self,
        txn: BankTransaction,
        records: Sequence[SettledRecord],
    ) -> list[Candidate]:
        matches: list[Candidate] = []
        for expense in records:
            gap = day_gap(txn.date, expense.date)
            if gap > self.window_days:
                continue

            rule = self.match_rule(txn, expense)
            if rule is not None:
                matches.append(Candidate(record=expense, rule=rule, day_gap=gap))

        return matches

    def describe(self, txn: BankTransaction, candidate: Candidate) -> str:
        if candidate.rule == MatchRule.EXACT_AMOUNT:
            return (
                f"Exact amount match (£{txn.magnitude:.2f}), "
                f"{candidate.day_gap} days apart"
            )
        vat_percent = (self.vat_rate * 100).normalize()
        return (
            f"Amount with VAT match (£{candidate.record.settled_amount:.2f} "
            f"+ {vat_percent:f}% VAT), {candidate.day_gap} days apart"
        )


class InvoiceMatchStrategy(MatchingStrategy):
    """Inflows against paid invoices that are not yet linked."""

    def __init__(
        self,
        window_days: int = 30,
        tolerance: Decimal = Decimal("0.01"),
        status: str = "paid",
        invoice_type: str = "invoice",
    ):
        """
        Initialize with matching tolerances.

        Args:
            window_days: Maximum days between transaction and payment date
            tolerance: Amounts closer than this are equal
            status: Invoice status required for eligibility
            invoice_type: Document type required for eligibility
        """
        self.window_days = window_days
        self.tolerance = tolerance
        self.status = status
        self.invoice_type = invoice_type

    def applies_to(self, txn: BankTransaction) -> bool:
        return txn.is_inflow

    def eligible(self, records: Sequence[SettledRecord]) -> list[SettledRecord]:
        return eligible_invoices(
            (r for r in records if isinstance(r, Invoice)),
            status=self.status,
            invoice_type=self.invoice_type,
        )

    def find_matches(
        self,
        txn: BankTransaction,
        records: Sequence[SettledRecord],
    ) -> list[Candidate]:
        matches: list[Candidate] = []
        for invoice in records:
            if abs(txn.magnitude - invoice.total) >= self.tolerance:
                continue

            gap = day_gap(txn.date, invoice.date)
            if gap <= self.window_days:
                matches.append(
                    Candidate(record=invoice, rule=MatchRule.INVOICE_AMOUNT, day_gap=gap)
                )

        return matches

    def describe(self, txn: BankTransaction, candidate: Candidate) -> str:
        invoice = candidate.record
        return (
            f"Invoice #{invoice.reference_number} (£{invoice.total:.2f}), "
            f"{candidate.day_gap} days apart"
        )
