"""
Record store interface.

The store is the single source of truth for transactions, expenses,
invoices and reconciliation links. It holds no matching logic.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..models.records import (
    BankTransaction,
    Expense,
    Invoice,
    ReconciliationLink,
)


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time copy of the three record kinds."""

    transactions: list[BankTransaction] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    invoices: list[Invoice] = field(default_factory=list)


class RecordStore(ABC):
    """Abstract data access for the reconciliation core."""

    # Whether transaction() rolls back every write made inside it on error.
    # When False the ledger undoes its own writes.
    supports_transactions: bool = False

    @abstractmethod
    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        pass

    @abstractmethod
    def get_expense(self, expense_id: str) -> Optional[Expense]:
        pass

    @abstractmethod
    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        pass

    @abstractmethod
    def list_transactions(self) -> list[BankTransaction]:
        pass

    @abstractmethod
    def list_expenses(self) -> list[Expense]:
        pass

    @abstractmethod
    def list_invoices(self) -> list[Invoice]:
        pass

    @abstractmethod
    def save_transaction(self, transaction: BankTransaction) -> None:
        """Insert or replace a transaction by id."""

    @abstractmethod
    def save_expense(self, expense: Expense) -> None:
        """Insert or replace an expense by id."""

    @abstractmethod
    def save_invoice(self, invoice: Invoice) -> None:
        """Insert or replace an invoice by id."""

    @abstractmethod
    def add_link(self, link: ReconciliationLink) -> None:
        pass

    @abstractmethod
    def delete_link(self, link_id: str) -> None:
        pass

    @abstractmethod
    def links_for_transaction(self, transaction_id: str) -> list[ReconciliationLink]:
        pass

    @abstractmethod
    def link_for_expense(self, expense_id: str) -> Optional[ReconciliationLink]:
        pass

    @abstractmethod
    def link_for_invoice(self, invoice_id: str) -> Optional[ReconciliationLink]:
        pass

    def snapshot(self) -> Snapshot:
        """Return the current records for candidate generation."""
        return Snapshot(
            transactions=self.list_transactions(),
            expenses=self.list_expenses(),
            invoices=self.list_invoices(),
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Group writes into one unit of work.

        The base implementation provides no isolation or rollback.
        """
        yield
