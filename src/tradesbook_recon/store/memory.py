"""In-process record store with snapshot rollback."""

from contextlib import contextmanager
from typing import Iterable, Iterator, Optional
import logging
import threading

from ..models.records import (
    BankTransaction,
    Expense,
    Invoice,
    ReconciliationLink,
)
from .base import RecordStore

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """
    Thread-safe in-memory store.

    Records are frozen dataclasses, so a shallow copy of each table is a
    complete snapshot. ``transaction()`` holds the store lock for its whole
    duration, which serialises ledger operations, and restores the copied
    tables if the block raises.
    """

    supports_transactions = True

    def __init__(
        self,
        transactions: Iterable[BankTransaction] = (),
        expenses: Iterable[Expense] = (),
        invoices: Iterable[Invoice] = (),
    ):
        self._lock = threading.RLock()
        self._depth = 0
        # dicts keep insertion order, which the first-match tie-break relies on
        self._transactions: dict[str, BankTransaction] = {t.id: t for t in transactions}
        self._expenses: dict[str, Expense] = {e.id: e for e in expenses}
        self._invoices: dict[str, Invoice] = {i.id: i for i in invoices}
        self._links: dict[str, ReconciliationLink] = {}

    # Reads

    def get_transaction(self, transaction_id: str) -> Optional[BankTransaction]:
        with self._lock:
            return self._transactions.get(transaction_id)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        with self._lock:
            return self._expenses.get(expense_id)

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        with self._lock:
            return self._invoices.get(invoice_id)

    def list_transactions(self) -> list[BankTransaction]:
        with self._lock:
            return list(self._transactions.values())

    def list_expenses(self) -> list[Expense]:
        with self._lock:
            return list(self._expenses.values())

    def list_invoices(self) -> list[Invoice]:
        with self._lock:
            return list(self._invoices.values())

    def list_links(self) -> list[ReconciliationLink]:
        with self._lock:
            return list(self._links.values())

    def links_for_transaction(self, transaction_id: str) -> list[ReconciliationLink]:
        with self._lock:
            return [
                link
                for link in self._links.values()
                if link.bank_transaction_id == transaction_id
            ]

    def link_for_expense(self, expense_id: str) -> Optional[ReconciliationLink]:
        with self._lock:
            return next(
                (l for l in self._links.values() if l.expense_id == expense_id), None
            )

    def link_for_invoice(self, invoice_id: str) -> Optional[ReconciliationLink]:
        with self._lock:
            return next(
                (l for l in self._links.values() if l.invoice_id == invoice_id), None
            )

    # Writes

    def save_transaction(self, transaction: BankTransaction) -> None:
        with self._lock:
            self._transactions[transaction.id] = transaction

    def save_expense(self, expense: Expense) -> None:
        with self._lock:
            self._expenses[expense.id] = expense

    def save_invoice(self, invoice: Invoice) -> None:
        with self._lock:
            self._invoices[invoice.id] = invoice

    def add_link(self, link: ReconciliationLink) -> None:
        with self._lock:
            if link.id in self._links:
                raise ValueError(f"Duplicate link id: {link.id}")
            self._links[link.id] = link

    def delete_link(self, link_id: str) -> None:
        with self._lock:
            self._links.pop(link_id, None)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            outermost = self._depth == 0
            if outermost:
                saved = (
                    dict(self._transactions),
                    dict(self._expenses),
                    dict(self._invoices),
                    dict(self._links),
                )
            self._depth += 1
            try:
                yield
            except BaseException:
                if outermost:
                    (
                        self._transactions,
                        self._expenses,
                        self._invoices,
                        self._links,
                    ) = saved
                    logger.debug("Store transaction rolled back")
                raise
            finally:
                self._depth -= 1
