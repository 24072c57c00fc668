"""
Reconciliation ledger.

The only writer of reconciliation state: it creates and removes links and
keeps the ``is_reconciled`` flags of transactions, expenses and invoices in
step with them.
"""

from dataclasses import replace
from decimal import Decimal
from functools import partial
from typing import Callable, Iterable, Optional
import logging
import threading

from .models.match import SuggestedMatch
from .models.records import (
    BankTransaction,
    Expense,
    ExpenseRef,
    Invoice,
    ReconciliationLink,
    SettledRecord,
    SettledRef,
    ref_for,
)
from .store.base import RecordStore
from .utils.exceptions import (
    AlreadyReconciledError,
    NotFoundError,
    PartialCommitFailure,
    ReconciliationError,
    SelectionError,
)

logger = logging.getLogger(__name__)


class _UndoLog:
    """
    Records inverse operations for each store write.

    Replayed in reverse when the store cannot roll back on its own.
    """

    def __init__(self, store: RecordStore):
        self.store = store
        self._undo: list[Callable[[], None]] = []

    def add_link(self, link: ReconciliationLink) -> None:
        self.store.add_link(link)
        self._undo.append(partial(self.store.delete_link, link.id))

    def delete_link(self, link: ReconciliationLink) -> None:
        self.store.delete_link(link.id)
        self._undo.append(partial(self.store.add_link, link))

    def save_transaction(self, new: BankTransaction, previous: BankTransaction) -> None:
        self.store.save_transaction(new)
        self._undo.append(partial(self.store.save_transaction, previous))

    def save_record(self, new: SettledRecord, previous: SettledRecord) -> None:
        save = self.store.save_expense if isinstance(new, Expense) else self.store.save_invoice
        save(new)
        self._undo.append(partial(save, previous))

    def replay(self) -> None:
        while self._undo:
            self._undo.pop()()


def _unique(ids: Iterable[str]) -> list[str]:
    """Drop duplicate ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


class ReconciliationLedger:
    """Commits and reverses reconciliation links against a record store."""

    def __init__(self, store: RecordStore):
        """
        Initialize the ledger.

        Args:
            store: Record store holding transactions, expenses and invoices
        """
        self.store = store
        # serialises check-then-write for stores whose transaction() does not
        self._lock = threading.RLock()

    def reconcile_multi(
        self,
        transaction_id: str,
        expense_ids: Iterable[str] = (),
        invoice_ids: Iterable[str] = (),
    ) -> list[ReconciliationLink]:
        """
        Link one transaction to one or more expenses and invoices.

        Each link carries the full amount of its record. The transaction and
        every referenced record are flagged reconciled. All or nothing.

        Args:
            transaction_id: Bank transaction to reconcile
            expense_ids: Expenses settled by the transaction
            invoice_ids: Invoices settled by the transaction

        Returns:
            The links created

        Raises:
            SelectionError: If no expense or invoice is given
            NotFoundError: If any id does not exist
            AlreadyReconciledError: If the transaction or any record is already linked
            PartialCommitFailure: If the store failed mid-commit (state rolled back)
        """
        expense_ids = _unique(expense_ids)
        invoice_ids = _unique(invoice_ids)
        if not expense_ids and not invoice_ids:
            raise SelectionError("Select at least one expense or invoice to reconcile")

        undo = _UndoLog(self.store)
        with self._lock:
            try:
                with self.store.transaction():
                    txn = self._require_transaction(transaction_id)
                    if txn.is_reconciled or self.store.links_for_transaction(txn.id):
                        raise AlreadyReconciledError("transaction", txn.id)

                    records: list[SettledRecord] = [
                        self._require_unlinked_expense(e) for e in expense_ids
                    ]
                    records += [self._require_unlinked_invoice(i) for i in invoice_ids]

                    links: list[ReconciliationLink] = []
                    for record in records:
                        link = ReconciliationLink(
                            bank_transaction_id=txn.id,
                            settled=ref_for(record),
                            matched_amount=record.settled_amount,
                        )
                        undo.add_link(link)
                        undo.save_record(replace(record, is_reconciled=True), record)
                        links.append(link)

                    undo.save_transaction(replace(txn, is_reconciled=True), txn)
            except ReconciliationError:
                raise
            except Exception as e:
                self._roll_back(undo, "reconcile", transaction_id)
                raise PartialCommitFailure(
                    f"Reconcile of transaction {transaction_id} failed and was rolled back: {e}"
                ) from e

        total = sum((link.matched_amount for link in links), Decimal("0"))
        logger.info(
            f"Reconciled transaction {txn.id} ({txn.amount}) with "
            f"{len(expense_ids)} expense(s) and {len(invoice_ids)} invoice(s), "
            f"matched total {total}"
        )
        return links

    def reconcile_single(
        self,
        transaction_id: str,
        expense_id: Optional[str] = None,
        invoice_id: Optional[str] = None,
    ) -> ReconciliationLink:
        """
        Link one transaction to exactly one expense or invoice.

        Raises:
            SelectionError: Unless exactly one of expense_id / invoice_id is given
        """
        if (expense_id is None) == (invoice_id is None):
            raise SelectionError("Provide exactly one of expense_id or invoice_id")

        links = self.reconcile_multi(
            transaction_id,
            expense_ids=[expense_id] if expense_id is not None else [],
            invoice_ids=[invoice_id] if invoice_id is not None else [],
        )
        return links[0]

    def accept(self, match: SuggestedMatch) -> ReconciliationLink:
        """Commit a suggested match (the one-click accept action)."""
        if match.expense is not None:
            return self.reconcile_single(match.transaction.id, expense_id=match.expense.id)
        return self.reconcile_single(match.transaction.id, invoice_id=match.record.id)

    def unreconcile(self, transaction_id: str) -> list[ReconciliationLink]:
        """
        Remove every link of a transaction and clear the affected flags.

        Calling this on an unreconciled transaction is a no-op.

        Returns:
            The links removed (empty for a no-op)

        Raises:
            NotFoundError: If the transaction does not exist
            PartialCommitFailure: If the store failed mid-way (state rolled back)
        """
        undo = _UndoLog(self.store)
        with self._lock:
            try:
                with self.store.transaction():
                    txn = self._require_transaction(transaction_id)
                    links = self.store.links_for_transaction(txn.id)
                    if not links and not txn.is_reconciled:
                        logger.info(f"Transaction {txn.id} is not reconciled, nothing to undo")
                        return []

                    for link in links:
                        undo.delete_link(link)
                        record = self._get_settled(link.settled)
                        if record is None:
                            logger.warning(
                                f"Link {link.id} references missing "
                                f"{link.settled.kind} {link.settled.id}"
                            )
                            continue
                        if record.is_reconciled and self._linked_elsewhere(link.settled) is None:
                            undo.save_record(replace(record, is_reconciled=False), record)

                    undo.save_transaction(replace(txn, is_reconciled=False), txn)
            except ReconciliationError:
                raise
            except Exception as e:
                self._roll_back(undo, "unreconcile", transaction_id)
                raise PartialCommitFailure(
                    f"Unreconcile of transaction {transaction_id} failed and was rolled back: {e}"
                ) from e

        logger.info(f"Unreconciled transaction {transaction_id}: removed {len(links)} link(s)")
        return links

    def get_links_for_transaction(self, transaction_id: str) -> list[ReconciliationLink]:
        """Return the links referencing a transaction."""
        return self.store.links_for_transaction(transaction_id)

    def _roll_back(self, undo: _UndoLog, operation: str, transaction_id: str) -> None:
        """Undo partial writes when the store has no rollback of its own."""
        logger.error(f"{operation} of transaction {transaction_id} failed mid-commit")
        if self.store.supports_transactions:
            return
        try:
            undo.replay()
        except Exception:
            logger.exception(
                f"Compensating rollback of {operation} for transaction "
                f"{transaction_id} failed; store may be inconsistent"
            )

    def _require_transaction(self, transaction_id: str) -> BankTransaction:
        txn = self.store.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError("transaction", transaction_id)
        return txn

    def _require_unlinked_expense(self, expense_id: str) -> Expense:
        expense = self.store.get_expense(expense_id)
        if expense is None:
            raise NotFoundError("expense", expense_id)
        existing = self.store.link_for_expense(expense_id)
        if existing is not None:
            raise AlreadyReconciledError(
                "expense", expense_id, f"linked to transaction {existing.bank_transaction_id}"
            )
        if expense.is_reconciled:
            raise AlreadyReconciledError("expense", expense_id)
        return expense

    def _require_unlinked_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.store.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError("invoice", invoice_id)
        existing = self.store.link_for_invoice(invoice_id)
        if existing is not None:
            raise AlreadyReconciledError(
                "invoice", invoice_id, f"linked to transaction {existing.bank_transaction_id}"
            )
        if invoice.is_reconciled:
            raise AlreadyReconciledError("invoice", invoice_id)
        return invoice

    def _get_settled(self, ref: SettledRef) -> Optional[SettledRecord]:
        if isinstance(ref, ExpenseRef):
            return self.store.get_expense(ref.id)
        return self.store.get_invoice(ref.id)

    def _linked_elsewhere(self, ref: SettledRef) -> Optional[ReconciliationLink]:
        if isinstance(ref, ExpenseRef):
            return self.store.link_for_expense(ref.id)
        return self.store.link_for_invoice(ref.id)
