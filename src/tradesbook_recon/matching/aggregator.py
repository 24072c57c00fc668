"""
Manual many-to-one matching.

Backs the "match multiple receipts to one transaction" workflow: the
operator toggles expenses and invoices in and out of a selection while the
running total and residual update, then commits the selection through the
ledger.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Sequence
import logging

from ..config import ReconConfig
from ..models.records import BankTransaction, Expense, Invoice, ReconciliationLink
from ..queries import eligible_invoices, unreconciled_expenses
from ..utils.exceptions import NotFoundError, SelectionError

if TYPE_CHECKING:
    from ..ledger import ReconciliationLedger
    from ..store.base import RecordStore

logger = logging.getLogger(__name__)


class MultiSelectAggregator:
    """Selection state for one target transaction."""

    def __init__(
        self,
        transaction: BankTransaction,
        expenses: Sequence[Expense],
        invoices: Sequence[Invoice],
        config: Optional[ReconConfig] = None,
    ):
        """
        Initialize with the target transaction and the record pools.

        Args:
            transaction: Transaction the selection will settle
            expenses: Expenses (only unreconciled ones are selectable)
            invoices: Invoices (only paid, unlinked ones are selectable)
            config: Application configuration (defaults when omitted)
        """
        self.config = config or ReconConfig()
        self.transaction = transaction
        self.tolerance = Decimal(str(self.config.matching.amount_tolerance))
        self.require_exact_match = self.config.aggregator.require_exact_match

        matching = self.config.matching
        self.expense_pool: dict[str, Expense] = {
            e.id: e for e in unreconciled_expenses(expenses)
        }
        self.invoice_pool: dict[str, Invoice] = {
            i.id: i
            for i in eligible_invoices(
                invoices,
                status=matching.eligible_invoice_status,
                invoice_type=matching.eligible_invoice_type,
            )
        }

        # dicts as ordered sets
        self._expense_ids: dict[str, None] = {}
        self._invoice_ids: dict[str, None] = {}

    @classmethod
    def from_store(
        cls,
        store: "RecordStore",
        transaction_id: str,
        config: Optional[ReconConfig] = None,
    ) -> "MultiSelectAggregator":
        """Open a selection for a stored transaction."""
        txn = store.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError("transaction", transaction_id)
        return cls(txn, store.list_expenses(), store.list_invoices(), config)

    # Selection

    @property
    def selected_expense_ids(self) -> list[str]:
        return list(self._expense_ids)

    @property
    def selected_invoice_ids(self) -> list[str]:
        return list(self._invoice_ids)

    @property
    def selected_count(self) -> int:
        return len(self._expense_ids) + len(self._invoice_ids)

    def select_expense(self, expense_id: str) -> None:
        if expense_id not in self.expense_pool:
            raise SelectionError(f"Expense {expense_id} is not available for matching")
        self._expense_ids[expense_id] = None

    def deselect_expense(self, expense_id: str) -> None:
        self._expense_ids.pop(expense_id, None)

    def toggle_expense(self, expense_id: str) -> bool:
        """Flip an expense in or out of the selection; returns whether it is now selected."""
        if expense_id in self._expense_ids:
            self.deselect_expense(expense_id)
            return False
        self.select_expense(expense_id)
        return True

    def select_invoice(self, invoice_id: str) -> None:
        if invoice_id not in self.invoice_pool:
            raise SelectionError(f"Invoice {invoice_id} is not available for matching")
        self._invoice_ids[invoice_id] = None

    def deselect_invoice(self, invoice_id: str) -> None:
        self._invoice_ids.pop(invoice_id, None)

    def toggle_invoice(self, invoice_id: str) -> bool:
        """Flip an invoice in or out of the selection; returns whether it is now selected."""
        if invoice_id in self._invoice_ids:
            self.deselect_invoice(invoice_id)
            return False
        self.select_invoice(invoice_id)
        return True

    def clear(self) -> None:
        self._expense_ids.clear()
        self._invoice_ids.clear()

    # Totals

    @property
    def running_total(self) -> Decimal:
        """Sum of the selected expense amounts and invoice totals."""
        total = sum(
            (self.expense_pool[e].amount for e in self._expense_ids), Decimal("0")
        )
        total += sum(
            (self.invoice_pool[i].total for i in self._invoice_ids), Decimal("0")
        )
        return total

    @property
    def residual(self) -> Decimal:
        """Transaction magnitude minus the running total; negative means over-allocated."""
        return self.transaction.magnitude - self.running_total

    @property
    def is_balanced(self) -> bool:
        return abs(self.residual) < self.tolerance

    @property
    def can_commit(self) -> bool:
        if self.selected_count == 0:
            return False
        return self.is_balanced or not self.require_exact_match

    def commit(self, ledger: "ReconciliationLedger") -> list[ReconciliationLink]:
        """
        Reconcile the transaction against the current selection.

        Raises:
            SelectionError: If nothing is selected, or the totals differ while
                require_exact_match is set
        """
        if self.selected_count == 0:
            raise SelectionError("Select at least one expense or invoice to reconcile")
        if self.require_exact_match and not self.is_balanced:
            raise SelectionError(
                f"Selected total {self.running_total} does not match transaction "
                f"amount {self.transaction.magnitude} (residual {self.residual})"
            )

        if not self.is_balanced:
            logger.warning(
                f"Committing transaction {self.transaction.id} with residual {self.residual}"
            )

        links = ledger.reconcile_multi(
            self.transaction.id,
            expense_ids=self.selected_expense_ids,
            invoice_ids=self.selected_invoice_ids,
        )
        self.clear()
        return links
