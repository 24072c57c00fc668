"""Record kinds held by the record store and the reconciliation link."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
import uuid


@dataclass(frozen=True)
class BankTransaction:
    """
    A single bank statement line.

    Amounts are signed: negative is money out, positive is money in.
    Only the ledger changes ``is_reconciled``.
    """

    id: str
    date: date
    description: str
    amount: Decimal
    balance: Optional[Decimal] = None
    is_reconciled: bool = False

    @property
    def is_outflow(self) -> bool:
        return self.amount < 0

    @property
    def is_inflow(self) -> bool:
        return self.amount > 0

    @property
    def magnitude(self) -> Decimal:
        return abs(self.amount)


@dataclass(frozen=True)
class Expense:
    """A recorded bill or receipt. ``amount`` is always positive."""

    id: str
    vendor: str
    amount: Decimal
    date: date
    is_reconciled: bool = False
    category: str = ""
    description: str = ""

    kind = "expense"

    @property
    def settled_amount(self) -> Decimal:
        return self.amount

    @property
    def label(self) -> str:
        return self.vendor


@dataclass(frozen=True)
class Invoice:
    """
    An invoice raised to a customer.

    ``date`` is the last-updated date, which for a paid invoice is the
    date payment was recorded.
    """

    id: str
    reference_number: str
    total: Decimal
    date: date
    status: str = "draft"
    type: str = "invoice"
    is_reconciled: bool = False

    kind = "invoice"

    @property
    def settled_amount(self) -> Decimal:
        return self.total

    @property
    def label(self) -> str:
        return f"Invoice #{self.reference_number}"

    def is_eligible(self, status: str = "paid", invoice_type: str = "invoice") -> bool:
        """Paid invoices (not quotes) may settle an inflow."""
        return self.status == status and self.type == invoice_type


SettledRecord = Union[Expense, Invoice]


@dataclass(frozen=True)
class ExpenseRef:
    """Reference to the expense settled by a link."""

    id: str
    kind = "expense"


@dataclass(frozen=True)
class InvoiceRef:
    """Reference to the invoice settled by a link."""

    id: str
    kind = "invoice"


SettledRef = Union[ExpenseRef, InvoiceRef]


def ref_for(record: SettledRecord) -> SettledRef:
    """Build the link reference for an expense or invoice."""
    if isinstance(record, Expense):
        return ExpenseRef(record.id)
    if isinstance(record, Invoice):
        return InvoiceRef(record.id)
    raise TypeError(f"Not a settled record: {record!r}")


def _new_link_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class ReconciliationLink:
    """
    Join between one bank transaction and exactly one settled record.

    A transaction may own many links (a split match); an expense or
    invoice appears in at most one.
    """

    bank_transaction_id: str
    settled: SettledRef
    matched_amount: Decimal
    id: str = field(default_factory=_new_link_id)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def expense_id(self) -> Optional[str]:
        return self.settled.id if isinstance(self.settled, ExpenseRef) else None

    @property
    def invoice_id(self) -> Optional[str]:
        return self.settled.id if isinstance(self.settled, InvoiceRef) else None
