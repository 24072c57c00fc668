"""Shared fixtures."""

import pytest

from tradesbook_recon.ledger import ReconciliationLedger
from tradesbook_recon.store.memory import InMemoryRecordStore

from tests.factories import make_expense, make_invoice, make_txn


@pytest.fixture
def store() -> InMemoryRecordStore:
    """Store with two outflows, one inflow, three expenses and one paid invoice."""
    return InMemoryRecordStore(
        transactions=[
            make_txn("T1", "-85.50", description="TRADE COUNTER"),
            make_txn("T2", "-120.00", description="TOOLSTATION"),
            make_txn("T3", "450.00", description="BACS SMITH"),
        ],
        expenses=[
            make_expense("E1", "40.00"),
            make_expense("E2", "45.50"),
            make_expense("E3", "100.00", vendor="Toolstation"),
        ],
        invoices=[make_invoice("I1", "450.00")],
    )


@pytest.fixture
def ledger(store: InMemoryRecordStore) -> ReconciliationLedger:
    return ReconciliationLedger(store)
