"""Tests for the manual multi-select workflow."""

from decimal import Decimal

import pytest

from tradesbook_recon.config import ReconConfig
from tradesbook_recon.ledger import ReconciliationLedger
from tradesbook_recon.matching.aggregator import MultiSelectAggregator
from tradesbook_recon.store.memory import InMemoryRecordStore
from tradesbook_recon.utils.exceptions import NotFoundError, SelectionError

from tests.factories import make_expense, make_invoice, make_txn


@pytest.fixture
def aggregator(store: InMemoryRecordStore) -> MultiSelectAggregator:
    return MultiSelectAggregator.from_store(store, "T1")


def test_residual_zero_when_selection_covers_transaction(
    aggregator: MultiSelectAggregator,
) -> None:
    aggregator.toggle_expense("E1")
    aggregator.toggle_expense("E2")

    assert aggregator.running_total == Decimal("85.50")
    assert aggregator.residual == Decimal("0.00")
    assert aggregator.is_balanced


def test_residual_reports_under_allocation(aggregator: MultiSelectAggregator) -> None:
    aggregator.toggle_expense("E1")

    assert aggregator.running_total == Decimal("40.00")
    assert aggregator.residual == Decimal("45.50")
    assert not aggregator.is_balanced


def test_residual_goes_negative_when_over_allocated(aggregator: MultiSelectAggregator) -> None:
    for expense_id in ("E1", "E2", "E3"):
        aggregator.select_expense(expense_id)

    assert aggregator.residual == Decimal("-100.00")


def test_toggle_twice_restores_selection(aggregator: MultiSelectAggregator) -> None:
    assert aggregator.toggle_expense("E1") is True
    assert aggregator.toggle_expense("E1") is False
    assert aggregator.selected_expense_ids == []
    assert aggregator.running_total == Decimal("0")


def test_select_and_deselect_are_idempotent(aggregator: MultiSelectAggregator) -> None:
    aggregator.select_expense("E1")
    aggregator.select_expense("E1")
    assert aggregator.selected_expense_ids == ["E1"]

    aggregator.deselect_expense("E1")
    aggregator.deselect_expense("E1")
    aggregator.deselect_invoice("nope")
    assert aggregator.selected_count == 0


def test_invoices_count_toward_total(aggregator: MultiSelectAggregator) -> None:
    aggregator.toggle_invoice("I1")
    aggregator.toggle_expense("E1")

    assert aggregator.running_total == Decimal("490.00")
    assert aggregator.selected_invoice_ids == ["I1"]


def test_pool_excludes_reconciled_and_unpaid_records() -> None:
    aggregator = MultiSelectAggregator(
        make_txn("T1", "-10.00"),
        [make_expense("E1", "5.00", is_reconciled=True), make_expense("E2", "5.00")],
        [make_invoice("I1", "5.00", status="sent"), make_invoice("I2", "5.00")],
    )

    assert list(aggregator.expense_pool) == ["E2"]
    assert list(aggregator.invoice_pool) == ["I2"]
    with pytest.raises(SelectionError):
        aggregator.toggle_expense("E1")
    with pytest.raises(SelectionError):
        aggregator.select_invoice("I1")


def test_from_store_unknown_transaction(store: InMemoryRecordStore) -> None:
    with pytest.raises(NotFoundError):
        MultiSelectAggregator.from_store(store, "missing")


def test_commit_requires_a_selection(
    aggregator: MultiSelectAggregator, ledger: ReconciliationLedger
) -> None:
    assert not aggregator.can_commit
    with pytest.raises(SelectionError):
        aggregator.commit(ledger)


def test_commit_allows_mismatched_total_by_default(
    aggregator: MultiSelectAggregator,
    ledger: ReconciliationLedger,
    store: InMemoryRecordStore,
) -> None:
    aggregator.toggle_expense("E1")
    assert aggregator.can_commit

    links = aggregator.commit(ledger)

    assert [link.expense_id for link in links] == ["E1"]
    assert store.get_transaction("T1").is_reconciled
    assert aggregator.selected_count == 0


def test_require_exact_match_blocks_mismatched_commit(store: InMemoryRecordStore) -> None:
    config = ReconConfig()
    config.aggregator.require_exact_match = True
    ledger = ReconciliationLedger(store)
    aggregator = MultiSelectAggregator.from_store(store, "T1", config)

    aggregator.toggle_expense("E1")
    assert not aggregator.can_commit
    with pytest.raises(SelectionError):
        aggregator.commit(ledger)
    assert not store.get_transaction("T1").is_reconciled

    aggregator.toggle_expense("E2")
    assert aggregator.can_commit
    links = aggregator.commit(ledger)
    assert sorted(link.expense_id for link in links) == ["E1", "E2"]
