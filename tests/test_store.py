"""Tests for the in-memory record store."""

from dataclasses import replace
from decimal import Decimal

import pytest

from tradesbook_recon.models.records import ExpenseRef, ReconciliationLink
from tradesbook_recon.store.memory import InMemoryRecordStore


def _link(txn_id: str = "T1", expense_id: str = "E1") -> ReconciliationLink:
    return ReconciliationLink(
        bank_transaction_id=txn_id,
        settled=ExpenseRef(expense_id),
        matched_amount=Decimal("40.00"),
    )


def test_snapshot_keeps_insertion_order(store: InMemoryRecordStore) -> None:
    snapshot = store.snapshot()
    assert [t.id for t in snapshot.transactions] == ["T1", "T2", "T3"]
    assert [e.id for e in snapshot.expenses] == ["E1", "E2", "E3"]
    assert [i.id for i in snapshot.invoices] == ["I1"]


def test_link_lookups(store: InMemoryRecordStore) -> None:
    link = _link()
    store.add_link(link)

    assert store.links_for_transaction("T1") == [link]
    assert store.link_for_expense("E1") == link
    assert store.link_for_expense("E2") is None
    assert store.link_for_invoice("I1") is None

    store.delete_link(link.id)
    store.delete_link(link.id)
    assert store.list_links() == []


def test_duplicate_link_id_rejected(store: InMemoryRecordStore) -> None:
    link = _link()
    store.add_link(link)
    with pytest.raises(ValueError):
        store.add_link(link)


def test_transaction_rolls_back_on_error(store: InMemoryRecordStore) -> None:
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.add_link(_link())
            store.save_expense(replace(store.get_expense("E1"), is_reconciled=True))
            raise RuntimeError("boom")

    assert store.list_links() == []
    assert not store.get_expense("E1").is_reconciled


def test_nested_transaction_rolls_back_to_outermost(store: InMemoryRecordStore) -> None:
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.add_link(_link("T1", "E1"))
            with store.transaction():
                store.add_link(_link("T2", "E2"))
            raise RuntimeError("boom")

    assert store.list_links() == []


def test_transaction_commits_on_success(store: InMemoryRecordStore) -> None:
    with store.transaction():
        store.add_link(_link())
    assert len(store.list_links()) == 1
