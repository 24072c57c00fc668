"""
Candidate generation for bank reconciliation.
Proposes at most one single-record match per unreconciled transaction.
"""

from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence
import logging

from ..config import ReconConfig
from ..models.match import SuggestedMatch
from ..models.records import BankTransaction, Expense, Invoice, SettledRecord
from ..store.base import Snapshot
from .confidence import score_confidence
from .strategies import (
    Candidate,
    ExpenseMatchStrategy,
    InvoiceMatchStrategy,
    MatchingStrategy,
)

logger = logging.getLogger(__name__)


class CandidateGenerator:
    """
    Read-only matcher over an explicit record snapshot.

    Holds no mutable state, so one instance may serve concurrent callers.
    Results go stale after any ledger commit; callers simply run it again.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the generator.

        Args:
            config: Application configuration (defaults when omitted)
        """
        self.config = config or ReconConfig()
        self.strategies = self._build_strategies()

    def _build_strategies(self) -> list[tuple[MatchingStrategy, str]]:
        """
        Build one strategy per polarity from configuration.

        Returns:
            List of (strategy, record kind) pairs
        """
        settings = self.config.matching
        tolerance = Decimal(str(settings.amount_tolerance))

        return [
            (
                ExpenseMatchStrategy(
                    window_days=settings.expense_window_days,
                    tolerance=tolerance,
                    vat_rate=Decimal(str(settings.vat_rate)),
                    apply_vat_uplift=settings.apply_vat_uplift,
                ),
                "expense",
            ),
            (
                InvoiceMatchStrategy(
                    window_days=settings.invoice_window_days,
                    tolerance=tolerance,
                    status=settings.eligible_invoice_status,
                    invoice_type=settings.eligible_invoice_type,
                ),
                "invoice",
            ),
        ]

    def generate(
        self,
        transactions: Sequence[BankTransaction],
        expenses: Sequence[Expense],
        invoices: Sequence[Invoice],
    ) -> list[SuggestedMatch]:
        """
        Propose candidate matches for every unreconciled transaction.

        Args:
            transactions: Bank transactions (any state)
            expenses: Expenses (any state)
            invoices: Invoices (any state or status)

        Returns:
            Suggested matches in transaction order, scored
        """
        start_time = datetime.now()
        unreconciled = [t for t in transactions if not t.is_reconciled]
        logger.info(
            f"Generating candidates: {len(unreconciled)} unreconciled txns, "
            f"{len(expenses)} expenses, {len(invoices)} invoices"
        )

        pools: dict[str, list[SettledRecord]] = {}
        for strategy, kind in self.strategies:
            records = expenses if kind == "expense" else invoices
            pools[kind] = strategy.eligible(records)

        suggestions: list[SuggestedMatch] = []
        for txn in unreconciled:
            for strategy, kind in self.strategies:
                if not strategy.applies_to(txn):
                    continue

                candidates = strategy.find_matches(txn, pools[kind])
                if not candidates:
                    continue

                chosen = self._select(txn, candidates)
                match = SuggestedMatch(
                    transaction=txn,
                    record=chosen.record,
                    rule=chosen.rule,
                    day_gap=chosen.day_gap,
                    reason=strategy.describe(txn, chosen),
                )
                match = replace(
                    match, confidence=score_confidence(match, self.config.confidence)
                )
                suggestions.append(match)

                logger.debug(
                    f"Txn {txn.id}: {len(candidates)} candidate(s), chose "
                    f"{kind} {chosen.record.id} via {chosen.rule.value}"
                )

        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Candidate generation complete in {elapsed:.3f}s: "
            f"{len(suggestions)} suggestions"
        )

        return suggestions

    def generate_from_snapshot(self, snapshot: Snapshot) -> list[SuggestedMatch]:
        """Run generation over a store snapshot."""
        return self.generate(snapshot.transactions, snapshot.expenses, snapshot.invoices)

    def _select(self, txn: BankTransaction, candidates: list[Candidate]) -> Candidate:
        """
        Pick one candidate.

        "first" keeps input order. "closest" prefers the smallest day gap,
        then the smallest amount difference, then the lowest id.
        """
        if self.config.matching.tie_break == "closest":
            return min(
                candidates,
                key=lambda c: (
                    c.day_gap,
                    abs(txn.magnitude - c.record.settled_amount),
                    c.record.id,
                ),
            )
        return candidates[0]


def generate_candidates(
    transactions: Sequence[BankTransaction],
    expenses: Sequence[Expense],
    invoices: Sequence[Invoice],
    config: Optional[ReconConfig] = None,
) -> list[SuggestedMatch]:
    """Propose scored candidate matches for unreconciled transactions."""
    return CandidateGenerator(config).generate(transactions, expenses, invoices)
