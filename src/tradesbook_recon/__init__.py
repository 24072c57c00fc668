"""Bank reconciliation core for a trades back-office application."""

from .config import ReconConfig, load_config
from .ledger import ReconciliationLedger
from .matching import (
    CandidateGenerator,
    MultiSelectAggregator,
    generate_candidates,
    score_confidence,
)
from .models import (
    BankTransaction,
    Confidence,
    Expense,
    Invoice,
    MatchRule,
    ReconciliationLink,
    SuggestedMatch,
)
from .store import InMemoryRecordStore, RecordStore

__version__ = "0.1.0"

__all__ = [
    "ReconConfig",
    "load_config",
    "ReconciliationLedger",
    "CandidateGenerator",
    "MultiSelectAggregator",
    "generate_candidates",
    "score_confidence",
    "BankTransaction",
    "Confidence",
    "Expense",
    "Invoice",
    "MatchRule",
    "ReconciliationLink",
    "SuggestedMatch",
    "InMemoryRecordStore",
    "RecordStore",
]
