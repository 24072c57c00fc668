"""Candidate generation, confidence scoring and manual multi-select."""

from .engine import CandidateGenerator, generate_candidates
from .confidence import classify, score_confidence
from .aggregator import MultiSelectAggregator
from .strategies import (
    Candidate,
    MatchingStrategy,
    ExpenseMatchStrategy,
    InvoiceMatchStrategy,
)

__all__ = [
    "CandidateGenerator",
    "generate_candidates",
    "classify",
    "score_confidence",
    "MultiSelectAggregator",
    "Candidate",
    "MatchingStrategy",
    "ExpenseMatchStrategy",
    "InvoiceMatchStrategy",
]
