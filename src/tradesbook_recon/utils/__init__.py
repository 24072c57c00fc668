"""Utility modules."""

from .exceptions import (
    ReconciliationError,
    NotFoundError,
    AlreadyReconciledError,
    PartialCommitFailure,
    SelectionError,
    ConfigurationError,
    SnapshotLoadError,
    ReportGenerationError,
)
from .logging_config import setup_logging

__all__ = [
    "ReconciliationError",
    "NotFoundError",
    "AlreadyReconciledError",
    "PartialCommitFailure",
    "SelectionError",
    "ConfigurationError",
    "SnapshotLoadError",
    "ReportGenerationError",
    "setup_logging",
]
