"""Custom exceptions for the reconciliation core."""


class ReconciliationError(Exception):
    """Base exception for reconciliation errors."""

    pass


class NotFoundError(ReconciliationError):
    """Referenced transaction, expense or invoice does not exist."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class AlreadyReconciledError(ReconciliationError):
    """Record is already linked to a bank transaction."""

    def __init__(self, kind: str, record_id: str, detail: str = ""):
        self.kind = kind
        self.record_id = record_id
        message = f"{kind} already reconciled: {record_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class PartialCommitFailure(ReconciliationError):
    """Store failed mid-commit; all changes were rolled back."""

    pass


class SelectionError(ReconciliationError):
    """Invalid multi-select selection."""

    pass


class ConfigurationError(ReconciliationError):
    """Error in configuration."""

    pass


class SnapshotLoadError(ReconciliationError):
    """Error loading a record snapshot from CSV."""

    pass


class ReportGenerationError(ReconciliationError):
    """Error generating Excel report."""

    pass
