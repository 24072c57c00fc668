"""Record snapshot providers."""

from .csv_loader import CsvSnapshotLoader

__all__ = ["CsvSnapshotLoader"]
