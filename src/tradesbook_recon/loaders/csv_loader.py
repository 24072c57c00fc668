"""
CSV snapshot provider.
Reads transactions, expenses and invoices exported by the host application.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar
import logging

import pandas as pd

from ..config import ReconConfig
from ..models.records import BankTransaction, Expense, Invoice
from ..store.base import Snapshot
from ..utils.exceptions import SnapshotLoadError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSACTION_COLUMNS = ("id", "date", "description", "amount")
EXPENSE_COLUMNS = ("id", "vendor", "amount", "date")
INVOICE_COLUMNS = ("id", "reference_number", "total", "date", "status")

TRUE_VALUES = {"true", "1", "yes", "y", "t"}


class CsvSnapshotLoader:
    """
    Loads the three record kinds from CSV files.

    Rows that cannot be parsed are logged and skipped; a missing file or
    missing required column fails the whole load.
    """

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the loader with configuration.

        Args:
            config: Application configuration object
        """
        self.config = config or ReconConfig()
        self.csv_config = self.config.input.csv

    def load(
        self,
        transactions_path: Path,
        expenses_path: Optional[Path] = None,
        invoices_path: Optional[Path] = None,
    ) -> Snapshot:
        """Load a snapshot; expense and invoice files are optional."""
        return Snapshot(
            transactions=self.load_transactions(transactions_path),
            expenses=self.load_expenses(expenses_path) if expenses_path else [],
            invoices=self.load_invoices(invoices_path) if invoices_path else [],
        )

    def load_transactions(self, file_path: Path) -> list[BankTransaction]:
        df = self._read(file_path, TRANSACTION_COLUMNS)
        return self._process_dataframe(df, self._transaction_row, file_path)

    def load_expenses(self, file_path: Path) -> list[Expense]:
        df = self._read(file_path, EXPENSE_COLUMNS)
        return self._process_dataframe(df, self._expense_row, file_path)

    def load_invoices(self, file_path: Path) -> list[Invoice]:
        df = self._read(file_path, INVOICE_COLUMNS)
        return self._process_dataframe(df, self._invoice_row, file_path)

    def _read(self, file_path: Path, required: tuple[str, ...]) -> pd.DataFrame:
        """
        Read a CSV file as strings and check its header.

        Raises:
            SnapshotLoadError: If the file cannot be read or lacks a column
        """
        logger.info(f"Reading CSV file: {file_path}")
        try:
            df = pd.read_csv(
                file_path,
                encoding=self.csv_config.encoding,
                delimiter=self.csv_config.delimiter,
                dtype=str,
                keep_default_na=False,
            )
        except Exception as e:
            logger.error(f"Failed to read CSV file: {e}")
            raise SnapshotLoadError(f"Failed to read CSV file {file_path}: {e}") from e

        df.columns = [str(c).strip().lower() for c in df.columns]
        missing = [c for c in required if c not in df.columns]
        if missing:
            raise SnapshotLoadError(
                f"{file_path.name}: missing required column(s): {', '.join(missing)}"
            )
        return df

    def _process_dataframe(
        self,
        df: pd.DataFrame,
        convert: Callable[[pd.Series], T],
        file_path: Path,
    ) -> list[T]:
        records: list[T] = []
        for idx, row in df.iterrows():
            try:
                records.append(convert(row))
            except (ValueError, InvalidOperation) as e:
                logger.warning(f"{file_path.name} row {idx}: {e}, skipping")
                continue

        logger.info(f"Loaded {len(records)} of {len(df)} rows from {file_path.name}")
        return records

    def _transaction_row(self, row: pd.Series) -> BankTransaction:
        balance = self._text(row, "balance")
        return BankTransaction(
            id=self._required(row, "id"),
            date=self._parse_date(self._required(row, "date")),
            description=self._text(row, "description"),
            amount=self._parse_amount(self._required(row, "amount")),
            balance=self._parse_amount(balance) if balance else None,
            is_reconciled=self._parse_bool(self._text(row, "is_reconciled")),
        )

    def _expense_row(self, row: pd.Series) -> Expense:
        amount = self._parse_amount(self._required(row, "amount"))
        if amount < 0:
            raise ValueError(f"expense amount must be positive, got {amount}")
        return Expense(
            id=self._required(row, "id"),
            vendor=self._text(row, "vendor"),
            amount=amount,
            date=self._parse_date(self._required(row, "date")),
            is_reconciled=self._parse_bool(self._text(row, "is_reconciled")),
            category=self._text(row, "category"),
            description=self._text(row, "description"),
        )

    def _invoice_row(self, row: pd.Series) -> Invoice:
        return Invoice(
            id=self._required(row, "id"),
            reference_number=self._required(row, "reference_number"),
            total=self._parse_amount(self._required(row, "total")),
            date=self._parse_date(self._required(row, "date")),
            status=self._required(row, "status").lower(),
            type=(self._text(row, "type") or "invoice").lower(),
            is_reconciled=self._parse_bool(self._text(row, "is_reconciled")),
        )

    @staticmethod
    def _text(row: pd.Series, column: str) -> str:
        value: Any = row.get(column, "")
        if pd.isna(value):
            return ""
        return str(value).strip()

    def _required(self, row: pd.Series, column: str) -> str:
        value = self._text(row, column)
        if not value:
            raise ValueError(f"empty {column}")
        return value

    def _parse_date(self, value: str) -> date:
        """
        Parse a date using the configured format, falling back to pandas.

        Timestamps are truncated to their calendar date.
        """
        try:
            return datetime.strptime(value, self.csv_config.date_format).date()
        except ValueError:
            parsed = pd.to_datetime(value, errors="coerce")
            if pd.isna(parsed):
                raise ValueError(f"invalid date {value!r}")
            return parsed.date()

    @staticmethod
    def _parse_amount(value: str) -> Decimal:
        """Parse an amount, tolerating currency symbols and thousands separators."""
        cleaned = value.replace("£", "").replace("$", "").replace(",", "").strip()
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"invalid amount {value!r}")

    @staticmethod
    def _parse_bool(value: str) -> bool:
        return value.strip().lower() in TRUE_VALUES
