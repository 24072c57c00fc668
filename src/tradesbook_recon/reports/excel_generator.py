"""
Excel export of reconciliation suggestions and committed links.
Creates multi-sheet workbooks with formatted output.
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence
import logging

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Border, Side
from openpyxl.worksheet.worksheet import Worksheet

from ..config import ReconConfig, SheetConfig
from ..models.match import Confidence, ReconciliationStats, SuggestedMatch
from ..models.records import BankTransaction, ReconciliationLink
from ..utils.exceptions import ReportGenerationError

logger = logging.getLogger(__name__)

# Style definitions
HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True)
HIGH_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
MEDIUM_FILL = PatternFill(start_color="FFEB9C", end_color="FFEB9C", fill_type="solid")
LOW_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

CONFIDENCE_FILLS = {
    Confidence.HIGH: HIGH_FILL,
    Confidence.MEDIUM: MEDIUM_FILL,
    Confidence.LOW: LOW_FILL,
}


class ExcelReportGenerator:
    """Writes suggestions, unmatched transactions and links to a workbook."""

    def __init__(self, config: Optional[ReconConfig] = None):
        """
        Initialize the report generator.

        Args:
            config: Application configuration
        """
        self.config = config or ReconConfig()
        self.sheet_config = self.config.output.sheets

    def default_output_path(self, directory: Path = Path(".")) -> Path:
        """Build an output filename from the configured template."""
        now = datetime.now()
        template = self.config.output.excel.filename_template
        if self.config.output.excel.include_timestamp:
            name = template.format(date=now.strftime("%Y%m%d"), time=now.strftime("%H%M%S"))
        else:
            name = template.replace("_{date}", "").replace("_{time}", "").format(date="", time="")
        return directory / name

    def generate_report(
        self,
        stats: ReconciliationStats,
        suggestions: Sequence[SuggestedMatch],
        unmatched: Sequence[BankTransaction],
        links: Sequence[ReconciliationLink],
        output_path: Path,
    ) -> Path:
        """
        Generate the workbook.

        Args:
            stats: Dashboard counts
            suggestions: Scored candidate matches
            unmatched: Unreconciled transactions with no suggestion
            links: Committed reconciliation links
            output_path: Path for output file

        Returns:
            Path to generated report

        Raises:
            ReportGenerationError: If the workbook cannot be written
        """
        logger.info(f"Generating Excel report: {output_path}")

        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        sheets = self.sheet_config
        if sheets.summary.enabled:
            self._create_summary_sheet(wb, sheets.summary, stats, suggestions)
        if sheets.suggestions.enabled:
            self._create_suggestions_sheet(wb, sheets.suggestions, suggestions)
        if sheets.unmatched.enabled:
            self._create_unmatched_sheet(wb, sheets.unmatched, unmatched)
        if sheets.links.enabled:
            self._create_links_sheet(wb, sheets.links, links)

        if not wb.worksheets:
            raise ReportGenerationError("All report sheets are disabled")

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ReportGenerationError(f"Failed to write report {output_path}: {e}") from e

        logger.info(f"Report saved: {output_path}")
        return output_path

    def _create_summary_sheet(
        self,
        wb: Workbook,
        sheet: SheetConfig,
        stats: ReconciliationStats,
        suggestions: Sequence[SuggestedMatch],
    ) -> None:
        """Create the summary sheet with key counts."""
        ws = wb.create_sheet(sheet.name)

        ws["A1"] = "Bank Reconciliation Summary"
        ws["A1"].font = Font(size=16, bold=True)
        ws.merge_cells("A1:C1")

        ws["A2"] = "Generated At:"
        ws["B2"] = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        ws["A3"] = "Config File:"
        ws["B3"] = self.config.config_file_path or "Default"

        ws["A5"] = "Transactions"
        ws["A5"].font = Font(bold=True)
        count_data = [
            ("Total:", stats.total),
            ("Reconciled:", stats.reconciled),
            ("Pending:", stats.pending),
            ("Suggested Matches:", stats.suggested),
            ("Reconciled Rate:", f"{stats.reconciled_rate:.1f}%"),
        ]
        for i, (label, value) in enumerate(count_data, start=6):
            ws[f"A{i}"] = label
            ws[f"B{i}"] = value

        ws["A12"] = "Suggestions by Confidence"
        ws["A12"].font = Font(bold=True)
        for i, level in enumerate(Confidence, start=13):
            ws[f"A{i}"] = level.value
            ws[f"B{i}"] = sum(1 for s in suggestions if s.confidence == level)

        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 30

    def _create_suggestions_sheet(
        self, wb: Workbook, sheet: SheetConfig, suggestions: Sequence[SuggestedMatch]
    ) -> None:
        """Create the suggested matches sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            [
                "Transaction ID",
                "Transaction Date",
                "Description",
                "Amount",
                "Record Type",
                "Record ID",
                "Record",
                "Record Date",
                "Record Amount",
                "Variance",
                "Rule",
                "Days Apart",
                "Confidence",
                "Reason",
            ],
        )

        for row_num, match in enumerate(suggestions, start=2):
            txn = match.transaction
            record = match.record
            row_data = [
                txn.id,
                txn.date,
                txn.description,
                float(txn.amount),
                record.kind,
                record.id,
                record.label,
                record.date,
                float(record.settled_amount),
                float(match.amount_variance),
                match.rule.value,
                match.day_gap,
                match.confidence.value if match.confidence else "",
                match.reason,
            ]
            fill = CONFIDENCE_FILLS.get(match.confidence) if match.confidence else None
            self._write_row(ws, row_num, row_data, fill)

        self._auto_fit_columns(ws)

    def _create_unmatched_sheet(
        self, wb: Workbook, sheet: SheetConfig, unmatched: Sequence[BankTransaction]
    ) -> None:
        """Create the sheet of unreconciled transactions without a suggestion."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(ws, ["Transaction ID", "Date", "Description", "Amount", "Balance"])

        for row_num, txn in enumerate(unmatched, start=2):
            row_data = [
                txn.id,
                txn.date,
                txn.description,
                float(txn.amount),
                float(txn.balance) if txn.balance is not None else "",
            ]
            self._write_row(ws, row_num, row_data, LOW_FILL)

        self._auto_fit_columns(ws)

    def _create_links_sheet(
        self, wb: Workbook, sheet: SheetConfig, links: Sequence[ReconciliationLink]
    ) -> None:
        """Create the committed links sheet."""
        ws = wb.create_sheet(sheet.name)
        self._write_headers(
            ws,
            ["Link ID", "Transaction ID", "Record Type", "Record ID", "Matched Amount", "Created At"],
        )

        for row_num, link in enumerate(links, start=2):
            row_data = [
                link.id,
                link.bank_transaction_id,
                link.settled.kind,
                link.settled.id,
                float(link.matched_amount),
                link.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            ]
            self._write_row(ws, row_num, row_data, None)

        self._auto_fit_columns(ws)

    def _write_headers(self, ws: Worksheet, headers: list[str]) -> None:
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.fill = HEADER_FILL
            cell.font = HEADER_FONT
            cell.border = THIN_BORDER

    def _write_row(
        self,
        ws: Worksheet,
        row_num: int,
        values: list[Any],
        fill: Optional[PatternFill],
    ) -> None:
        for col, value in enumerate(values, start=1):
            cell = ws.cell(row=row_num, column=col, value=value)
            cell.border = THIN_BORDER
            if fill is not None:
                cell.fill = fill

    def _auto_fit_columns(self, ws: Worksheet) -> None:
        """Auto-fit column widths based on content."""
        for column_cells in ws.columns:
            column = column_cells[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column_cells if cell.value is not None),
                default=0,
            )
            ws.column_dimensions[column].width = min(max_length + 2, 50)
