"""Tests for the command-line interface."""

from pathlib import Path
import logging

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from tradesbook_recon.cli import main
from tradesbook_recon.utils.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logging.getLogger(PACKAGE_LOGGER).handlers = []


@pytest.fixture
def files(tmp_path: Path) -> dict[str, Path]:
    txns = tmp_path / "txns.csv"
    txns.write_text(
        "id,date,description,amount\n"
        "T1,2024-03-10,SCREWFIX,-42.99\n"
        "T2,2024-03-10,TOOLSTATION,-120.00\n"
        "T3,2024-03-10,BACS SMITH,450.00\n"
        "T4,2024-03-10,UNKNOWN,-7.00\n"
    )
    expenses = tmp_path / "expenses.csv"
    expenses.write_text(
        "id,vendor,amount,date\n"
        "E1,Screwfix,42.99,2024-03-09\n"
        "E2,Toolstation,100.00,2024-03-09\n"
    )
    invoices = tmp_path / "invoices.csv"
    invoices.write_text(
        "id,reference_number,total,date,status\n"
        "I1,1042,450.00,2024-02-20,paid\n"
    )
    return {"txns": txns, "expenses": expenses, "invoices": invoices}


def _args(files: dict[str, Path], *extra: str) -> list[str]:
    return [
        "suggest",
        str(files["txns"]),
        "-e",
        str(files["expenses"]),
        "-i",
        str(files["invoices"]),
        *extra,
    ]


def test_suggest_lists_matches(files) -> None:
    result = CliRunner().invoke(main, _args(files))

    assert result.exit_code == 0, result.output
    assert "Suggested Matches" in result.output
    assert "Reconciliation Summary" in result.output


def test_accept_high_commits_and_reports(files, tmp_path: Path) -> None:
    output = tmp_path / "report.xlsx"

    result = CliRunner().invoke(main, _args(files, "--accept-high", "-o", str(output)))

    assert result.exit_code == 0, result.output
    assert "Accepted 1 high-confidence match(es)" in result.output
    wb = load_workbook(output)
    links = wb["Reconciled Links"]
    assert links.cell(row=2, column=2).value == "T1"
    unmatched = wb["Unmatched"]
    assert unmatched.cell(row=2, column=1).value == "T4"


def test_invalid_vat_rate(files) -> None:
    result = CliRunner().invoke(main, _args(files, "--vat-rate", "20"))
    assert result.exit_code != 0
    assert "VAT rate" in result.output


def test_bad_config_exits_with_error(files, tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("matching:\n  tie_break: random\n")

    result = CliRunner().invoke(main, _args(files, "-c", str(config)))

    assert result.exit_code == 1
    assert "Error" in result.output


def test_unknown_log_level_exits_with_error(files, tmp_path: Path) -> None:
    config = tmp_path / "config.yaml"
    config.write_text("logging:\n  level: chatty\n")

    result = CliRunner().invoke(main, _args(files, "-c", str(config)))

    assert result.exit_code == 1
    assert "Unknown log level" in result.output


def test_init_config(tmp_path: Path) -> None:
    output = tmp_path / "config.yaml"

    result = CliRunner().invoke(main, ["init-config", "-o", str(output)])

    assert result.exit_code == 0
    assert output.exists()
    assert "tie_break" in output.read_text()
