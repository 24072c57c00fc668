"""Tests for configuration loading."""

from pathlib import Path

import pytest

from tradesbook_recon.config import (
    ReconConfig,
    generate_default_config,
    get_default_config,
    load_config,
)
from tradesbook_recon.utils.exceptions import ConfigurationError


def test_defaults() -> None:
    config = load_config(None)

    assert config.matching.amount_tolerance == 0.01
    assert config.matching.expense_window_days == 7
    assert config.matching.invoice_window_days == 30
    assert config.matching.vat_rate == 0.20
    assert config.matching.tie_break == "first"
    assert config.confidence.expense_high_days == 2
    assert config.confidence.invoice_medium_days == 14
    assert config.aggregator.require_exact_match is False
    assert config.config_file_path is None


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.yaml")
    assert config == ReconConfig()


def test_yaml_overrides_are_merged(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "matching:\n"
        "  tie_break: closest\n"
        "  vat_rate: 0.05\n"
        "output:\n"
        "  sheets:\n"
        "    unmatched:\n"
        "      enabled: false\n"
    )

    config = load_config(path)

    assert config.matching.tie_break == "closest"
    assert config.matching.vat_rate == 0.05
    # untouched siblings keep their defaults
    assert config.matching.expense_window_days == 7
    assert config.output.sheets.unmatched.enabled is False
    assert config.output.sheets.unmatched.name == "Unmatched"
    assert config.config_file_path == str(path)


@pytest.mark.parametrize(
    "content",
    [
        "matching: [unclosed",
        "- just\n- a list\n",
        "matching:\n  tie_break: random\n",
        "confidence:\n  expense_high_days: soon\n",
        "matching:\n  vat_rate: 1.5\n",
        "matching:\n  amount_tolerance: -1\n",
        "matching:\n  expense_window_days: -3\n",
    ],
)
def test_invalid_files_raise_configuration_error(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content)

    with pytest.raises(ConfigurationError):
        load_config(path)


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert load_config(path).matching == ReconConfig().matching


def test_generated_config_loads_back(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.yaml"
    generate_default_config(path)

    assert path.read_text().startswith("#")
    loaded = load_config(path)
    assert loaded.model_dump(exclude={"config_file_path"}) == get_default_config()
