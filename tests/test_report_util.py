from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from xlsrpt.report.errors import ReportSheetNameError  # noqa: E402
from xlsrpt.report.util import (  # noqa: E402
    convert_nan_inf_to_str,
    normalize_report_path,
    validate_sheet_name,
)


@pytest.fixture
def l_warnings() -> Iterator[list[str]]:
    l_msgs: list[str] = []
    n_handler = logger.add(lambda msg: l_msgs.append(str(msg)), level="WARNING", format="{message}")
    yield l_msgs
    logger.remove(n_handler)


@pytest.mark.parametrize(
    ("file_out", "title", "expected"),
    [
        (None, "Sales", Path("Sales.xlsx")),
        ("", "Sales", Path("Sales.xlsx")),
        ("out/report.xlsx", "", Path("out/report.xlsx")),
        ("out/report.XLSX", "", Path("out/report.XLSX")),
        ("out/report", "", Path("out/report.xlsx")),
        ("out/report.2024", "", Path("out/report.2024.xlsx")),
        ("out/report.csv", "", Path("out/report.csv.xlsx")),
    ],
)
def test_normalize_report_path(file_out: str | None, title: str, expected: Path) -> None:
    assert normalize_report_path(file_out, title=title) == expected


def test_xls_suffix_is_kept_with_warning(l_warnings: list[str]) -> None:
    assert normalize_report_path("legacy.xls") == Path("legacy.xls")
    assert len(l_warnings) == 1
    assert "should be .xlsx" in l_warnings[0]


@pytest.mark.parametrize(
    "name",
    ["", "   ", "x" * 32, "a/b", "a[1]", "what?", "'quoted'", "tail'"],
)
def test_invalid_sheet_names(name: str) -> None:
    with pytest.raises(ReportSheetNameError):
        validate_sheet_name(name)


def test_duplicate_sheet_name_is_case_insensitive() -> None:
    assert validate_sheet_name("Sales", ["Costs"]) == "Sales"
    with pytest.raises(ReportSheetNameError, match="already used"):
        validate_sheet_name("SALES", ["Sales"])


def test_max_length_sheet_name_is_valid() -> None:
    assert validate_sheet_name("x" * 31) == "x" * 31


@pytest.mark.parametrize(
    ("value", "expected"),
    [(float("nan"), "NaN"), (float("inf"), "Inf"), (float("-inf"), "-Inf")],
)
def test_convert_nan_inf_to_str(value: float, expected: str) -> None:
    assert convert_nan_inf_to_str(value) == expected


def test_convert_nan_inf_rejects_finite() -> None:
    with pytest.raises(ValueError):
        convert_nan_inf_to_str(1.0)
