from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from xlsrpt.report.cells import (  # noqa: E402
    CellInt,
    CellKind,
    CellNumeric,
    CellPercent,
    CellStr,
)
from xlsrpt.report.infer import classify_token, infer_cell  # noqa: E402


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("42", CellInt(42)),
        ("007", CellInt(7)),
        ("3.14", CellNumeric(3.14)),
        (".5", CellNumeric(0.5)),
        ("7.", CellNumeric(7.0)),
    ],
)
def test_plain_numbers(token: str, expected: object) -> None:
    assert infer_cell(token) == expected


@pytest.mark.parametrize(
    ("token", "n_expected"),
    [
        ("12.5%", 0.125),
        ("5%", 0.05),
        ("100%", 1.0),
        ("0.0%", 0.0),
    ],
)
def test_percent_is_stored_as_fraction(token: str, n_expected: float) -> None:
    cls_cell = infer_cell(token)
    assert isinstance(cls_cell, CellPercent)
    assert cls_cell.value == pytest.approx(n_expected)


@pytest.mark.parametrize(
    "token",
    [
        "150.0%",  # fraction above 1.0
        "100.1%",
        "12.5.3",  # two separators
        "%5",  # percent sign not last
        "5%%",
        "abc",
        "-5",  # sign is not in the numeric alphabet
        "1,000",
        " 12",
        "",
        ".",
        "%",
        ".%",
    ],
)
def test_rejected_tokens_fall_back_to_text(token: str) -> None:
    assert infer_cell(token) == CellStr(token)


def test_classify_token_matches_infer_cell() -> None:
    assert classify_token("10") is CellKind.INTEGER
    assert classify_token("1.5") is CellKind.NUMERIC
    assert classify_token("50%") is CellKind.PERCENT
    assert classify_token("n/a") is CellKind.SHORT_TEXT


@pytest.mark.parametrize("token", ["9" * 400, "1e5", "inf", "nan", "0x10", "١٢"])
def test_infer_never_raises(token: str) -> None:
    cls_cell = infer_cell(token)
    assert cls_cell.kind in set(CellKind)
