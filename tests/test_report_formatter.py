from __future__ import annotations

import sys
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
from loguru import logger

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from xlsrpt.report.cells import (  # noqa: E402
    CellCurrency,
    CellDate,
    CellDecimal,
    CellInt,
    CellKind,
    CellNumeric,
    CellPercent,
    CellStr,
)
from xlsrpt.report.conf import C_COLOR_ALT_FILL, DEFAULT_CELL_FORMATS  # noqa: E402
from xlsrpt.report.errors import ReportSourceError  # noqa: E402
from xlsrpt.report.formatter import (  # noqa: E402
    format_cell,
    format_loose_value,
    format_record,
    list_record_values,
)
from xlsrpt.report.spec import SpecReportConfig  # noqa: E402


@dataclass(frozen=True)
class _Customer:
    id: CellInt
    name: CellStr
    share: CellPercent
    balance: CellCurrency


@pytest.fixture
def l_warnings() -> Iterator[list[str]]:
    l_msgs: list[str] = []
    n_handler = logger.add(lambda msg: l_msgs.append(str(msg)), level="WARNING", format="{message}")
    yield l_msgs
    logger.remove(n_handler)


@pytest.mark.parametrize(
    ("cell", "c_num_format"),
    [
        (CellInt(5), "0"),
        (CellStr("abc"), None),
        (CellNumeric(1.5), None),
        (CellDecimal(1234.5), "#,##0.00"),
        (CellPercent(0.5), "0.00%"),
        (CellCurrency(9.99), "$#,##0.00"),
        (CellDate(datetime(2024, 1, 2, 3, 4, 5)), None),
    ],
)
def test_format_per_kind(cell: Any, c_num_format: str | None) -> None:
    cls_styled = format_cell(cell)
    assert cls_styled.kind is cell.kind
    assert cls_styled.value == cell.value
    assert cls_styled.fmt.num_format == c_num_format
    assert cls_styled.fmt.align == "left"
    assert cls_styled.fmt.bg_color is None
    assert cls_styled.formula is None


def test_every_kind_has_a_format() -> None:
    assert set(DEFAULT_CELL_FORMATS) == set(CellKind)


def test_alternate_adds_shading_and_keeps_number_format() -> None:
    cls_styled = format_cell(CellCurrency(3.0), alternate=True)
    assert cls_styled.fmt.bg_color == C_COLOR_ALT_FILL
    assert cls_styled.fmt.pattern == 1
    assert cls_styled.fmt.num_format == "$#,##0.00"
    assert cls_styled.fmt.align == "left"


def test_format_record_dataclass_fields_in_order() -> None:
    record = _Customer(CellInt(1), CellStr("Ann"), CellPercent(0.25), CellCurrency(10.5))
    l_cells = format_record(record)
    assert [_c.kind for _c in l_cells] == [
        CellKind.INTEGER,
        CellKind.SHORT_TEXT,
        CellKind.PERCENT,
        CellKind.CURRENCY,
    ]
    assert [_c.value for _c in l_cells] == [1, "Ann", 0.25, 10.5]


def test_format_record_unknown_field_becomes_placeholder_text() -> None:
    l_cells = format_record((CellInt(1), 3.5, None))
    assert l_cells[0].value == 1
    assert [_c.value for _c in l_cells[1:]] == ["unimplemented", "unimplemented"]
    assert all(_c.kind is CellKind.SHORT_TEXT for _c in l_cells[1:])


@pytest.mark.parametrize(
    "cell",
    [CellInt(None), CellInt("abc"), CellNumeric(None), CellCurrency("n/a"), CellInt(float("inf"))],
)
def test_format_record_unconvertible_cell_becomes_placeholder_text(cell: Any) -> None:
    l_cells = format_record((CellStr("ok"), cell))
    assert l_cells[0].value == "ok"
    assert l_cells[1].value == "unimplemented"
    assert l_cells[1].kind is CellKind.SHORT_TEXT


def test_format_record_unconvertible_cell_warns_when_verbose(l_warnings: list[str]) -> None:
    format_record((CellInt(None),), config=SpecReportConfig(verbose=True))
    assert len(l_warnings) == 1
    assert "does not convert to cell kind 'integer'" in l_warnings[0]


def test_format_record_unconvertible_cell_is_quiet_by_default(l_warnings: list[str]) -> None:
    format_record((CellInt(None),))
    assert l_warnings == []


@pytest.mark.parametrize("record", [{"a": 1}, [CellInt(1)], "text", _Customer])
def test_list_record_values_rejects_non_records(record: Any) -> None:
    with pytest.raises(ReportSourceError):
        list_record_values(record)


@pytest.mark.parametrize(
    ("value", "kind", "expected"),
    [
        (7, CellKind.INTEGER, 7),
        ("42", CellKind.INTEGER, 42),
        ("2.5", CellKind.NUMERIC, 2.5),
        ("12.5%", CellKind.PERCENT, 0.125),
        ("hello", CellKind.SHORT_TEXT, "hello"),
        (19.99, CellKind.CURRENCY, 19.99),
        (Decimal("1.25"), CellKind.CURRENCY, 1.25),
        (datetime(2024, 5, 6, 7, 8), CellKind.DATE, datetime(2024, 5, 6, 7, 8)),
        (date(2024, 5, 6), CellKind.DATE, date(2024, 5, 6)),
    ],
)
def test_format_loose_value(value: Any, kind: CellKind, expected: Any) -> None:
    cls_styled = format_loose_value("col", value)
    assert cls_styled.kind is kind
    if isinstance(expected, float):
        assert cls_styled.value == pytest.approx(expected)
    else:
        assert cls_styled.value == expected


def test_untouch_strings_disables_inference() -> None:
    config = SpecReportConfig(untouch_strings=True)
    cls_styled = format_loose_value("code", "00123", config=config)
    assert cls_styled.kind is CellKind.SHORT_TEXT
    assert cls_styled.value == "00123"


def test_untouch_cols_only_affects_named_columns() -> None:
    config = SpecReportConfig(untouch_cols=frozenset({"zip"}))
    assert format_loose_value("zip", "01234", config=config).value == "01234"
    assert format_loose_value("qty", "01234", config=config).value == 1234


@pytest.mark.parametrize("value", [None, True, b"raw", [1, 2]])
def test_unsupported_loose_value_becomes_empty_text(
    value: Any, l_warnings: list[str]
) -> None:
    cls_styled = format_loose_value("col", value)
    assert cls_styled.kind is CellKind.SHORT_TEXT
    assert cls_styled.value == ""
    assert l_warnings == []


def test_unsupported_loose_value_warns_when_verbose(l_warnings: list[str]) -> None:
    format_loose_value("blob", b"\x00", config=SpecReportConfig(verbose=True))
    assert len(l_warnings) == 1
    assert "Invalid column type 'bytes' for column 'blob'" in l_warnings[0]
