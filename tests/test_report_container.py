from __future__ import annotations

import sys
import xml.etree.ElementTree as ET
import zipfile
from datetime import datetime
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from xlsrpt.report.cells import CellDate, CellNumeric, CellStr  # noqa: E402
from xlsrpt.report.conf import C_DATE_DISPLAY_FORMAT  # noqa: E402
from xlsrpt.report.container import MemoryWorkbook, XlsxWorkbook  # noqa: E402
from xlsrpt.report.errors import ReportSheetNameError  # noqa: E402
from xlsrpt.report.formatter import format_cell  # noqa: E402
from xlsrpt.report.spec import SpecAutoFilter  # noqa: E402

NS_MAIN = {"m": "http://schemas.openxmlformats.org/spreadsheetml/2006/main"}


def _read_cell_node(path_xlsx: Path, cell_ref: str) -> ET.Element:
    with zipfile.ZipFile(path_xlsx) as zf:
        root_sheet = ET.fromstring(zf.read("xl/worksheets/sheet1.xml"))
    node_cell = root_sheet.find(f".//m:c[@r='{cell_ref}']", NS_MAIN)
    assert node_cell is not None, f"Missing cell: {cell_ref}"
    return node_cell


def _read_num_format_codes(path_xlsx: Path) -> set[str]:
    with zipfile.ZipFile(path_xlsx) as zf:
        root = ET.fromstring(zf.read("xl/styles.xml"))
    return {
        node_fmt.attrib["formatCode"]
        for node_fmt in root.findall(".//m:numFmts/m:numFmt", NS_MAIN)
    }


def test_nothing_is_written_before_save(tmp_path: Path) -> None:
    path_out = tmp_path / "late.xlsx"
    with XlsxWorkbook() as wb:
        sheet = wb.add_sheet("S")
        sheet.append_row()
        sheet.append_cell(format_cell(CellStr("x")))
        assert not path_out.exists()
        wb.save(path_out)
    assert path_out.exists()


def test_date_cells_get_a_display_format(tmp_path: Path) -> None:
    path_out = tmp_path / "dates.xlsx"
    with XlsxWorkbook() as wb:
        sheet = wb.add_sheet("S")
        sheet.append_row()
        sheet.append_cell(format_cell(CellDate(datetime(2024, 2, 29, 13, 30))))
        wb.save(path_out)

    node_cell = _read_cell_node(path_out, "A1")
    assert node_cell.attrib.get("t") is None
    assert C_DATE_DISPLAY_FORMAT in _read_num_format_codes(path_out)


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_are_written_as_text(tmp_path: Path, value: float) -> None:
    path_out = tmp_path / "nan.xlsx"
    with XlsxWorkbook() as wb:
        sheet = wb.add_sheet("S")
        sheet.append_row()
        sheet.append_cell(format_cell(CellNumeric(value)))
        wb.save(path_out)

    assert _read_cell_node(path_out, "A1").attrib.get("t") == "s"


def test_autofilter_and_widths(tmp_path: Path) -> None:
    path_out = tmp_path / "filter.xlsx"
    with XlsxWorkbook() as wb:
        sheet = wb.add_sheet("S")
        sheet.append_row()
        sheet.append_cell(format_cell(CellStr("h")))
        sheet.set_column_width(0, 0, 28.0)
        sheet.set_autofilter(SpecAutoFilter(0, 0, 0, 0))
        wb.save(path_out)

    with zipfile.ZipFile(path_out) as zf:
        root_sheet = ET.fromstring(zf.read("xl/worksheets/sheet1.xml"))
    node_filter = root_sheet.find("m:autoFilter", NS_MAIN)
    assert node_filter is not None
    assert node_filter.attrib["ref"] == "A1"
    node_col = root_sheet.find("m:cols/m:col", NS_MAIN)
    assert node_col is not None
    assert float(node_col.attrib["width"]) > 28.0


def test_append_cell_requires_a_row() -> None:
    with XlsxWorkbook() as wb:
        sheet = wb.add_sheet("S")
        with pytest.raises(RuntimeError):
            sheet.append_cell(format_cell(CellStr("x")))

    with pytest.raises(RuntimeError):
        MemoryWorkbook().add_sheet("S").append_cell(format_cell(CellStr("x")))


def test_sheet_names_are_validated() -> None:
    with XlsxWorkbook() as wb:
        wb.add_sheet("Data")
        with pytest.raises(ReportSheetNameError):
            wb.add_sheet("data")
        with pytest.raises(ReportSheetNameError):
            wb.add_sheet("bad:name")
        assert wb.sheet_names == ("Data",)


def test_formats_are_cached() -> None:
    with XlsxWorkbook() as wb:
        fmt_a = wb.create_format_cached(format_cell(CellStr("a")).fmt)
        fmt_b = wb.create_format_cached(format_cell(CellStr("b")).fmt)
        assert fmt_a is fmt_b


def test_memory_workbook_records_saves(tmp_path: Path) -> None:
    wb = MemoryWorkbook()
    sheet = wb.add_sheet("S")
    sheet.append_row()
    sheet.append_cell(format_cell(CellStr("x")))
    assert wb.save(tmp_path / "m.xlsx") == tmp_path / "m.xlsx"
    assert wb.saved_to == [tmp_path / "m.xlsx"]
    assert [_s.name for _s in wb] == ["S"]
    assert sheet.get_cell("A1").value == "x"  # type: ignore[union-attr]
    assert sheet.get_cell("B1") is None
    assert sheet.get_cell("A2") is None
    assert not (tmp_path / "m.xlsx").exists()
