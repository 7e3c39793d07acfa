"""Output containers: where styled cells end up.

The layout engine only talks to the two protocols below. ``XlsxWorkbook``
writes a real ``.xlsx`` through ``xlsxwriter``; ``MemoryWorkbook`` keeps the
same operations as plain data.
"""

import io
import math
import os
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from types import TracebackType
from typing import Protocol

import xlsxwriter
import xlsxwriter.exceptions
import xlsxwriter.format
import xlsxwriter.worksheet
from xlsxwriter.utility import xl_cell_to_rowcol

from .conf import C_DATE_DISPLAY_FORMAT
from .errors import ReportSaveError, ReportSheetNameError
from .spec import SpecAutoFilter, SpecCellFormat, SpecStyledCell
from .util import convert_nan_inf_to_str, validate_sheet_name


class ReportSheet(Protocol):
    name: str

    def append_row(self) -> int: ...

    def append_cell(self, cell: SpecStyledCell) -> None: ...

    def set_column_width(self, col_first: int, col_last: int, width: float) -> None: ...

    def set_autofilter(self, autofilter: SpecAutoFilter) -> None: ...


class ReportWorkbook(Protocol):
    def add_sheet(self, name: str) -> ReportSheet: ...

    def save(self, file_out: os.PathLike[str] | str) -> Path: ...


################################################################################
# #region XlsxContainer
class XlsxSheet:
    """Append-only cursor over one xlsxwriter worksheet."""

    def __init__(
        self, workbook: "XlsxWorkbook", ws: xlsxwriter.worksheet.Worksheet
    ) -> None:
        self.name: str = ws.name
        self._workbook = workbook
        self._ws = ws
        self._row_idx = -1
        self._col_idx = 0

    def append_row(self) -> int:
        self._row_idx += 1
        self._col_idx = 0
        return self._row_idx

    def append_cell(self, cell: SpecStyledCell) -> None:
        if self._row_idx < 0:
            raise RuntimeError("append_row() must be called before append_cell().")
        self._write_cell(self._row_idx, self._col_idx, cell)
        self._col_idx += 1

    def set_column_width(self, col_first: int, col_last: int, width: float) -> None:
        self._ws.set_column(first_col=col_first, last_col=col_last, width=width)

    def set_autofilter(self, autofilter: SpecAutoFilter) -> None:
        self._ws.autofilter(
            autofilter.row_first,
            autofilter.col_first,
            autofilter.row_last,
            autofilter.col_last,
        )

    def _write_cell(self, row_idx: int, col_idx: int, cell: SpecStyledCell) -> None:
        value = cell.value
        if cell.formula is not None:
            self._ws.write_formula(
                row_idx,
                col_idx,
                cell.formula,
                self._workbook.create_format_cached(cell.fmt),
                0 if value is None else value,
            )
            return
        if value is None:
            self._ws.write_blank(
                row_idx, col_idx, None, self._workbook.create_format_cached(cell.fmt)
            )
            return
        if isinstance(value, date):
            # dates need a display format in Excel; the semantic style stays alignment-only
            fmt_date = (
                cell.fmt
                if cell.fmt.num_format is not None
                else cell.fmt.with_(num_format=C_DATE_DISPLAY_FORMAT)
            )
            self._ws.write_datetime(
                row_idx, col_idx, value, self._workbook.create_format_cached(fmt_date)
            )
            return
        cfg_fmt = self._workbook.create_format_cached(cell.fmt)
        if isinstance(value, str):
            self._ws.write_string(row_idx, col_idx, value, cfg_fmt)
            return
        n_value = float(value)
        if not math.isfinite(n_value):
            self._ws.write_string(row_idx, col_idx, convert_nan_inf_to_str(n_value), cfg_fmt)
            return
        self._ws.write_number(row_idx, col_idx, value, cfg_fmt)


class XlsxWorkbook:
    """
    ``xlsxwriter``-backed output container.

    The workbook is assembled in memory and only written to disk by
    :meth:`save`, so a report that fails before saving leaves no file behind::

        with XlsxWorkbook() as wb:
            sheet = wb.add_sheet("Customers")
            ...
            wb.save("customers.xlsx")
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self.wb = xlsxwriter.Workbook(
            self._buffer,
            {
                "in_memory": True,
                "remove_timezone": True,
                # non-finite numbers are written as text by XlsxSheet
                "nan_inf_to_errors": False,
            },
        )
        self._format_cache: dict[SpecCellFormat, xlsxwriter.format.Format] = {}
        self._existing_sheet_names: list[str] = []
        self._is_closed = False

    def __enter__(self) -> "XlsxWorkbook":
        return self

    def __exit__(
        self, exc_type: type | None, exc: BaseException | None, tb: TracebackType | None
    ) -> None:
        self.close()

    @property
    def sheet_names(self) -> tuple[str, ...]:
        return tuple(self._existing_sheet_names)

    def create_format_cached(self, spec: SpecCellFormat) -> xlsxwriter.format.Format:
        fmt = self._format_cache.get(spec)
        if fmt is None:
            fmt = self.wb.add_format(spec.to_xlsxwriter())
            self._format_cache[spec] = fmt
        return fmt

    def add_sheet(self, name: str) -> XlsxSheet:
        validate_sheet_name(name, self._existing_sheet_names)
        try:
            ws = self.wb.add_worksheet(name)
        except (
            xlsxwriter.exceptions.DuplicateWorksheetName,
            xlsxwriter.exceptions.InvalidWorksheetName,
        ) as exc:
            raise ReportSheetNameError(str(exc)) from exc
        self._existing_sheet_names.append(name)
        return XlsxSheet(self, ws)

    def close(self) -> None:
        if not self._is_closed:
            self._is_closed = True
            self.wb.close()

    def save(self, file_out: os.PathLike[str] | str) -> Path:
        path_out = Path(file_out)
        try:
            self.close()
            path_out.write_bytes(self._buffer.getvalue())
        except (OSError, xlsxwriter.exceptions.XlsxWriterException) as exc:
            raise ReportSaveError(f"Failed to save workbook to {path_out}: {exc}") from exc
        return path_out


# #endregion
################################################################################
# #region MemoryContainer
@dataclass(slots=True)
class MemorySheet:
    name: str
    rows: list[list[SpecStyledCell]] = field(default_factory=list)
    column_widths: list[tuple[int, int, float]] = field(default_factory=list)
    autofilter: SpecAutoFilter | None = None

    def append_row(self) -> int:
        self.rows.append([])
        return len(self.rows) - 1

    def append_cell(self, cell: SpecStyledCell) -> None:
        if not self.rows:
            raise RuntimeError("append_row() must be called before append_cell().")
        self.rows[-1].append(cell)

    def set_column_width(self, col_first: int, col_last: int, width: float) -> None:
        self.column_widths.append((col_first, col_last, width))

    def set_autofilter(self, autofilter: SpecAutoFilter) -> None:
        self.autofilter = autofilter

    def get_cell(self, ref: str) -> SpecStyledCell | None:
        """Look up a cell by A1 reference; ``None`` when nothing was written there."""
        n_row_idx, n_col_idx = xl_cell_to_rowcol(ref)
        if n_row_idx >= len(self.rows) or n_col_idx >= len(self.rows[n_row_idx]):
            return None
        return self.rows[n_row_idx][n_col_idx]


class MemoryWorkbook:
    def __init__(self) -> None:
        self.sheets: dict[str, MemorySheet] = {}
        self.saved_to: list[Path] = []

    def add_sheet(self, name: str) -> MemorySheet:
        validate_sheet_name(name, self.sheets)
        sheet = MemorySheet(name=name)
        self.sheets[name] = sheet
        return sheet

    def save(self, file_out: os.PathLike[str] | str) -> Path:
        path_out = Path(file_out)
        self.saved_to.append(path_out)
        return path_out

    def __getitem__(self, name: str) -> MemorySheet:
        return self.sheets[name]

    def __iter__(self) -> Iterator[MemorySheet]:
        return iter(self.sheets.values())


# #endregion
################################################################################
