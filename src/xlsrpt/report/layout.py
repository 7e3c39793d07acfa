# Sheet layout: title block, header, body, widths, auto-filter, subtotals.
#
# Rows are emitted strictly in order into an append-only sheet; the subtotal
# ranges and the auto-filter rectangle are derived from the row counts kept
# in SheetLayout, so nothing here may reorder or skip rows.

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from loguru import logger
from xlsxwriter.utility import xl_col_to_name

from .cells import CellKind
from .conf import (
    C_SUBTOTAL_FUNCTION,
    DEFAULT_REPORT_CONFIG,
    DEFAULT_REPORT_FORMATS,
    N_LEN_SHEET_NAME_DEFAULT,
    N_ROW_HEADER_PLAIN,
    N_ROW_HEADER_TITLED,
    N_WIDTH_COLUMN_DEFAULT,
)
from .container import ReportSheet, ReportWorkbook
from .errors import ReportSourceError
from .formatter import check_record, create_blank_cell, format_loose_value, format_record
from .ordering import SpecKeyedRows, convert_to_keyed_rows, order_keys
from .source import SpecResultSet
from .spec import (
    SpecAutoFilter,
    SpecReportConfig,
    SpecReportParams,
    SpecSheetReport,
    SpecStyledCell,
)


################################################################################
# #region LayoutState
@dataclass(slots=True)
class SheetLayout:
    """
    Bookkeeping of one sheet while it is being emitted.

    Row numbers exposed by the properties are 1-based (as shown in Excel);
    ``SpecAutoFilter`` carries 0-based indices.
    """

    n_cols: int
    row_start: int  # header row: 1, or 4 below a title block
    n_rows: int = 0  # data rows emitted so far
    row_cursor: int = 0  # sheet rows appended so far

    @classmethod
    def new(cls, *, n_cols: int, if_title_block: bool) -> "SheetLayout":
        return cls(
            n_cols=n_cols,
            row_start=N_ROW_HEADER_TITLED if if_title_block else N_ROW_HEADER_PLAIN,
        )

    @property
    def row_header(self) -> int:
        return self.row_start

    @property
    def row_data_first(self) -> int:
        return self.row_start + 1

    @property
    def row_data_last(self) -> int:
        return self.row_start + self.n_rows

    @property
    def row_subtotal(self) -> int | None:
        return self.row_data_last + 1 if self.n_rows else None

    def append_row(self, sheet: ReportSheet) -> int:
        self.row_cursor += 1
        return sheet.append_row()

    def check_alternate(self, row_idx_data: int, if_alt_bg: bool) -> bool:
        # first data row shaded, then every other row
        return if_alt_bg and row_idx_data % 2 == 0

    def create_autofilter(self) -> SpecAutoFilter:
        """Header row through the last data row, column A through the last column."""
        return SpecAutoFilter(
            row_first=self.row_header - 1,
            col_first=0,
            row_last=self.row_header - 1 + self.n_rows,
            col_last=self.n_cols - 1,
        )

    def derive_subtotal_formula(self, col_idx: int) -> str:
        c_col = xl_col_to_name(col_idx)
        return (
            f"=SUBTOTAL({C_SUBTOTAL_FUNCTION},"
            f"{c_col}{self.row_data_first}:{c_col}{self.row_data_last})"
        )


# #endregion
################################################################################
# #region SheetSections


def _render_title_block(
    sheet: ReportSheet, layout: SheetLayout, params: SpecReportParams
) -> None:
    layout.append_row(sheet)  # spacer
    layout.append_row(sheet)
    sheet.append_cell(
        SpecStyledCell(
            value=params.title,
            kind=CellKind.SHORT_TEXT,
            fmt=DEFAULT_REPORT_FORMATS["title"],
        )
    )
    layout.append_row(sheet)  # spacer above the header


def _render_header(
    sheet: ReportSheet, layout: SheetLayout, titles: Sequence[str]
) -> None:
    layout.append_row(sheet)
    for _title in titles:
        sheet.append_cell(
            SpecStyledCell(
                value=str(_title),
                kind=CellKind.SHORT_TEXT,
                fmt=DEFAULT_REPORT_FORMATS["header"],
            )
        )


def _render_body_row(
    sheet: ReportSheet, layout: SheetLayout, cells: Sequence[SpecStyledCell]
) -> None:
    layout.append_row(sheet)
    for _cell in cells:
        sheet.append_cell(_cell)
    layout.n_rows += 1


def _render_subtotal_row(
    sheet: ReportSheet, layout: SheetLayout, aggregates: Sequence[bool]
) -> None:
    layout.append_row(sheet)
    for _col_idx, _if_aggregate in enumerate(aggregates):
        if _if_aggregate:
            sheet.append_cell(
                SpecStyledCell(
                    value=0,
                    kind=CellKind.CURRENCY,
                    fmt=DEFAULT_REPORT_FORMATS["subtotal"],
                    formula=layout.derive_subtotal_formula(_col_idx),
                )
            )
        else:
            sheet.append_cell(create_blank_cell(DEFAULT_REPORT_FORMATS["subtotal_row"]))


def _finalize_sheet(
    sheet: ReportSheet,
    layout: SheetLayout,
    params: SpecReportParams,
    aggregates: Sequence[bool],
    report: SpecSheetReport,
) -> None:
    if layout.n_cols > 0:
        sheet.set_column_width(0, layout.n_cols - 1, N_WIDTH_COLUMN_DEFAULT)
        if params.if_auto_filter:
            cls_autofilter = layout.create_autofilter()
            sheet.set_autofilter(cls_autofilter)
            report.autofilter_ref = cls_autofilter.ref
    elif params.if_auto_filter:
        report.warn("Auto-filter skipped: the sheet has no columns.")

    if layout.n_rows:
        _render_subtotal_row(sheet, layout, aggregates)

    report.n_rows = layout.n_rows
    report.row_subtotal = layout.row_subtotal


# #endregion
################################################################################
# #region SheetRenderers


def render_keyed_sheet(
    workbook: ReportWorkbook,
    params: SpecReportParams,
    source: SpecKeyedRows | Mapping[Any, Any],
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecSheetReport:
    """
    Add one sheet built from a keyed row collection.

    Keys are ordered and every row is checked before the sheet is created, so
    an unsupported key type or a malformed row leaves the workbook untouched.

    Args:
        workbook: Output container receiving the sheet.
        params: Report parameters; ``columns`` defines the header and which
            columns get a subtotal formula.
        source: Keyed rows. Each row is a structured record whose fields are
            tagged cells in column order.
        config: Logging switches.

    Raises:
        ReportKeyTypeError: Keys are of an unsupported or mixed type.
        ReportSourceError: ``source`` is not a mapping or a row is not a record.
        ReportSheetNameError: The container refused the sheet name.

    Returns:
        SpecSheetReport: Row/column counts, header row, auto-filter reference
        and subtotal row of the emitted sheet.
    """
    t0 = time.perf_counter()
    params = params.with_default_sheet_name(N_LEN_SHEET_NAME_DEFAULT)
    cls_rows = convert_to_keyed_rows(source)
    l_keys = order_keys(cls_rows)
    for _key in l_keys:
        if not check_record(cls_rows.rows[_key]):
            raise ReportSourceError(
                f"Row {_key!r} must be a dataclass instance or a tuple, "
                f"got {type(cls_rows.rows[_key]).__name__}."
            )

    sheet = workbook.add_sheet(params.sheet_name or "")
    layout = SheetLayout.new(
        n_cols=len(params.columns), if_title_block=not params.if_no_title_row
    )
    report = SpecSheetReport(
        sheet_name=sheet.name, n_cols=layout.n_cols, row_header=layout.row_header
    )

    if not params.if_no_title_row:
        _render_title_block(sheet, layout, params)
    _render_header(sheet, layout, [_col.title for _col in params.columns])

    b_width_warned = False
    for _row_idx, _key in enumerate(l_keys):
        l_cells = format_record(
            cls_rows.rows[_key],
            alternate=layout.check_alternate(_row_idx, params.if_alt_bg),
            config=config,
        )
        if len(l_cells) != layout.n_cols and not b_width_warned:
            report.warn(
                f"Row {_key!r} has {len(l_cells)} fields for {layout.n_cols} columns."
            )
            b_width_warned = True
        _render_body_row(sheet, layout, l_cells)

    _finalize_sheet(
        sheet, layout, params, [_col.aggregate for _col in params.columns], report
    )
    report.seconds = time.perf_counter() - t0
    if config.debug:
        logger.debug(f"render_keyed_sheet() [{sheet.name}] took {report.seconds:.3f}s")
    return report


def render_result_set_sheet(
    workbook: ReportWorkbook,
    params: SpecReportParams,
    result_set: SpecResultSet,
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecSheetReport:
    """
    Add one sheet streamed from a result set whose schema is not known upfront.

    The header comes from the returned column names and every value goes
    through the loosely-typed formatter. Rows keep the result set order.
    A column gets a subtotal formula when ``params.columns`` holds an
    aggregate descriptor with the same title.

    The result set is consumed but not closed.
    """
    t0 = time.perf_counter()
    params = params.with_default_sheet_name(N_LEN_SHEET_NAME_DEFAULT)
    l_columns = list(result_set.columns)
    dict_aggregates = {_col.title: _col.aggregate for _col in params.columns}

    sheet = workbook.add_sheet(params.sheet_name or "")
    layout = SheetLayout.new(
        n_cols=len(l_columns), if_title_block=not params.if_no_title_row
    )
    report = SpecSheetReport(
        sheet_name=sheet.name, n_cols=layout.n_cols, row_header=layout.row_header
    )

    if not params.if_no_title_row:
        _render_title_block(sheet, layout, params)
    _render_header(sheet, layout, l_columns)

    for _row_idx, _row in enumerate(result_set.rows):
        b_alternate = layout.check_alternate(_row_idx, params.if_alt_bg)
        _render_body_row(
            sheet,
            layout,
            [
                format_loose_value(_col, _val, alternate=b_alternate, config=config)
                for _col, _val in zip(l_columns, _row)
            ],
        )

    _finalize_sheet(
        sheet,
        layout,
        params,
        [dict_aggregates.get(_col, False) for _col in l_columns],
        report,
    )
    report.seconds = time.perf_counter() - t0
    if config.debug:
        logger.debug(
            f"render_result_set_sheet() [{sheet.name}] took {report.seconds:.3f}s"
        )
    return report


# #endregion
################################################################################
