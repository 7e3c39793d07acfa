from .cells import (
    CellCurrency,
    CellDate,
    CellDecimal,
    CellInt,
    CellKind,
    CellNumeric,
    CellPercent,
    CellStr,
    ReportCell,
    is_report_cell,
)
from .container import MemoryWorkbook, ReportSheet, ReportWorkbook, XlsxWorkbook
from .engine import (
    SpecSheetRequest,
    write_multi_sheet_report,
    write_multi_sheet_report_from_db,
    write_report,
    write_report_from_db,
    write_report_from_frame,
    write_report_from_rows,
    write_workbook,
)
from .errors import (
    ReportError,
    ReportKeyTypeError,
    ReportQueryError,
    ReportSaveError,
    ReportSheetNameError,
    ReportSourceError,
)
from .formatter import format_cell, format_loose_value
from .infer import classify_token, infer_cell
from .layout import render_keyed_sheet, render_result_set_sheet
from .ordering import KeyKind, SpecKeyedRows, generate_ordered_rows, order_keys
from .source import RecordLoader, ReportData, SpecResultSet, execute_query
from .spec import (
    SpecCellFormat,
    SpecReportColumn,
    SpecReportConfig,
    SpecReportParams,
    SpecSheetReport,
    SpecStyledCell,
    SpecWorkbookReport,
)

__all__ = [
    "CellCurrency",
    "CellDate",
    "CellDecimal",
    "CellInt",
    "CellKind",
    "CellNumeric",
    "CellPercent",
    "CellStr",
    "ReportCell",
    "is_report_cell",
    "MemoryWorkbook",
    "ReportSheet",
    "ReportWorkbook",
    "XlsxWorkbook",
    "SpecSheetRequest",
    "write_multi_sheet_report",
    "write_multi_sheet_report_from_db",
    "write_report",
    "write_report_from_db",
    "write_report_from_frame",
    "write_report_from_rows",
    "write_workbook",
    "ReportError",
    "ReportKeyTypeError",
    "ReportQueryError",
    "ReportSaveError",
    "ReportSheetNameError",
    "ReportSourceError",
    "format_cell",
    "format_loose_value",
    "classify_token",
    "infer_cell",
    "render_keyed_sheet",
    "render_result_set_sheet",
    "KeyKind",
    "SpecKeyedRows",
    "generate_ordered_rows",
    "order_keys",
    "RecordLoader",
    "ReportData",
    "SpecResultSet",
    "execute_query",
    "SpecCellFormat",
    "SpecReportColumn",
    "SpecReportConfig",
    "SpecReportParams",
    "SpecSheetReport",
    "SpecStyledCell",
    "SpecWorkbookReport",
]
