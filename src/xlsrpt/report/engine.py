# Entry points: one or more report sheets into one saved workbook.

import os
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from .conf import DEFAULT_REPORT_CONFIG, N_LEN_SHEET_NAME_DEFAULT
from .container import ReportWorkbook, XlsxWorkbook
from .errors import ReportError, ReportQueryError, ReportSourceError
from .layout import render_keyed_sheet, render_result_set_sheet
from .ordering import SpecKeyedRows
from .source import ReportData, execute_query, result_set_from_frame
from .spec import (
    SpecReportConfig,
    SpecReportParams,
    SpecSheetFailure,
    SpecSheetReport,
    SpecWorkbookReport,
)
from .util import normalize_report_path


@dataclass(frozen=True, slots=True)
class SpecSheetRequest:
    """
    One sheet of a workbook and where its rows come from.

    The first source present wins:

    - ``rows``: pre-loaded keyed rows (keyed mode, no query)
    - ``frame``: a DataFrame (streaming mode)
    - ``connection`` + ``data``: ``params.query`` loaded by ``data`` (keyed mode)
    - ``connection``: ``params.query`` streamed as is (streaming mode)
    """

    params: SpecReportParams
    connection: Any = None
    data: ReportData | None = None
    rows: SpecKeyedRows | Mapping[Any, Any] | None = None
    frame: Any = None

    @property
    def if_keyed(self) -> bool:
        return self.rows is not None or (
            self.frame is None and self.data is not None
        )

    @property
    def sheet_name(self) -> str:
        return self.params.with_default_sheet_name(N_LEN_SHEET_NAME_DEFAULT).sheet_name or ""


################################################################################
# #region SheetDispatch


def _load_keyed_rows(request: SpecSheetRequest) -> SpecKeyedRows | Mapping[Any, Any]:
    if request.data is None:
        raise ReportSourceError(
            f"Sheet {request.sheet_name!r} has no row loader for its query."
        )
    # the result set is released right after loading, before any layout work
    with execute_query(request.connection, request.params.query) as result_set:
        try:
            return request.data.load_rows(result_set)
        except ReportError:
            raise
        except Exception as exc:
            raise ReportQueryError(
                f"Loading rows for sheet {request.sheet_name!r} failed: {exc}"
            ) from exc


def render_sheet_request(
    workbook: ReportWorkbook,
    request: SpecSheetRequest,
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecSheetReport:
    params = request.params.with_default_sheet_name(N_LEN_SHEET_NAME_DEFAULT)
    if config.verbose:
        logger.info(f"Adding sheet {params.sheet_name!r}")

    if request.rows is not None:
        return render_keyed_sheet(workbook, params, request.rows, config=config)
    if request.frame is not None:
        with result_set_from_frame(request.frame) as result_set:
            return render_result_set_sheet(workbook, params, result_set, config=config)
    if request.connection is None:
        raise ReportSourceError(
            f"Sheet {params.sheet_name!r} has no row source (rows, frame or connection)."
        )
    if request.data is not None:
        return render_keyed_sheet(
            workbook, params, _load_keyed_rows(request), config=config
        )
    with execute_query(request.connection, params.query) as result_set:
        return render_result_set_sheet(workbook, params, result_set, config=config)


# #endregion
################################################################################
# #region Workbooks


def write_workbook(
    file_out: os.PathLike[str] | str,
    requests: Sequence[SpecSheetRequest],
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
    if_fail_fast: bool = False,
) -> SpecWorkbookReport:
    """
    Render every request into one workbook and save it.

    A sheet that fails (bad key type, query error, refused sheet name, ...)
    is logged and recorded in ``SpecWorkbookReport.errors``; the remaining
    sheets are still rendered and the workbook is saved. With
    ``if_fail_fast`` the first sheet error is raised instead and nothing is
    saved.

    Raises:
        ReportError: First sheet error, only when ``if_fail_fast`` is set. Any
            other exception raised by a sheet is recorded the same way, or
            re-raised as is under ``if_fail_fast``.
        ReportSaveError: The workbook could not be written to ``file_out``.
    """
    t0 = time.perf_counter()
    report = SpecWorkbookReport(file_out=Path(file_out))
    with XlsxWorkbook() as wb:
        for _request in requests:
            try:
                report.sheets.append(render_sheet_request(wb, _request, config=config))
            except ReportError as exc:
                if if_fail_fast:
                    raise
                logger.warning(
                    f"Error generating sheet {_request.sheet_name!r}, skipped: {exc}"
                )
                report.errors.append(SpecSheetFailure(_request.sheet_name, exc))
            except Exception as exc:
                if if_fail_fast:
                    raise
                logger.exception(
                    f"Unexpected error generating sheet {_request.sheet_name!r}, skipped"
                )
                report.errors.append(SpecSheetFailure(_request.sheet_name, exc))
        report.file_out = wb.save(file_out)

    if config.debug:
        logger.debug(
            f"write_workbook() [{report.file_out}] took {time.perf_counter() - t0:.3f}s"
        )
    return report


def _write_single_sheet(
    request: SpecSheetRequest, config: SpecReportConfig
) -> SpecWorkbookReport:
    file_out = normalize_report_path(
        request.params.file_out, title=request.params.title
    )
    return write_workbook(file_out, [request], config=config, if_fail_fast=True)


def write_report(
    params: SpecReportParams,
    data: ReportData,
    connection: Any,
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecWorkbookReport:
    """
    Single-sheet report from ``params.query``, loaded into keyed rows by ``data``.

    Output goes to ``params.file_out`` (default ``{title}.xlsx``). Any sheet
    error is raised and no file is written.
    """
    return _write_single_sheet(
        SpecSheetRequest(params=params, connection=connection, data=data), config
    )


def write_report_from_rows(
    params: SpecReportParams,
    rows: SpecKeyedRows | Mapping[Any, Any],
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecWorkbookReport:
    return _write_single_sheet(SpecSheetRequest(params=params, rows=rows), config)


def write_report_from_db(
    params: SpecReportParams,
    connection: Any,
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecWorkbookReport:
    """Single-sheet report for a query whose columns are not known upfront."""
    return _write_single_sheet(
        SpecSheetRequest(params=params, connection=connection), config
    )


def write_report_from_frame(
    params: SpecReportParams,
    df: Any,
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecWorkbookReport:
    return _write_single_sheet(SpecSheetRequest(params=params, frame=df), config)


def _normalize_multi_sheet_path(file_out: os.PathLike[str] | str) -> Path:
    if not str(file_out):
        raise ValueError("file_out is an empty string.")
    return normalize_report_path(file_out)


def write_multi_sheet_report(
    file_out: os.PathLike[str] | str,
    requests: Sequence[SpecSheetRequest],
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
    if_fail_fast: bool = False,
) -> SpecWorkbookReport:
    """Several keyed sheets (``rows`` or ``connection`` + ``data``) in one workbook."""
    path_out = _normalize_multi_sheet_path(file_out)
    for _request in requests:
        if not _request.if_keyed:
            raise ReportSourceError(
                f"Sheet {_request.sheet_name!r} has no keyed row source (rows or data)."
            )
    return write_workbook(
        path_out, requests, config=config, if_fail_fast=if_fail_fast
    )


def write_multi_sheet_report_from_db(
    file_out: os.PathLike[str] | str,
    requests: Sequence[SpecSheetRequest],
    *,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
    if_fail_fast: bool = False,
) -> SpecWorkbookReport:
    """Several sheets streamed straight from their queries into one workbook."""
    path_out = _normalize_multi_sheet_path(file_out)
    return write_workbook(
        path_out,
        [
            SpecSheetRequest(
                params=_request.params,
                connection=_request.connection,
                frame=_request.frame,
            )
            for _request in requests
        ],
        config=config,
        if_fail_fast=if_fail_fast,
    )


# #endregion
################################################################################
