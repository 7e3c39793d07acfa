"""Command-line front end: SQLite queries into one styled workbook.

Each ``--sheet TITLE QUERY`` pair becomes one sheet. A single pair goes
through :func:`write_report_from_db`, several through the multi-sheet batch.
"""

import argparse
import sqlite3
import sys
from collections.abc import Sequence
from contextlib import closing

from loguru import logger
from rich_argparse import ArgumentDefaultsRichHelpFormatter, RawTextRichHelpFormatter

from xlsrpt.report.conf import N_LEN_SHEET_NAME_DEFAULT
from xlsrpt.report.engine import (
    SpecSheetRequest,
    write_multi_sheet_report_from_db,
    write_report_from_db,
)
from xlsrpt.report.errors import ReportError
from xlsrpt.report.spec import (
    SpecReportColumn,
    SpecReportConfig,
    SpecReportParams,
    SpecWorkbookReport,
)
from xlsrpt.report.util import normalize_report_path

from .console import CliHeadings


class SmartFormatter(ArgumentDefaultsRichHelpFormatter, RawTextRichHelpFormatter):
    """
    Keep manual newlines/indentation AND show (default: ...) in help.
    """

    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xlsrpt",
        description=(
            "Render SQLite query results as styled Excel report sheets.\n"
            "Every --sheet adds one sheet; all sheets go to one workbook."
        ),
        formatter_class=SmartFormatter,
    )
    parser.add_argument(
        "--database", required=True, metavar="FILE", help="SQLite database file."
    )
    parser.add_argument(
        "--sheet",
        nargs=2,
        action="append",
        required=True,
        metavar=("TITLE", "QUERY"),
        dest="sheets",
        help="Report title and the query producing its rows.",
    )
    parser.add_argument(
        "--out",
        default=None,
        metavar="PATH",
        help="Output workbook. Defaults to '<first title>.xlsx'.",
    )
    parser.add_argument(
        "--no-title-row",
        action="store_true",
        help="Skip the title block; the header goes to row 1.",
    )
    parser.add_argument(
        "--alt-bg", action="store_true", help="Shade every other data row."
    )
    parser.add_argument(
        "--auto-filter",
        action="store_true",
        help="Enable the auto-filter over the header and data rows.",
    )
    parser.add_argument(
        "--sum",
        nargs="+",
        default=[],
        metavar="COLUMN",
        help="Columns that get a SUBTOTAL formula below the data.",
    )
    parser.add_argument(
        "--untouch-strings",
        action="store_true",
        help="Write every string value as text, without type inference.",
    )
    parser.add_argument(
        "--untouch-col",
        nargs="+",
        default=[],
        metavar="COLUMN",
        help="Columns whose string values are written as text.",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first failing sheet and write nothing.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log sheet progress."
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log timing details."
    )
    return parser


def configure_logging(*, verbose: bool, debug: bool) -> None:
    logger.remove()
    c_level = "DEBUG" if debug else ("INFO" if verbose else "WARNING")
    logger.add(sys.stderr, level=c_level)


def _run(args: argparse.Namespace, headings: CliHeadings) -> SpecWorkbookReport:
    config = SpecReportConfig(
        verbose=args.verbose,
        debug=args.debug,
        untouch_strings=args.untouch_strings,
        untouch_cols=frozenset(args.untouch_col),
    )
    tup_columns = tuple(SpecReportColumn(_col, aggregate=True) for _col in args.sum)
    l_params = [
        SpecReportParams(
            title=_title,
            columns=tup_columns,
            query=_query,
            file_out=args.out,
            if_alt_bg=args.alt_bg,
            if_auto_filter=args.auto_filter,
            if_no_title_row=args.no_title_row,
        )
        for _title, _query in args.sheets
    ]

    with closing(sqlite3.connect(args.database)) as connection:
        if len(l_params) == 1:
            headings.h2(f"Sheet: {l_params[0].title[:N_LEN_SHEET_NAME_DEFAULT]}")
            return write_report_from_db(l_params[0], connection, config=config)

        path_out = normalize_report_path(args.out, title=l_params[0].title)
        headings.h2(f"{len(l_params)} sheets -> {path_out}")
        return write_multi_sheet_report_from_db(
            path_out,
            [SpecSheetRequest(params=_params, connection=connection) for _params in l_params],
            config=config,
            if_fail_fast=args.fail_fast,
        )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose, debug=args.debug)
    headings = CliHeadings()
    headings.h1("xlsrpt")

    try:
        report = _run(args, headings)
    except (ReportError, sqlite3.Error) as exc:
        logger.error(f"Report failed: {exc}")
        return 1

    headings.print_summary(report)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
