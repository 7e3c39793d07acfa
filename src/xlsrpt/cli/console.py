from dataclasses import dataclass

from rich.console import Console
from rich.style import Style
from rich.table import Table

from xlsrpt.report.spec import SpecWorkbookReport


@dataclass(frozen=True, slots=True)
class SpecCliTheme:
    h1: str = "#4472C4"
    h2: str = "#B4C6E7"
    ok: str = "#4ADE80"
    fail: str = "#FF0000"


class CliHeadings:
    def __init__(
        self, *, console: Console | None = None, theme: SpecCliTheme | None = None
    ):
        self.console = console or Console(stderr=True)
        self.theme = theme or SpecCliTheme()

    def h1(self, text: str) -> None:
        self.console.rule(
            f"[bold]{text}[/bold]",
            style=Style(color=self.theme.h1, bold=True),
            characters="=",
        )

    def h2(self, text: str) -> None:
        self.console.rule(text, style=Style(color=self.theme.h2), characters="─")

    def print_summary(self, report: SpecWorkbookReport) -> None:
        """Sheet table plus one line per failed sheet."""
        table = Table(show_header=True, header_style=Style(bold=True))
        for _col in ("Sheet", "Rows", "Columns", "Auto-filter", "Subtotal row"):
            table.add_column(_col)
        for _sheet in report.sheets:
            table.add_row(
                _sheet.sheet_name,
                str(_sheet.n_rows),
                str(_sheet.n_cols),
                _sheet.autofilter_ref or "-",
                "-" if _sheet.row_subtotal is None else str(_sheet.row_subtotal),
            )
        self.console.print(table)

        for _failure in report.errors:
            self.console.print(
                f"[{self.theme.fail}]FAILED[/] {_failure.sheet_name}: {_failure.message}"
            )
        if report.ok:
            self.console.print(f"[{self.theme.ok}]Saved[/] {report.file_out}")
