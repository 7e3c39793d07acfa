# "Facts/Results/Plans" of turning row sources into report worksheets.

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from xlsxwriter.utility import xl_range

from .cells import CellKind


################################################################################
# #region CellFormatSpecification
@dataclass(frozen=True, slots=True)
class SpecCellFormat:
    # field names follow xlsxwriter format property keys
    font_size: int | None = None
    bold: bool | None = None

    align: str | None = None
    num_format: str | None = None

    pattern: int | None = None
    bg_color: str | None = None
    font_color: str | None = None

    def with_(self, **kwargs: Any) -> "SpecCellFormat":
        return replace(self, **kwargs)

    def merge(self, other: "SpecCellFormat") -> "SpecCellFormat":
        # non-None fields on the right win
        data = {
            k: (
                getattr(other, k) if getattr(other, k) is not None else getattr(self, k)
            )
            for k in self.__dataclass_fields__
        }
        return SpecCellFormat(**data)

    def to_xlsxwriter(self) -> dict[str, Any]:
        return {
            k: getattr(self, k)
            for k in self.__dataclass_fields__
            if getattr(self, k) is not None
        }


@dataclass(frozen=True, slots=True)
class SpecStyledCell:
    """One cell as handed to the output container.

    ``value`` is ``None`` for blank cells. ``formula`` (when set) takes
    precedence over ``value``, which then only serves as the cached result.
    """

    value: Any
    kind: CellKind | None
    fmt: SpecCellFormat
    formula: str | None = None


# #endregion
################################################################################
# #region ReportParameters
@dataclass(frozen=True, slots=True)
class SpecReportColumn:
    title: str
    aggregate: bool = False


@dataclass(frozen=True, slots=True)
class SpecReportParams:
    """
    Caller-facing description of one report sheet.

    Attributes:
        title: Report title, rendered in the title block and used as the
            default sheet name and output file name.
        columns: Ordered column descriptors, left to right.
        sheet_name: Explicit sheet name. Defaults to ``title[:30]``.
        query: Query text run against the data source.
        file_out: Output path for single-sheet entry points.
        if_alt_bg: Shade every other data row.
        if_auto_filter: Enable the auto-filter over header and data rows.
        if_no_title_row: Skip the title block; the header goes to row 1.
    """

    title: str
    columns: tuple[SpecReportColumn, ...] = ()
    sheet_name: str | None = None
    query: str = ""
    file_out: Path | str | None = None
    if_alt_bg: bool = False
    if_auto_filter: bool = False
    if_no_title_row: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))

    def with_default_sheet_name(self, n_len_max: int = 30) -> "SpecReportParams":
        if self.sheet_name:
            return self
        return replace(self, sheet_name=self.title[:n_len_max])


@dataclass(frozen=True, slots=True)
class SpecReportConfig:
    """
    Behaviour switches threaded through every entry point.

    ``verbose`` and ``debug`` only change what is logged, never the output.
    ``untouch_strings`` disables inference for all string values,
    ``untouch_cols`` for the named columns only.
    """

    verbose: bool = False
    debug: bool = False
    untouch_strings: bool = False
    untouch_cols: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "untouch_cols", frozenset(self.untouch_cols))

    def with_(self, **kwargs: Any) -> "SpecReportConfig":
        return replace(self, **kwargs)


# #endregion
################################################################################
# #region SheetLayoutSpecification
@dataclass(frozen=True, slots=True)
class SpecAutoFilter:
    # 0-based, inclusive
    row_first: int
    col_first: int
    row_last: int
    col_last: int

    @property
    def ref(self) -> str:
        return xl_range(self.row_first, self.col_first, self.row_last, self.col_last)


# #endregion
################################################################################
# #region ReportSpecification
@dataclass(slots=True)
class SpecSheetReport:
    sheet_name: str
    n_rows: int = 0
    n_cols: int = 0
    row_header: int = 1  # 1-based, as shown in Excel
    autofilter_ref: str | None = None
    row_subtotal: int | None = None  # 1-based
    seconds: float = 0.0
    warnings: list[str] = field(default_factory=list)

    def warn(self, msg: str) -> None:
        self.warnings.append(str(msg))


@dataclass(frozen=True, slots=True)
class SpecSheetFailure:
    sheet_name: str
    error: BaseException

    @property
    def message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


@dataclass(slots=True)
class SpecWorkbookReport:
    file_out: Path
    sheets: list[SpecSheetReport] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[SpecSheetFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def warn(self, msg: str) -> None:
        self.warnings.append(str(msg))


# #endregion
################################################################################
