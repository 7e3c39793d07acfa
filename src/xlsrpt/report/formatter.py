from collections.abc import Callable, Mapping
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from functools import singledispatch
from typing import Any

from loguru import logger

from .cells import (
    CellCurrency,
    CellDate,
    CellInt,
    CellKind,
    CellStr,
    ReportCell,
    is_report_cell,
)
from .conf import (
    C_PLACEHOLDER_UNIMPLEMENTED,
    DEFAULT_CELL_FORMATS,
    DEFAULT_REPORT_FORMATS,
    DEFAULT_REPORT_CONFIG,
)
from .errors import ReportSourceError
from .infer import infer_cell
from .spec import SpecCellFormat, SpecReportConfig, SpecStyledCell

################################################################################
# #region TaggedCells

_DICT_VALUE_CONVERTERS: Mapping[CellKind, Callable[[Any], Any]] = {
    CellKind.INTEGER: int,
    CellKind.SHORT_TEXT: str,
    CellKind.NUMERIC: float,
    CellKind.DECIMAL: float,
    CellKind.PERCENT: float,
    CellKind.CURRENCY: float,
    CellKind.DATE: lambda v: v,
}


def derive_cell_format(
    kind: CellKind,
    *,
    alternate: bool = False,
    formats: Mapping[CellKind, SpecCellFormat] = DEFAULT_CELL_FORMATS,
) -> SpecCellFormat:
    fmt = formats[kind]
    if alternate:
        fmt = fmt.merge(DEFAULT_REPORT_FORMATS["alternate"])
    return fmt


def format_cell(
    cell: ReportCell,
    *,
    alternate: bool = False,
    formats: Mapping[CellKind, SpecCellFormat] = DEFAULT_CELL_FORMATS,
) -> SpecStyledCell:
    """
    Turn a tagged cell into the styled cell written by the output container.

    Every kind is left aligned; integer, decimal, percent and currency cells
    carry their number format, numeric and text cells use the General
    format, and date cells get alignment only. ``alternate`` adds the
    shaded fill used for every other data row.
    """
    return SpecStyledCell(
        value=_DICT_VALUE_CONVERTERS[cell.kind](cell.value),
        kind=cell.kind,
        fmt=derive_cell_format(cell.kind, alternate=alternate, formats=formats),
    )


def create_blank_cell(fmt: SpecCellFormat) -> SpecStyledCell:
    return SpecStyledCell(value=None, kind=None, fmt=fmt)


# #endregion
################################################################################
# #region StructuredRecords


def check_record(record: Any) -> bool:
    if isinstance(record, tuple):
        return True
    return is_dataclass(record) and not isinstance(record, type)


def list_record_values(record: Any) -> list[Any]:
    if isinstance(record, tuple):
        return list(record)
    if is_dataclass(record) and not isinstance(record, type):
        # getattr instead of astuple(): astuple would flatten the cell dataclasses
        return [getattr(record, _field.name) for _field in fields(record)]
    raise ReportSourceError(
        f"Report row must be a dataclass instance or a tuple, got {type(record).__name__}."
    )


def format_record(
    record: Any,
    *,
    alternate: bool = False,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> list[SpecStyledCell]:
    """
    Format every field of a structured record.

    Fields that are not tagged cells, and tagged cells whose value does not
    convert to their kind (e.g. ``CellInt(None)`` from a NULL column), become
    the placeholder text cell.
    """
    cls_placeholder = CellStr(C_PLACEHOLDER_UNIMPLEMENTED)
    l_cells: list[SpecStyledCell] = []
    for _val in list_record_values(record):
        if not is_report_cell(_val):
            l_cells.append(format_cell(cls_placeholder, alternate=alternate))
            continue
        try:
            l_cells.append(format_cell(_val, alternate=alternate))
        except (TypeError, ValueError, OverflowError):
            if config.verbose:
                logger.warning(
                    f"Value {_val.value!r} does not convert to cell kind {_val.kind.value!r}"
                )
            l_cells.append(format_cell(cls_placeholder, alternate=alternate))
    return l_cells


# #endregion
################################################################################
# #region LooselyTypedValues


@singledispatch
def _convert_loose_value(value: Any, column: str, config: SpecReportConfig) -> ReportCell | None:
    return None


@_convert_loose_value.register
def _(value: bool, column: str, config: SpecReportConfig) -> ReportCell | None:
    # bool is an int subclass, but has no semantic cell kind
    return None


@_convert_loose_value.register
def _(value: int, column: str, config: SpecReportConfig) -> ReportCell | None:
    return CellInt(value)


@_convert_loose_value.register
def _(value: str, column: str, config: SpecReportConfig) -> ReportCell | None:
    if config.untouch_strings or column in config.untouch_cols:
        return CellStr(value)
    return infer_cell(value)


@_convert_loose_value.register(float)
@_convert_loose_value.register(Decimal)
def _(value: float | Decimal, column: str, config: SpecReportConfig) -> ReportCell | None:
    return CellCurrency(float(value))


@_convert_loose_value.register
def _(value: date, column: str, config: SpecReportConfig) -> ReportCell | None:
    return CellDate(value)


def format_loose_value(
    column: str,
    value: Any,
    *,
    alternate: bool = False,
    config: SpecReportConfig = DEFAULT_REPORT_CONFIG,
) -> SpecStyledCell:
    """
    Format one value of a loosely-typed row (query result, frame row).

    ``int`` -> integer, ``str`` -> inferred (unless untouched), ``float`` and
    ``Decimal`` -> currency, ``date``/``datetime`` -> date. Anything else
    (``None``, ``bool``, ``bytes``, ...) becomes an empty text cell and, when
    ``config.verbose`` is set, a warning on the logger.
    """
    cls_cell = _convert_loose_value(value, column, config)
    if cls_cell is None:
        if config.verbose:
            logger.warning(
                f"Invalid column type {type(value).__name__!r} for column {column!r} "
                f"of value {value!r}"
            )
        cls_cell = CellStr("")
    return format_cell(cls_cell, alternate=alternate)


# #endregion
################################################################################
