# Tagged cell values: one variant per semantic cell kind.
#
# Structured records declare their fields with these types, so the kind of
# every cell is fixed when the record is built and the formatter dispatches
# on ``cell.kind`` instead of inspecting runtime types.

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import ClassVar, TypeAlias


class CellKind(str, Enum):
    INTEGER = "integer"
    SHORT_TEXT = "short_text"
    NUMERIC = "numeric"
    DECIMAL = "decimal"  # thousands grouping, 2 decimals
    PERCENT = "percent"
    CURRENCY = "currency"
    DATE = "date"


@dataclass(frozen=True, slots=True)
class CellInt:
    value: int
    kind: ClassVar[CellKind] = CellKind.INTEGER


@dataclass(frozen=True, slots=True)
class CellStr:
    value: str
    kind: ClassVar[CellKind] = CellKind.SHORT_TEXT


@dataclass(frozen=True, slots=True)
class CellNumeric:
    value: float
    kind: ClassVar[CellKind] = CellKind.NUMERIC


@dataclass(frozen=True, slots=True)
class CellDecimal:
    value: float
    kind: ClassVar[CellKind] = CellKind.DECIMAL


@dataclass(frozen=True, slots=True)
class CellPercent:
    # fraction: 0.5 renders as 50.00%
    value: float
    kind: ClassVar[CellKind] = CellKind.PERCENT


@dataclass(frozen=True, slots=True)
class CellCurrency:
    value: float
    kind: ClassVar[CellKind] = CellKind.CURRENCY


@dataclass(frozen=True, slots=True)
class CellDate:
    value: datetime | date
    kind: ClassVar[CellKind] = CellKind.DATE


ReportCell: TypeAlias = (
    CellInt | CellStr | CellNumeric | CellDecimal | CellPercent | CellCurrency | CellDate
)

TUP_REPORT_CELL_TYPES: tuple[type, ...] = (
    CellInt,
    CellStr,
    CellNumeric,
    CellDecimal,
    CellPercent,
    CellCurrency,
    CellDate,
)


def is_report_cell(value: object) -> bool:
    return isinstance(value, TUP_REPORT_CELL_TYPES)
