from collections.abc import Mapping
from types import MappingProxyType
from typing import Literal

from .cells import CellKind
from .spec import SpecCellFormat, SpecReportConfig

N_LEN_EXCEL_SHEET_NAME_MAX = 31
N_LEN_SHEET_NAME_DEFAULT = 30  # title[:30] when no sheet name is given

# 1-based header row with and without the title block
N_ROW_HEADER_PLAIN = 1
N_ROW_HEADER_TITLED = 4

N_WIDTH_COLUMN_DEFAULT = 28.0
N_FONT_SIZE_TITLE = 18

C_SUBTOTAL_FUNCTION = 109  # SUM that ignores rows hidden by the filter
C_PLACEHOLDER_UNIMPLEMENTED = "unimplemented"
C_DATE_DISPLAY_FORMAT = "yyyy-mm-dd hh:mm:ss"
C_REPORT_SUFFIX = ".xlsx"

# Strategy/Preference/Adjustable Parameters for report styling.

C_COLOR_HEADER_FILL = "#4472C4"
C_COLOR_HEADER_FONT = "#FFFFFF"
C_COLOR_ALT_FILL = "#B4C6E7"
C_COLOR_SUBTOTAL_FILL = "#D0CECE"
C_COLOR_SUBTOTAL_FONT = "#FF0000"

LIT_FMT_KEYS = Literal["title", "header", "alternate", "subtotal_row", "subtotal"]

_cls_base_fmt_spec = SpecCellFormat(align="left")
_cls_fill_subtotal = SpecCellFormat(pattern=1, bg_color=C_COLOR_SUBTOTAL_FILL)

DEFAULT_REPORT_FORMATS: Mapping[LIT_FMT_KEYS, SpecCellFormat] = MappingProxyType(
    {
        "title": SpecCellFormat(font_size=N_FONT_SIZE_TITLE, bold=True),
        "header": SpecCellFormat(
            pattern=1,
            bg_color=C_COLOR_HEADER_FILL,
            font_color=C_COLOR_HEADER_FONT,
            bold=True,
        ),
        "alternate": SpecCellFormat(pattern=1, bg_color=C_COLOR_ALT_FILL),
        "subtotal_row": _cls_fill_subtotal,
        "subtotal": _cls_fill_subtotal.with_(
            num_format="$#,##0.00",
            bold=True,
            font_color=C_COLOR_SUBTOTAL_FONT,
            align="left",
        ),
    }
)

DEFAULT_CELL_FORMATS: Mapping[CellKind, SpecCellFormat] = MappingProxyType(
    {
        CellKind.INTEGER: _cls_base_fmt_spec.with_(num_format="0"),
        CellKind.SHORT_TEXT: _cls_base_fmt_spec,
        CellKind.NUMERIC: _cls_base_fmt_spec,
        CellKind.DECIMAL: _cls_base_fmt_spec.with_(num_format="#,##0.00"),
        CellKind.PERCENT: _cls_base_fmt_spec.with_(num_format="0.00%"),
        CellKind.CURRENCY: _cls_base_fmt_spec.with_(num_format="$#,##0.00"),
        CellKind.DATE: _cls_base_fmt_spec,
    }
)

DEFAULT_REPORT_CONFIG = SpecReportConfig()
