import math
from collections.abc import Collection
from pathlib import Path

from loguru import logger

from .conf import C_REPORT_SUFFIX, N_LEN_EXCEL_SHEET_NAME_MAX
from .errors import ReportSheetNameError

TUP_EXCEL_ILLEGAL = ("*", ":", "?", "/", "\\", "[", "]")

################################################################################
# #region CellValueConversion


def convert_nan_inf_to_str(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    elif math.isinf(x):
        return "Inf" if x > 0 else "-Inf"
    else:
        raise ValueError("Input is neither NaN nor Inf.")


# #endregion
################################################################################
# #region SheetNames


def validate_sheet_name(name: str, existing: Collection[str] = ()) -> str:
    """Reject names Excel would refuse; duplicates are compared case-insensitively."""
    if not name or not name.strip():
        raise ReportSheetNameError("Sheet name must be a non-empty string.")
    if len(name) > N_LEN_EXCEL_SHEET_NAME_MAX:
        raise ReportSheetNameError(
            f"Sheet name {name!r} exceeds {N_LEN_EXCEL_SHEET_NAME_MAX} characters."
        )
    if any(_ch in name for _ch in TUP_EXCEL_ILLEGAL):
        raise ReportSheetNameError(
            f"Sheet name {name!r} contains one of {''.join(TUP_EXCEL_ILLEGAL)}."
        )
    if name.startswith("'") or name.endswith("'"):
        raise ReportSheetNameError(f"Sheet name {name!r} cannot start or end with '.")
    if name.lower() in {_name.lower() for _name in existing}:
        raise ReportSheetNameError(f"Sheet name {name!r} is already used.")
    return name


# #endregion
################################################################################
# #region ReportPaths


def normalize_report_path(file_out: Path | str | None, *, title: str = "") -> Path:
    """
    Resolve the output path of a report.

    - no path -> ``{title}.xlsx``
    - a path ending in neither ``.xls`` nor ``.xlsx`` gets ``.xlsx`` appended
    - ``.xls`` is kept, with a warning (the content is always xlsx)
    """
    if file_out is None or str(file_out) == "":
        return Path(f"{title}{C_REPORT_SUFFIX}")

    path_out = Path(file_out)
    c_suffix = path_out.suffix.lower()
    if c_suffix not in (".xls", C_REPORT_SUFFIX):
        path_out = path_out.with_name(f"{path_out.name}{C_REPORT_SUFFIX}")
    elif c_suffix == ".xls":
        logger.warning(f'File "{path_out}" has extension .xls, should be .xlsx')
    return path_out


# #endregion
################################################################################
