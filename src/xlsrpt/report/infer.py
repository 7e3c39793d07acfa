"""Classify loosely-typed text tokens into semantic cells.

Only values read from untyped sources (generic query results, frames with
string columns) go through here; structured records already carry their kind.
"""

from .cells import CellInt, CellKind, CellNumeric, CellPercent, CellStr, ReportCell

_SET_TOKEN_CHARS = frozenset("0123456789.%")


def classify_token(token: str) -> CellKind:
    return infer_cell(token).kind


def infer_cell(token: str) -> ReportCell:
    """
    Infer the cell for a text token; never raises.

    Rules:
        - more than one ``.``, a ``%`` anywhere but the last character, or any
          character outside ``[0-9.%]`` -> text
        - digits only -> integer
        - one ``.`` -> numeric
        - trailing ``%`` (with or without ``.``) -> percent; the value is the
          stripped number divided by 100 and must not exceed 1.0
        - anything that then fails to parse -> text

    Examples:
        >>> infer_cell("12.5%")
        CellPercent(value=0.125)
        >>> infer_cell("150.0%")
        CellStr(value='150.0%')
        >>> infer_cell("12.5.3")
        CellStr(value='12.5.3')
    """
    if token.count(".") > 1:
        return CellStr(token)
    n_perc = token.count("%")
    if n_perc > 1 or (n_perc == 1 and not token.endswith("%")):
        return CellStr(token)
    if any(_chr not in _SET_TOKEN_CHARS for _chr in token):
        return CellStr(token)

    try:
        if n_perc == 1:
            n_fraction = float(token[:-1]) / 100
            if n_fraction > 1.0:
                return CellStr(token)
            return CellPercent(n_fraction)
        if "." in token:
            return CellNumeric(float(token))
        return CellInt(int(token))
    except ValueError:
        return CellStr(token)
