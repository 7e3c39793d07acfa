# Error taxonomy of report generation.
#
# Input-shape and row-source errors are fatal to one sheet; save errors are
# fatal to the whole workbook. Cell-level problems never raise.


class ReportError(Exception):
    """Base class for every error raised by ``xlsrpt.report``."""


class ReportKeyTypeError(ReportError, TypeError):
    """Keyed row collection uses a key type the key orderer cannot sort."""


class ReportSourceError(ReportError, TypeError):
    """Row source has the wrong shape (e.g. not a keyed mapping)."""


class ReportQueryError(ReportError, RuntimeError):
    """The data source failed to run a query or to stream its rows."""


class ReportSheetNameError(ReportError, ValueError):
    """The output container refused a sheet name."""


class ReportSaveError(ReportError, OSError):
    """The workbook could not be persisted."""
