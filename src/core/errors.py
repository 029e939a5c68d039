"""
Exception types raised while building a cost report.

Every failure except LayoutInvariantError is terminal for the run.
"""


class ReportError(Exception):
    """Base class for all report generation errors."""


class InputError(ReportError, ValueError):
    """Invalid period, CLI argument, or token configuration."""


class ParseError(InputError):
    """A value read from the roster store or Tempo could not be parsed."""


class DataSourceError(ReportError):
    """Fetching worklogs from Tempo failed."""


class StorageError(ReportError, OSError):
    """A workbook (report or roster store) could not be opened or saved."""


class LayoutInvariantError(ReportError):
    """
    An effort date has no matching date column in the report sheet.

    Never escapes the layout engine: the value is reported and skipped.
    """
