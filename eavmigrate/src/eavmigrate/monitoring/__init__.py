"""Progress, reporting and error logging for migration runs."""

from .progress import ProgressSink, NullProgress, TyperProgress
from .report import TableReport, MigrationReport, save_report
from .error_logging import log_error

__all__ = [
    "ProgressSink",
    "NullProgress",
    "TyperProgress",
    "TableReport",
    "MigrationReport",
    "save_report",
    "log_error",
]
