"""Record store backed by a directory of CSV files, one file per table."""

import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from eavmigrate.errors import StorageFailure
from eavmigrate.model.records import Row
from eavmigrate.config.logging import get_logger
from .base import RecordStore

logger = get_logger(__name__)


class CsvRecordStore(RecordStore):
    """
    Tables live in ``<directory>/<table>.csv``.

    Backups are byte copies at ``<table><backup_suffix>.csv``; a table that
    did not exist when it was backed up leaves a ``<table><backup_suffix>.absent``
    marker instead, so rollback can remove the file again.

    CSV carries no types: a column whose every non-empty cell is a canonical
    integer is read back as ints, every other column as text. Only empty cells
    read as None; `N/A`, `null` and the like stay text.
    """

    def __init__(
        self,
        directory: Path,
        primary_keys: Optional[Dict[str, str]] = None,
        backup_suffix: str = "_bak",
    ):
        super().__init__(primary_keys)
        self.directory = Path(directory)
        self.backup_suffix = backup_suffix
        if not self.directory.is_dir():
            raise StorageFailure(str(self.directory), "open", "directory not found")

    def _path(self, table: str) -> Path:
        return self.directory / f"{table}.csv"

    def _backup_path(self, table: str) -> Path:
        return self.directory / f"{table}{self.backup_suffix}.csv"

    def _absent_marker(self, table: str) -> Path:
        return self.directory / f"{table}{self.backup_suffix}.absent"

    def tables(self) -> List[str]:
        return sorted(
            p.stem for p in self.directory.glob("*.csv")
            if not p.stem.endswith(self.backup_suffix)
        )

    def has_table(self, table: str) -> bool:
        return self._path(table).exists()

    def get_rows(self, table: str) -> List[Row]:
        path = self._path(table)
        if not path.exists():
            raise StorageFailure(table, "read", f"{path} not found")
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
        except pd.errors.EmptyDataError:
            return []
        except (OSError, ValueError) as e:
            raise StorageFailure(table, "read", str(e)) from e
        df = df.astype(object).where(df.notna(), None)
        columns = {name: _typed_column(df[name].tolist()) for name in df.columns}
        return [dict(zip(columns, values)) for values in zip(*columns.values())]

    def get_fields(self, table: str) -> List[str]:
        path = self._path(table)
        if not path.exists():
            return []
        try:
            return list(pd.read_csv(path, nrows=0).columns)
        except pd.errors.EmptyDataError:
            return []
        except (OSError, ValueError) as e:
            raise StorageFailure(table, "read", str(e)) from e

    def backup(self, table: str) -> None:
        path = self._path(table)
        try:
            if path.exists():
                shutil.copyfile(path, self._backup_path(table))
                self._absent_marker(table).unlink(missing_ok=True)
            else:
                self._absent_marker(table).touch()
                self._backup_path(table).unlink(missing_ok=True)
        except OSError as e:
            raise StorageFailure(table, "backup", str(e)) from e
        logger.debug(f"Backed up {table}")

    def rollback(self, table: str) -> None:
        try:
            if self._backup_path(table).exists():
                shutil.copyfile(self._backup_path(table), self._path(table))
            elif self._absent_marker(table).exists():
                self._path(table).unlink(missing_ok=True)
            else:
                return
        except OSError as e:
            raise StorageFailure(table, "rollback", str(e)) from e
        logger.debug(f"Rolled back {table}")

    def delete_backup(self, table: str) -> None:
        try:
            self._backup_path(table).unlink(missing_ok=True)
            self._absent_marker(table).unlink(missing_ok=True)
        except OSError as e:
            raise StorageFailure(table, "delete backup", str(e)) from e

    def has_backup(self, table: str) -> bool:
        return self._backup_path(table).exists() or self._absent_marker(table).exists()

    def _replace_rows(self, table: str, rows: List[Row], fields: List[str]) -> None:
        path = self._path(table)
        try:
            if not fields:
                path.write_text("", encoding="utf-8")
                return
            pd.DataFrame(rows, columns=fields, dtype=object).to_csv(path, index=False)
        except (OSError, ValueError) as e:
            raise StorageFailure(table, "write", str(e)) from e


def _is_int_text(text: str) -> bool:
    try:
        return str(int(text)) == text
    except ValueError:
        return False


def _typed_column(values: List[Optional[str]]) -> List[Any]:
    """Cells as read; a column becomes int only if every cell renders back unchanged."""
    present = [value for value in values if value is not None]
    if present and all(_is_int_text(value) for value in present):
        return [None if value is None else int(value) for value in values]
    return values
