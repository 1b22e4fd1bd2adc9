"""Backup, clear-then-write and rollback of destination tables."""

from typing import Iterable, List, Sequence

from eavmigrate.model.records import Row, RowIntent
from eavmigrate.storage.base import RecordStore
from eavmigrate.config.logging import get_logger

logger = get_logger(__name__)


class BackupLedger:
    """Tracks which destination tables this run has backed up."""

    def __init__(self, destination: RecordStore):
        self.destination = destination
        self._backed_up: List[str] = []

    @property
    def backed_up(self) -> List[str]:
        return list(self._backed_up)

    def ensure_backup(self, table: str) -> None:
        """Back ``table`` up unless this run already did."""
        if table in self._backed_up:
            return
        self.destination.backup(table)
        self._backed_up.append(table)
        logger.info(f"Backed up destination table {table}")

    def write_table(self, table: str, intents: Sequence[RowIntent]) -> List[Row]:
        """Replace ``table`` with ``intents``: backup, clear, then insert everything."""
        self.ensure_backup(table)
        self.destination.clear(table)
        rows = self.destination.write_rows(table, intents)
        logger.info(f"Wrote {len(rows)} row(s) to {table}")
        return rows

    def rollback(self, tables: Iterable[str]) -> None:
        """Restore each table from its backup, in the given order."""
        for table in tables:
            if self.destination.has_backup(table):
                self.destination.rollback(table)
                logger.info(f"Rolled back {table}")

    def delete_backups(self, tables: Iterable[str]) -> None:
        for table in tables:
            if self.destination.has_backup(table):
                self.destination.delete_backup(table)
                logger.info(f"Deleted backup of {table}")
