"""Record store contract shared by every storage backend."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from eavmigrate.errors import StorageFailure
from eavmigrate.model.records import Insert, Row, RowIntent, Update
from eavmigrate.config.logging import get_logger

logger = get_logger(__name__)


class RecordStore(ABC):
    """
    Table-oriented storage for migration rows.

    Backends implement reading, whole-table replacement and the backup
    primitives. Identifier assignment for ``Insert`` intents is shared here so
    every backend behaves like an auto-increment column: fresh identifiers
    never reuse a value the table has held earlier in the store's lifetime,
    even after ``clear()``.
    """

    def __init__(self, primary_keys: Optional[Dict[str, str]] = None):
        self.primary_keys: Dict[str, str] = dict(primary_keys or {})
        self._high_water: Dict[str, int] = {}

    @abstractmethod
    def tables(self) -> List[str]:
        """Names of the tables currently held by the store."""

    @abstractmethod
    def has_table(self, table: str) -> bool:
        ...

    @abstractmethod
    def get_rows(self, table: str) -> List[Row]:
        """All rows of ``table``; raises StorageFailure if it does not exist."""

    @abstractmethod
    def get_fields(self, table: str) -> List[str]:
        """Column names of ``table``, empty when unknown."""

    @abstractmethod
    def backup(self, table: str) -> None:
        """Preserve the current contents (or absence) of ``table``."""

    @abstractmethod
    def rollback(self, table: str) -> None:
        """Restore ``table`` from its backup; no-op when there is none."""

    @abstractmethod
    def delete_backup(self, table: str) -> None:
        """Discard the backup of ``table``; no-op when there is none."""

    @abstractmethod
    def has_backup(self, table: str) -> bool:
        ...

    @abstractmethod
    def _replace_rows(self, table: str, rows: List[Row], fields: List[str]) -> None:
        """Replace the whole content of ``table``, creating it if needed."""

    def row_count(self, table: str) -> int:
        return len(self.get_rows(table))

    def clear(self, table: str) -> None:
        """Remove every row of ``table`` while keeping its columns."""
        if not self.has_table(table):
            return
        self._note_high_water(table, self.get_rows(table))
        self._replace_rows(table, [], self.get_fields(table))

    def write_rows(self, table: str, intents: Sequence[RowIntent]) -> List[Row]:
        """
        Replace the contents of ``table`` with the given intents.

        Args:
            table: Destination table name
            intents: Rows to write, as Insert or Update intents

        Returns:
            The rows as written, with assigned identifiers
        """
        if self.has_table(table):
            self._note_high_water(table, self.get_rows(table))
        rows = self._materialize(table, intents)
        fields = self._merge_fields(self.get_fields(table), rows)
        self._replace_rows(table, rows, fields)
        logger.debug(f"Wrote {len(rows)} row(s) to {table}")
        return rows

    def _materialize(self, table: str, intents: Sequence[RowIntent]) -> List[Row]:
        id_field = self.primary_keys.get(table)
        if not id_field:
            return [dict(intent.fields) for intent in intents]

        explicit = [intent.id for intent in intents if isinstance(intent, Update)]
        seen = set()
        for value in explicit:
            if value in seen:
                raise StorageFailure(table, "write", f"duplicate {id_field}={value!r}")
            seen.add(value)

        next_id = max(
            [self._high_water.get(table, 0)] + [v for v in explicit if _is_int(v)]
        ) + 1
        rows: List[Row] = []
        for intent in intents:
            if isinstance(intent, Insert):
                row_id = next_id
                next_id += 1
            else:
                row_id = intent.id
            row = {id_field: row_id}
            row.update((k, v) for k, v in intent.fields.items() if k != id_field)
            rows.append(row)
        self._note_high_water(table, rows)
        return rows

    def _note_high_water(self, table: str, rows: Iterable[Row]) -> None:
        id_field = self.primary_keys.get(table)
        if not id_field:
            return
        ids = [row.get(id_field) for row in rows if _is_int(row.get(id_field))]
        if ids:
            self._high_water[table] = max(self._high_water.get(table, 0), max(ids))

    @staticmethod
    def _merge_fields(existing: List[str], rows: List[Row]) -> List[str]:
        fields = list(existing)
        known = set(fields)
        for row in rows:
            for name in row:
                if name not in known:
                    fields.append(name)
                    known.add(name)
        return fields


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
