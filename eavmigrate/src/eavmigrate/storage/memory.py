"""In-memory record store."""

import copy
from typing import Dict, List, Optional, Tuple

from eavmigrate.errors import StorageFailure
from eavmigrate.model.records import Row
from .base import RecordStore


class InMemoryRecordStore(RecordStore):
    """Holds tables as lists of dicts. Backups are deep copies."""

    def __init__(
        self,
        tables: Optional[Dict[str, List[Row]]] = None,
        primary_keys: Optional[Dict[str, str]] = None,
        fields: Optional[Dict[str, List[str]]] = None,
    ):
        super().__init__(primary_keys)
        self._tables: Dict[str, List[Row]] = {}
        self._fields: Dict[str, List[str]] = {}
        # None records that the table did not exist when it was backed up
        self._backups: Dict[str, Optional[Tuple[List[Row], List[str]]]] = {}
        for name, rows in (tables or {}).items():
            declared = (fields or {}).get(name, [])
            self._replace_rows(name, [dict(r) for r in rows], self._merge_fields(declared, rows))
        for name, declared in (fields or {}).items():
            if name not in self._tables:
                self._replace_rows(name, [], list(declared))

    def tables(self) -> List[str]:
        return list(self._tables)

    def has_table(self, table: str) -> bool:
        return table in self._tables

    def get_rows(self, table: str) -> List[Row]:
        if table not in self._tables:
            raise StorageFailure(table, "read", "no such table")
        return [dict(row) for row in self._tables[table]]

    def get_fields(self, table: str) -> List[str]:
        return list(self._fields.get(table, []))

    def backup(self, table: str) -> None:
        if table in self._tables:
            self._backups[table] = (
                copy.deepcopy(self._tables[table]),
                list(self._fields[table]),
            )
        else:
            self._backups[table] = None

    def rollback(self, table: str) -> None:
        if table not in self._backups:
            return
        saved = self._backups[table]
        if saved is None:
            self._tables.pop(table, None)
            self._fields.pop(table, None)
            return
        rows, fields = saved
        self._tables[table] = copy.deepcopy(rows)
        self._fields[table] = list(fields)

    def delete_backup(self, table: str) -> None:
        self._backups.pop(table, None)

    def has_backup(self, table: str) -> bool:
        return table in self._backups

    def _replace_rows(self, table: str, rows: List[Row], fields: List[str]) -> None:
        self._tables[table] = [dict(row) for row in rows]
        self._fields[table] = list(fields)
