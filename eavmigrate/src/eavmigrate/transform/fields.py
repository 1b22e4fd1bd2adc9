"""Per-column copy of source rows into destination-shaped rows."""

from typing import Any, Callable, Dict, List, Optional, Tuple

from eavmigrate.model.migration_config import FieldRule, MigrationConfig
from eavmigrate.model.records import Row
from eavmigrate.storage.base import RecordStore


def _to_int(value: Any) -> Any:
    if value is None or value == "":
        return None
    return int(value)


def _to_str(value: Any) -> Any:
    return None if value is None else str(value)


def _to_bool_int(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return 1 if value.strip().lower() in ("1", "true", "yes", "y") else 0
    return 1 if value else 0


def _null_if_empty(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


CONVERTER_FUNCS: Dict[str, Callable[[Any], Any]] = {
    "int": _to_int,
    "str": _to_str,
    "bool_int": _to_bool_int,
    "null_if_empty": _null_if_empty,
}


class RecordTransformer:
    """
    Copies a source row onto a seed destination row.

    The seed supplies every destination field (null when unseeded), so fields
    that only exist in the destination schema keep their seeded values.
    """

    def __init__(self, rule: FieldRule, destination_fields: List[str]):
        self.rule = rule
        self.destination_fields = list(destination_fields)

    def seed(self, base: Optional[Row] = None) -> Row:
        """Destination row with every known field null, overlaid with ``base``."""
        row = dict.fromkeys(self.destination_fields)
        if base:
            row.update(base)
        return row

    def transform(self, source_row: Row, seed_row: Optional[Row] = None) -> Row:
        """
        Build a destination row from a source row.

        Args:
            source_row: Row read from the source table
            seed_row: Starting destination row; all-null when omitted

        Returns:
            New destination row (inputs are not modified)
        """
        result = self.seed(seed_row)
        known = set(self.destination_fields)
        ignored = set(self.rule.ignore)
        for field, value in source_row.items():
            if field in ignored:
                continue
            target = self.rule.rename.get(field, field)
            if known and target not in known:
                continue
            result[target] = value

        for field, converter in self.rule.convert.items():
            if field in result:
                result[field] = CONVERTER_FUNCS[converter](result[field])
        for field, default in self.rule.defaults.items():
            if result.get(field) is None:
                result[field] = default
        return result


class TransformerFactory:
    """Builds and caches one transformer per (source table, destination table)."""

    def __init__(self, config: MigrationConfig, destination: RecordStore):
        self.config = config
        self.destination = destination
        self._cache: Dict[Tuple[str, str], RecordTransformer] = {}

    def get(self, source_table: str, destination_table: str) -> RecordTransformer:
        key = (source_table, destination_table)
        if key not in self._cache:
            self._cache[key] = RecordTransformer(
                self.config.rule_for(source_table),
                self.destination.get_fields(destination_table),
            )
        return self._cache[key]
