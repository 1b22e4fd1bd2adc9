"""Snapshot of the taxonomy rows that exist before the migration writes anything."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Tuple

from eavmigrate.model.records import Row
from eavmigrate.model.taxonomy import ATTRIBUTE, ATTRIBUTE_GROUP, ATTRIBUTE_SET, EntityKind
from eavmigrate.storage.base import RecordStore
from eavmigrate.transform.tables import TableNameMapper
from eavmigrate.config.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BaselineSnapshot:
    """
    Immutable pre-migration view of both schemas.

    Attributes:
        destination_sets: Destination attribute sets keyed by id
        destination_groups: Destination attribute groups, in table order
        destination_attributes: Destination attributes keyed by id
        source_attributes: Source attributes keyed by id
    """

    destination_sets: Mapping[Any, Row]
    destination_groups: Tuple[Row, ...]
    destination_attributes: Mapping[Any, Row]
    source_attributes: Mapping[Any, Row]


def _by_id(rows, kind: EntityKind) -> Mapping[Any, Row]:
    return MappingProxyType({kind.id_of(row): row for row in rows})


def _read(store: RecordStore, table: str):
    return store.get_rows(table) if store.has_table(table) else []


def capture_baseline(
    source: RecordStore,
    destination: RecordStore,
    table_mapper: TableNameMapper,
) -> BaselineSnapshot:
    """
    Read the baseline once, before stage 1.

    Args:
        source: Source record store
        destination: Destination record store
        table_mapper: Resolves destination names of the taxonomy tables

    Returns:
        BaselineSnapshot holding copies of the rows
    """
    sets = _read(destination, table_mapper.destination(ATTRIBUTE_SET.table))
    groups = _read(destination, table_mapper.destination(ATTRIBUTE_GROUP.table))
    attributes = _read(destination, table_mapper.destination(ATTRIBUTE.table))
    source_attributes = _read(source, ATTRIBUTE.table)

    logger.info(
        f"Captured baseline: {len(sets)} set(s), {len(groups)} group(s), "
        f"{len(attributes)} attribute(s) in destination; "
        f"{len(source_attributes)} attribute(s) in source"
    )
    return BaselineSnapshot(
        destination_sets=_by_id(sets, ATTRIBUTE_SET),
        destination_groups=tuple(groups),
        destination_attributes=_by_id(attributes, ATTRIBUTE),
        source_attributes=_by_id(source_attributes, ATTRIBUTE),
    )
