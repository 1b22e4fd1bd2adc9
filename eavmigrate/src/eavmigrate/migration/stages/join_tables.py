"""Stage 4: configured many-to-many tables merged by composite business key."""

from typing import Any, Dict, List, Set

from eavmigrate.errors import UnresolvedReference
from eavmigrate.model.identity import IdentityMap, IdentityMaps
from eavmigrate.model.migration_config import JoinTableSpec
from eavmigrate.model.records import Insert, Row, RowIntent, Update, intent_for, without_field
from eavmigrate.monitoring.report import TableReport
from eavmigrate.config.logging import get_logger
from ..baseline import BaselineSnapshot
from ..context import MigrationContext
from ..identity import Key, index_by_key, resolve_attribute_cross_schema
from ..merge import merge_source_rows

logger = get_logger(__name__)


def _lenient(identity_map: IdentityMap, value: Any) -> Any:
    return identity_map.get(value, value)


class JoinTableMerger:
    """Key functions and row fix-ups for one join table."""

    def __init__(
        self,
        spec: JoinTableSpec,
        baseline: BaselineSnapshot,
        maps: IdentityMaps,
        attributes_by_key: Dict[Key, Row],
    ):
        self.spec = spec
        self.baseline = baseline
        self.maps = maps
        self.attributes_by_key = attributes_by_key

    def resolve_source_attribute(self, source_row: Row) -> Any:
        field = self.spec.attribute_field
        value = source_row.get(field)
        resolved = resolve_attribute_cross_schema(
            value, self.baseline.source_attributes, self.attributes_by_key
        )
        if resolved is None:
            raise UnresolvedReference("attribute", field, value)
        return resolved

    def source_key(self, source_row: Row) -> Key:
        return tuple(
            self.resolve_source_attribute(source_row)
            if field == self.spec.attribute_field
            else source_row.get(field)
            for field in self.spec.key_fields
        )

    def _destination_attribute(self, value: Any) -> Any:
        if value is None:
            return None
        if value in self.maps.attributes:
            return self.maps.attributes[value]
        # Orphan reference: never equal to a post-merge attribute id
        return ("unmapped", value)

    def destination_key(self, row: Row) -> Key:
        return tuple(
            self._destination_attribute(row.get(field))
            if field == self.spec.attribute_field
            else row.get(field)
            for field in self.spec.key_fields
        )

    def finish_source_row(self, source_row: Row, row: Row) -> Row:
        """Move references onto destination ids after the transform."""
        field = self.spec.attribute_field
        if field in row and source_row.get(field) is not None:
            row[field] = self.resolve_source_attribute(source_row)
        # Reference fields the source lacks were seeded from a destination row
        for name in self.spec.set_reference_fields:
            if name not in source_row:
                row[name] = _lenient(self.maps.attribute_sets, row.get(name))
        for name in self.spec.group_reference_fields:
            if name not in source_row:
                row[name] = _lenient(self.maps.attribute_groups, row.get(name))
        return row

    def rewrite_references(self, row: Row) -> Row:
        """Copy of ``row`` with its set and group references on their new ids."""
        row = dict(row)
        for name in self.spec.set_reference_fields:
            row[name] = _lenient(self.maps.attribute_sets, row.get(name))
        for name in self.spec.group_reference_fields:
            row[name] = _lenient(self.maps.attribute_groups, row.get(name))
        return row

    def rewrite_destination_row(self, row: Row) -> Row:
        """
        Point a carried-over destination row at the post-migration taxonomy.

        Without key fields the attribute reference is kept as it is.

        Raises:
            UnresolvedReference: If its attribute reference has no new id
        """
        row = self.rewrite_references(row)
        field = self.spec.attribute_field
        if self.spec.key_fields and row.get(field) is not None:
            if row[field] not in self.maps.attributes:
                raise UnresolvedReference("attribute", field, row[field])
            row[field] = self.maps.attributes[row[field]]
        return row


def migrate_join_table(
    ctx: MigrationContext,
    spec: JoinTableSpec,
    baseline: BaselineSnapshot,
    maps: IdentityMaps,
    attributes_by_key: Dict[Key, Row],
) -> TableReport:
    """
    Merge one join table from source and destination.

    Args:
        ctx: Migration context
        spec: Table name and composite key
        baseline: Pre-migration snapshot (source attributes for cross-schema lookups)
        maps: Identity maps from stages 1 and 2
        attributes_by_key: Post-merge destination attributes by identity key

    Returns:
        TableReport for the table
    """
    table = ctx.destination_table(spec.name)
    report = ctx.report.add(TableReport(table=table, stage="join_tables"))
    if not ctx.source.has_table(spec.name):
        logger.warning(f"Source has no table {spec.name}; skipping")
        report.skipped = True
        return report

    ctx.backups.ensure_backup(table)
    merger = JoinTableMerger(spec, baseline, maps, attributes_by_key)
    id_field = ctx.destination.primary_keys.get(table)

    destination_rows = ctx.destination_rows(table)
    existing_by_key = {}
    if spec.key_fields:
        existing_by_key = index_by_key(destination_rows, merger.destination_key)

    source_rows = ctx.source_rows(spec.name)
    report.source_rows = len(source_rows)
    outcome = merge_source_rows(
        source_rows,
        ctx.transformer(spec.name),
        id_field,
        merger.source_key,
        existing_by_key,
        keep_seed_id=True,
        finish=merger.finish_source_row,
    )
    report.merged = outcome.merged
    report.dropped_unresolved = outcome.dropped

    # Without key fields nothing matches, so every destination row remains
    remaining = outcome.remaining.values() if spec.key_fields else destination_rows
    intents: List[RowIntent] = list(outcome.intents)
    taken: Set[Any] = {intent.id for intent in intents if isinstance(intent, Update)}
    for existing in remaining:
        try:
            row = merger.rewrite_destination_row(existing)
        except UnresolvedReference as e:
            logger.debug(f"Dropping {table} row: {e}")
            report.dropped_unresolved += 1
            continue
        intent = intent_for(row, id_field)
        if isinstance(intent, Update) and intent.id in taken:
            intent = Insert(fields=without_field(row, id_field))
        elif isinstance(intent, Update):
            taken.add(intent.id)
        intents.append(intent)
        report.carried_over += 1

    ctx.backups.write_table(table, intents)
    report.rows_written = len(intents)
    logger.info(
        f"{table}: {len(source_rows)} source row(s), {outcome.merged} merged, "
        f"{report.carried_over} destination-only row(s) kept, "
        f"{report.dropped_unresolved} dropped"
    )
    return report
