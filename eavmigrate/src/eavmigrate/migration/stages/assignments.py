"""Stage 3: entity-attribute assignments (attribute in group in set)."""

from typing import List, Set

from eavmigrate.errors import UnresolvedReference
from eavmigrate.model.identity import IdentityMaps
from eavmigrate.model.records import Insert, Row, RowIntent, intent_for, without_field
from eavmigrate.model.taxonomy import ENTITY_ATTRIBUTE
from eavmigrate.monitoring.report import TableReport
from eavmigrate.config.logging import get_logger
from ..context import MigrationContext
from ..identity import Key, remap

logger = get_logger(__name__)


def remap_assignment(row: Row, maps: IdentityMaps) -> Row:
    """
    Point a destination assignment at the post-migration taxonomy.

    Raises:
        UnresolvedReference: If the attribute, set or group has no new id
    """
    return {
        **row,
        "attribute_id": remap(maps.attributes, "attribute_id", row.get("attribute_id")),
        "attribute_set_id": remap(maps.attribute_sets, "attribute_set_id", row.get("attribute_set_id")),
        "attribute_group_id": remap(
            maps.attribute_groups, "attribute_group_id", row.get("attribute_group_id")
        ),
    }


def migrate_entity_attributes(ctx: MigrationContext, maps: IdentityMaps) -> TableReport:
    """
    Migrate assignment rows.

    Source rows are transformed as they are. Existing destination rows are
    remapped through all three identity maps and get a fresh id; a row with
    any unresolvable reference is dropped, as is one that repeats a source
    assignment of the same attribute to the same set.

    Args:
        ctx: Migration context
        maps: Identity maps from stages 1 and 2

    Returns:
        TableReport for the assignment table
    """
    kind = ENTITY_ATTRIBUTE
    table = ctx.destination_table(kind.table)
    report = ctx.report.add(TableReport(table=table, stage="entity_attributes"))
    ctx.backups.ensure_backup(table)

    transformer = ctx.transformer(kind.table)
    source_rows = ctx.source_rows(kind.table)
    report.source_rows = len(source_rows)

    intents: List[RowIntent] = []
    assigned: Set[Key] = set()
    for source_row in source_rows:
        row = transformer.transform(source_row)
        assigned.add(kind.key_of(row))
        intents.append(intent_for(row, kind.id_field))

    for existing in ctx.destination_rows(table):
        try:
            row = remap_assignment(existing, maps)
        except UnresolvedReference as e:
            logger.debug(f"Dropping assignment {kind.id_of(existing)!r}: {e}")
            report.dropped_unresolved += 1
            continue
        if kind.key_of(row) in assigned:
            report.dropped_duplicate += 1
            continue
        assigned.add(kind.key_of(row))
        intents.append(Insert(fields=without_field(row, kind.id_field)))
        report.carried_over += 1

    ctx.backups.write_table(table, intents)
    report.rows_written = len(intents)
    logger.info(
        f"entity_attributes: {len(source_rows)} source row(s), {report.carried_over} destination "
        f"row(s) remapped, {report.dropped_unresolved} unresolved and "
        f"{report.dropped_duplicate} duplicate row(s) dropped"
    )
    return report
