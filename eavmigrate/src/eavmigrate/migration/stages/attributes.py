"""Stage 2: attribute definitions."""

from typing import Dict, NamedTuple

from eavmigrate.model.identity import IdentityMap
from eavmigrate.model.records import Row
from eavmigrate.model.taxonomy import ATTRIBUTE
from eavmigrate.monitoring.report import TableReport
from eavmigrate.config.logging import get_logger
from ..baseline import BaselineSnapshot
from ..context import MigrationContext
from ..identity import Key, build_identity_map, index_by_key
from ..merge import fresh_inserts, merge_source_rows

logger = get_logger(__name__)


class AttributeStageResult(NamedTuple):
    identity_map: IdentityMap
    attributes_by_key: Dict[Key, Row]  # post-merge destination table


def migrate_attributes(ctx: MigrationContext, baseline: BaselineSnapshot) -> AttributeStageResult:
    """
    Migrate attributes, merging with the destination baseline by (entity type, code).

    Source rows that match a baseline attribute are seeded with the baseline
    row before the transform, so destination-only columns survive. Unmatched
    baseline attributes are inserted with a fresh id.

    Args:
        ctx: Migration context
        baseline: Pre-migration snapshot

    Returns:
        Attribute identity map and the re-read attribute table indexed by key
    """
    table = ctx.destination_table(ATTRIBUTE.table)
    report = ctx.report.add(TableReport(table=table, stage="attributes"))
    ctx.backups.ensure_backup(table)

    baseline_by_key = index_by_key(baseline.destination_attributes.values(), ATTRIBUTE.key_of)
    source_rows = ctx.source_rows(ATTRIBUTE.table)
    report.source_rows = len(source_rows)

    outcome = merge_source_rows(
        source_rows,
        ctx.transformer(ATTRIBUTE.table),
        ATTRIBUTE.id_field,
        ATTRIBUTE.key_of,
        baseline_by_key,
    )
    intents = outcome.intents + fresh_inserts(outcome.remaining.values(), ATTRIBUTE.id_field)
    ctx.backups.write_table(table, intents)

    report.merged = outcome.merged
    report.carried_over = len(outcome.remaining)
    report.rows_written = len(intents)
    logger.info(
        f"attributes: {len(source_rows)} source row(s), {outcome.merged} merged with baseline, "
        f"{len(outcome.remaining)} destination-only attribute(s) kept"
    )

    attributes_by_key = index_by_key(ctx.destination.get_rows(table), ATTRIBUTE.key_of)
    identity_map = build_identity_map(
        ATTRIBUTE,
        baseline.destination_attributes.values(),
        ATTRIBUTE.key_of,
        attributes_by_key,
    )
    return AttributeStageResult(identity_map, attributes_by_key)
