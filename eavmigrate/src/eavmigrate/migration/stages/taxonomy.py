"""Stage 1: attribute sets, then attribute groups."""

from typing import Any, Iterable, List

from eavmigrate.errors import InconsistentBaseline
from eavmigrate.model.identity import IdentityMap
from eavmigrate.model.records import Row
from eavmigrate.model.taxonomy import ATTRIBUTE_GROUP, ATTRIBUTE_SET, EntityKind
from eavmigrate.monitoring.report import TableReport
from eavmigrate.config.logging import get_logger
from ..baseline import BaselineSnapshot
from ..context import MigrationContext
from ..identity import build_identity_map, index_by_key
from ..merge import fresh_inserts, merge_source_rows

logger = get_logger(__name__)


def _merge_and_write(
    ctx: MigrationContext,
    kind: EntityKind,
    stage: str,
    baseline_rows: Iterable[Row],
) -> List[Row]:
    """Merge source rows with baseline rows by identity key, write, and re-read."""
    table = ctx.destination_table(kind.table)
    report = ctx.report.add(TableReport(table=table, stage=stage))
    ctx.backups.ensure_backup(table)

    source_rows = ctx.source_rows(kind.table)
    report.source_rows = len(source_rows)
    outcome = merge_source_rows(
        source_rows,
        ctx.transformer(kind.table),
        kind.id_field,
        kind.key_of,
        index_by_key(baseline_rows, kind.key_of),
    )
    intents = outcome.intents + fresh_inserts(outcome.remaining.values(), kind.id_field)
    ctx.backups.write_table(table, intents)

    report.merged = outcome.merged
    report.carried_over = len(outcome.remaining)
    report.rows_written = len(intents)
    logger.info(
        f"{stage}: {len(source_rows)} source row(s), {outcome.merged} merged with baseline, "
        f"{len(outcome.remaining)} baseline-only row(s) inserted"
    )
    return ctx.destination.get_rows(table)


def migrate_attribute_sets(ctx: MigrationContext, baseline: BaselineSnapshot) -> IdentityMap:
    """
    Migrate attribute sets and derive the set identity map.

    Args:
        ctx: Migration context
        baseline: Pre-migration snapshot

    Returns:
        IdentityMap from every baseline set id to its new id
    """
    written = _merge_and_write(
        ctx, ATTRIBUTE_SET, "attribute_sets", baseline.destination_sets.values()
    )
    return build_identity_map(
        ATTRIBUTE_SET,
        baseline.destination_sets.values(),
        ATTRIBUTE_SET.key_of,
        index_by_key(written, ATTRIBUTE_SET.key_of),
    )


def _rebase_group(row: Row, set_map: IdentityMap) -> Row:
    old_set_id: Any = row.get("attribute_set_id")
    if old_set_id not in set_map:
        raise InconsistentBaseline(
            f"Baseline attribute group {ATTRIBUTE_GROUP.id_of(row)!r} references "
            f"attribute set {old_set_id!r}, which is not part of the baseline"
        )
    return {**row, "attribute_set_id": set_map[old_set_id]}


def migrate_attribute_groups(
    ctx: MigrationContext,
    baseline: BaselineSnapshot,
    set_map: IdentityMap,
) -> IdentityMap:
    """
    Migrate attribute groups and derive the group identity map.

    Baseline groups are moved onto their set's new id before merging. Every
    baseline group is checked first, so an inconsistent baseline aborts the
    stage before the group table is written.

    Args:
        ctx: Migration context
        baseline: Pre-migration snapshot
        set_map: Set identity map from migrate_attribute_sets

    Returns:
        IdentityMap from every baseline group id to its new id

    Raises:
        InconsistentBaseline: If a baseline group's set is not in ``set_map``
    """
    rebased = [_rebase_group(row, set_map) for row in baseline.destination_groups]
    written = _merge_and_write(ctx, ATTRIBUTE_GROUP, "attribute_groups", rebased)
    return build_identity_map(
        ATTRIBUTE_GROUP,
        rebased,
        ATTRIBUTE_GROUP.key_of,
        index_by_key(written, ATTRIBUTE_GROUP.key_of),
    )
