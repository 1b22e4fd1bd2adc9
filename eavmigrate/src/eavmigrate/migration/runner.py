"""Runs the four migration stages in order."""

from datetime import datetime
from typing import List, Optional

from eavmigrate.errors import MigrationError
from eavmigrate.model.identity import IdentityMaps
from eavmigrate.model.migration_config import MigrationConfig
from eavmigrate.model.taxonomy import CORE_KINDS
from eavmigrate.monitoring.error_logging import log_error
from eavmigrate.monitoring.progress import NullProgress, ProgressSink
from eavmigrate.monitoring.report import MigrationReport
from eavmigrate.storage.base import RecordStore
from eavmigrate.transform.tables import TableNameMapper
from eavmigrate.config.logging import get_logger
from .backup import BackupLedger
from .baseline import capture_baseline
from .context import MigrationContext, register_primary_keys
from .stages import (
    migrate_attribute_groups,
    migrate_attribute_sets,
    migrate_attributes,
    migrate_entity_attributes,
    migrate_join_table,
)

logger = get_logger(__name__)


def destination_tables(config: MigrationConfig) -> List[str]:
    """Destination tables in the order the forward migration touches them."""
    table_mapper = TableNameMapper(config.table_map)
    names = [table_mapper.destination(kind.table) for kind in CORE_KINDS]
    names += [table_mapper.destination(spec.name) for spec in config.join_tables]
    return names


class EavMigration:
    """
    Migrates the EAV taxonomy and its join tables from one store to another.

    Stages run strictly in sequence and hand their identity maps to the next
    stage as arguments. A failed run leaves its backups in place; call
    rollback() to restore the destination.
    """

    def __init__(
        self,
        source: RecordStore,
        destination: RecordStore,
        config: Optional[MigrationConfig] = None,
        progress: Optional[ProgressSink] = None,
    ):
        self.source = source
        self.destination = destination
        self.config = config or MigrationConfig()
        self.progress = progress or NullProgress()
        self.table_mapper = TableNameMapper(self.config.table_map)
        self.backups = BackupLedger(destination)
        register_primary_keys(destination, self.config, self.table_mapper)

    def tables(self) -> List[str]:
        return destination_tables(self.config)

    def iterations_count(self) -> int:
        return len(CORE_KINDS) + len(self.config.join_tables)

    def perform(self) -> MigrationReport:
        """
        Run every stage.

        Returns:
            MigrationReport for the run

        Raises:
            InconsistentBaseline: If the destination baseline is internally broken
            StorageFailure: If a store call fails
        """
        ctx = MigrationContext(
            source=self.source,
            destination=self.destination,
            config=self.config,
            table_mapper=self.table_mapper,
            backups=self.backups,
        )
        logger.info(f"Starting EAV migration over {self.iterations_count()} step(s)")
        self.progress.start(self.iterations_count())
        stage = "baseline"
        try:
            baseline = capture_baseline(self.source, self.destination, self.table_mapper)

            stage = "attribute_sets"
            set_map = migrate_attribute_sets(ctx, baseline)
            self.progress.advance()

            stage = "attribute_groups"
            group_map = migrate_attribute_groups(ctx, baseline, set_map)
            self.progress.advance()

            stage = "attributes"
            attribute_result = migrate_attributes(ctx, baseline)
            maps = IdentityMaps(
                attribute_sets=set_map,
                attribute_groups=group_map,
                attributes=attribute_result.identity_map,
            )
            self.progress.advance()

            stage = "entity_attributes"
            migrate_entity_attributes(ctx, maps)
            self.progress.advance()

            stage = "join_tables"
            for spec in self.config.join_tables:
                migrate_join_table(ctx, spec, baseline, maps, attribute_result.attributes_by_key)
                self.progress.advance()
        except MigrationError as e:
            log_error(e, operation="EAV migration", stage=stage)
            raise
        finally:
            self.progress.finish()

        ctx.report.identity_map_sizes = maps.sizes()
        ctx.report.finished_at = datetime.now()
        logger.info(
            f"EAV migration complete: {ctx.report.total_rows_written} row(s) written, "
            f"{ctx.report.total_dropped} dropped"
        )
        return ctx.report

    def rollback(self) -> None:
        """Restore every backed-up destination table. Safe to call repeatedly."""
        logger.info("Rolling back EAV migration")
        self.backups.rollback(self.tables())

    def delete_backups(self) -> None:
        """Discard backups once the run is confirmed good."""
        self.backups.delete_backups(self.tables())
