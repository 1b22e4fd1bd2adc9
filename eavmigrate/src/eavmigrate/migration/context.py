"""Collaborators shared by every migration stage."""

from dataclasses import dataclass, field
from typing import List, Optional

from eavmigrate.model.migration_config import MigrationConfig
from eavmigrate.model.records import Row
from eavmigrate.model.taxonomy import CORE_KINDS
from eavmigrate.monitoring.report import MigrationReport
from eavmigrate.storage.base import RecordStore
from eavmigrate.transform.fields import RecordTransformer, TransformerFactory
from eavmigrate.transform.tables import TableNameMapper
from .backup import BackupLedger


def register_primary_keys(
    destination: RecordStore, config: MigrationConfig, table_mapper: TableNameMapper
) -> None:
    """Tell the destination store the identifier column of every table the run writes."""
    for table, id_field in config.primary_keys.items():
        destination.primary_keys.setdefault(table_mapper.destination(table), id_field)
    for kind in CORE_KINDS:
        destination.primary_keys.setdefault(table_mapper.destination(kind.table), kind.id_field)


@dataclass
class MigrationContext:
    """Stores, transformers and bookkeeping for one run. Holds no identity maps."""

    source: RecordStore
    destination: RecordStore
    config: MigrationConfig = field(default_factory=MigrationConfig)
    table_mapper: Optional[TableNameMapper] = None
    transformers: Optional[TransformerFactory] = None
    backups: Optional[BackupLedger] = None
    report: MigrationReport = field(default_factory=MigrationReport)

    def __post_init__(self):
        if self.table_mapper is None:
            self.table_mapper = TableNameMapper(self.config.table_map)
        if self.transformers is None:
            self.transformers = TransformerFactory(self.config, self.destination)
        if self.backups is None:
            self.backups = BackupLedger(self.destination)
        register_primary_keys(self.destination, self.config, self.table_mapper)

    def destination_table(self, source_table: str) -> str:
        return self.table_mapper.destination(source_table)

    def transformer(self, source_table: str) -> RecordTransformer:
        return self.transformers.get(source_table, self.destination_table(source_table))

    def source_rows(self, table: str) -> List[Row]:
        return self.source.get_rows(table) if self.source.has_table(table) else []

    def destination_rows(self, table: str) -> List[Row]:
        return self.destination.get_rows(table) if self.destination.has_table(table) else []
