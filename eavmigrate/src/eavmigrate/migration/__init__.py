"""EAV taxonomy migration: identity resolution, merge stages and the runner."""

from .baseline import BaselineSnapshot, capture_baseline
from .identity import (
    index_by_key,
    build_identity_map,
    remap,
    resolve_attribute_cross_schema,
)
from .backup import BackupLedger
from .context import MigrationContext
from .runner import EavMigration, destination_tables

__all__ = [
    "BaselineSnapshot",
    "capture_baseline",
    "index_by_key",
    "build_identity_map",
    "remap",
    "resolve_attribute_cross_schema",
    "BackupLedger",
    "MigrationContext",
    "EavMigration",
    "destination_tables",
]
