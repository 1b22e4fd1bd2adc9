"""Data models for the EAV taxonomy migration."""

from .records import Row, Insert, Update, RowIntent, intent_for, without_field
from .taxonomy import (
    EntityKind,
    ATTRIBUTE_SET,
    ATTRIBUTE_GROUP,
    ATTRIBUTE,
    ENTITY_ATTRIBUTE,
    CORE_KINDS,
)
from .identity import IdentityMap, IdentityMaps
from .migration_config import JoinTableSpec, FieldRule, MigrationConfig

__all__ = [
    "Row",
    "Insert",
    "Update",
    "RowIntent",
    "intent_for",
    "without_field",
    "EntityKind",
    "ATTRIBUTE_SET",
    "ATTRIBUTE_GROUP",
    "ATTRIBUTE",
    "ENTITY_ATTRIBUTE",
    "CORE_KINDS",
    "IdentityMap",
    "IdentityMaps",
    "JoinTableSpec",
    "FieldRule",
    "MigrationConfig",
]
