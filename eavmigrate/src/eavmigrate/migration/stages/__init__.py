"""The four migration stages, in execution order."""

from .taxonomy import migrate_attribute_sets, migrate_attribute_groups
from .attributes import migrate_attributes, AttributeStageResult
from .assignments import migrate_entity_attributes, remap_assignment
from .join_tables import migrate_join_table, JoinTableMerger

__all__ = [
    "migrate_attribute_sets",
    "migrate_attribute_groups",
    "migrate_attributes",
    "AttributeStageResult",
    "migrate_entity_attributes",
    "remap_assignment",
    "migrate_join_table",
    "JoinTableMerger",
]
