"""Descriptors for the EAV taxonomy tables."""

from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict

from .records import Row


class EntityKind(BaseModel):
    """A taxonomy table: its name, identifier column and identity key."""

    model_config = ConfigDict(frozen=True)

    name: str
    table: str
    id_field: str
    key_fields: Tuple[str, ...] = ()

    def key_of(self, row: Row) -> Tuple:
        """Identity key of a row of this kind."""
        return tuple(row.get(field) for field in self.key_fields)

    def id_of(self, row: Row) -> Optional[object]:
        return row.get(self.id_field)


ATTRIBUTE_SET = EntityKind(
    name="attribute_set",
    table="eav_attribute_set",
    id_field="attribute_set_id",
    key_fields=("entity_type_id", "attribute_set_name"),
)

ATTRIBUTE_GROUP = EntityKind(
    name="attribute_group",
    table="eav_attribute_group",
    id_field="attribute_group_id",
    key_fields=("attribute_set_id", "attribute_group_name"),
)

ATTRIBUTE = EntityKind(
    name="attribute",
    table="eav_attribute",
    id_field="attribute_id",
    key_fields=("entity_type_id", "attribute_code"),
)

# Assignments carry no business key of their own; this pair is unique per set.
ENTITY_ATTRIBUTE = EntityKind(
    name="entity_attribute",
    table="eav_entity_attribute",
    id_field="entity_attribute_id",
    key_fields=("attribute_set_id", "attribute_id"),
)

CORE_KINDS = (ATTRIBUTE_SET, ATTRIBUTE_GROUP, ATTRIBUTE, ENTITY_ATTRIBUTE)
