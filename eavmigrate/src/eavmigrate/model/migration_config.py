"""Declarative migration layout: table names, keys, join tables, field rules."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

from .taxonomy import CORE_KINDS

CONVERTERS = ("int", "str", "bool_int", "null_if_empty")


class JoinTableSpec(BaseModel):
    """A many-to-many table merged by composite business key in the last stage."""

    name: str
    key_fields: List[str] = Field(default_factory=list)  # empty: straight copy, no dedup
    attribute_field: str = "attribute_id"
    set_reference_fields: List[str] = Field(default_factory=list)
    group_reference_fields: List[str] = Field(default_factory=list)

    @property
    def keys_on_attribute(self) -> bool:
        return self.attribute_field in self.key_fields


class FieldRule(BaseModel):
    """Column-level rules applied when a source row is copied into a destination row."""

    rename: Dict[str, str] = Field(default_factory=dict)  # source field -> destination field
    ignore: List[str] = Field(default_factory=list)
    defaults: Dict[str, Any] = Field(default_factory=dict)
    convert: Dict[str, str] = Field(default_factory=dict)  # destination field -> converter

    @field_validator("convert")
    @classmethod
    def known_converters(cls, value: Dict[str, str]) -> Dict[str, str]:
        unknown = sorted(set(value.values()) - set(CONVERTERS))
        if unknown:
            raise ValueError(
                f"Unknown converter(s) {unknown}; expected one of {list(CONVERTERS)}"
            )
        return value


def default_join_tables() -> List[JoinTableSpec]:
    return [
        JoinTableSpec(
            name="eav_entity_type",
            key_fields=["entity_type_code"],
            set_reference_fields=["default_attribute_set_id"],
        ),
        JoinTableSpec(name="catalog_eav_attribute", key_fields=["attribute_id"]),
        JoinTableSpec(name="customer_eav_attribute", key_fields=["attribute_id"]),
        JoinTableSpec(name="eav_attribute_label", key_fields=["attribute_id", "store_id"]),
        JoinTableSpec(
            name="customer_form_attribute", key_fields=["form_code", "attribute_id"]
        ),
        JoinTableSpec(name="eav_attribute_option"),
    ]


def default_primary_keys() -> Dict[str, str]:
    keys = {kind.table: kind.id_field for kind in CORE_KINDS}
    keys.update(
        {
            "eav_entity_type": "entity_type_id",
            "eav_attribute_label": "attribute_label_id",
            "eav_attribute_option": "option_id",
        }
    )
    return keys


class MigrationConfig(BaseModel):
    """Everything the migration needs to know about the two schemas."""

    table_map: Dict[str, str] = Field(default_factory=dict)  # source table -> destination table
    primary_keys: Dict[str, str] = Field(default_factory=default_primary_keys)
    join_tables: List[JoinTableSpec] = Field(default_factory=default_join_tables)
    field_rules: Dict[str, FieldRule] = Field(default_factory=dict)  # keyed by source table

    @field_validator("join_tables")
    @classmethod
    def unique_join_tables(cls, value: List[JoinTableSpec]) -> List[JoinTableSpec]:
        names = [spec.name for spec in value]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"Join table(s) listed more than once: {duplicates}")
        return value

    def rule_for(self, source_table: str) -> FieldRule:
        return self.field_rules.get(source_table, FieldRule())

    def primary_key(self, table: str) -> Optional[str]:
        return self.primary_keys.get(table)
