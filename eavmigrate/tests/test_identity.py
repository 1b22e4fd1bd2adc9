"""Tests for identity maps and identity resolution."""

import pytest

from eavmigrate.errors import InconsistentBaseline, UnresolvedReference
from eavmigrate.migration.identity import (
    build_identity_map,
    index_by_key,
    remap,
    resolve_attribute_cross_schema,
)
from eavmigrate.model.identity import IdentityMap, IdentityMaps
from eavmigrate.model.taxonomy import ATTRIBUTE, ATTRIBUTE_SET


def test_identity_map_is_read_only():
    """Test that an IdentityMap cannot be modified after it is built."""
    identity_map = IdentityMap("attribute_set", {9: 4})
    assert identity_map[9] == 4
    assert len(identity_map) == 1
    with pytest.raises(TypeError):
        identity_map[12] = 13


def test_identity_maps_sizes_default_empty():
    """Test the empty identity map bundle."""
    assert IdentityMaps().sizes() == {"attribute_set": 0, "attribute_group": 0, "attribute": 0}


def test_index_by_key_uses_tuples():
    """Test that composite keys do not collide when values contain a delimiter."""
    rows = [
        {"id": 1, "a": "x-y", "b": "z"},
        {"id": 2, "a": "x", "b": "y-z"},
    ]
    indexed = index_by_key(rows, lambda row: (row["a"], row["b"]))
    assert len(indexed) == 2
    assert indexed[("x-y", "z")]["id"] == 1
    assert indexed[("x", "y-z")]["id"] == 2


def test_build_identity_map_matches_by_key():
    """Test mapping baseline set ids onto rewritten rows."""
    baseline = [
        {"attribute_set_id": 9, "entity_type_id": 4, "attribute_set_name": "Default"},
        {"attribute_set_id": 12, "entity_type_id": 4, "attribute_set_name": "Bags"},
    ]
    written = [
        {"attribute_set_id": 4, "entity_type_id": 4, "attribute_set_name": "Default"},
        {"attribute_set_id": 13, "entity_type_id": 4, "attribute_set_name": "Bags"},
    ]
    identity_map = build_identity_map(
        ATTRIBUTE_SET, baseline, ATTRIBUTE_SET.key_of, index_by_key(written, ATTRIBUTE_SET.key_of)
    )
    assert dict(identity_map) == {9: 4, 12: 13}
    assert identity_map.kind == "attribute_set"


def test_build_identity_map_missing_row_is_fatal():
    """Test that a baseline row absent after the write raises InconsistentBaseline."""
    baseline = [{"attribute_set_id": 9, "entity_type_id": 4, "attribute_set_name": "Default"}]
    with pytest.raises(InconsistentBaseline):
        build_identity_map(ATTRIBUTE_SET, baseline, ATTRIBUTE_SET.key_of, {})


def test_remap_unknown_id_raises_unresolved_reference():
    """Test that remap reports the kind, field and value it could not resolve."""
    identity_map = IdentityMap("attribute", {100: 70})
    assert remap(identity_map, "attribute_id", 100) == 70
    with pytest.raises(UnresolvedReference) as excinfo:
        remap(identity_map, "attribute_id", 999)
    assert excinfo.value.kind == "attribute"
    assert excinfo.value.field == "attribute_id"
    assert excinfo.value.value == 999


def test_resolve_attribute_cross_schema():
    """Test both hops of the cross-schema attribute lookup."""
    source_attributes = {
        70: {"attribute_id": 70, "entity_type_id": 4, "attribute_code": "name"},
        72: {"attribute_id": 72, "entity_type_id": 4, "attribute_code": "renamed_upstream"},
    }
    destination_by_key = index_by_key(
        [{"attribute_id": 170, "entity_type_id": 4, "attribute_code": "name"}],
        ATTRIBUTE.key_of,
    )
    assert resolve_attribute_cross_schema(70, source_attributes, destination_by_key) == 170
    # second hop misses
    assert resolve_attribute_cross_schema(72, source_attributes, destination_by_key) is None
    # first hop misses
    assert resolve_attribute_cross_schema(5, source_attributes, destination_by_key) is None
