"""Identity resolution: composite keys, identity maps and cross-schema lookups."""

from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from eavmigrate.errors import InconsistentBaseline, UnresolvedReference
from eavmigrate.model.identity import IdentityMap
from eavmigrate.model.records import Row
from eavmigrate.model.taxonomy import ATTRIBUTE, EntityKind
from eavmigrate.config.logging import get_logger

logger = get_logger(__name__)

Key = Tuple[Any, ...]


def index_by_key(rows: Iterable[Row], key_of: Callable[[Row], Key]) -> Dict[Key, Row]:
    """
    Index rows by key. Later rows win on a collision, which is logged.

    Args:
        rows: Rows to index
        key_of: Key function

    Returns:
        Dict from key to row
    """
    indexed: Dict[Key, Row] = {}
    for row in rows:
        key = key_of(row)
        if key in indexed:
            logger.warning(f"Duplicate key {key!r}; keeping the later row")
        indexed[key] = row
    return indexed


def build_identity_map(
    kind: EntityKind,
    baseline_rows: Iterable[Row],
    baseline_key_of: Callable[[Row], Key],
    written_by_key: Mapping[Key, Row],
) -> IdentityMap:
    """
    Map every baseline id to the id of the freshly written row with the same key.

    Args:
        kind: Entity kind (supplies the identifier column)
        baseline_rows: Pre-migration destination rows
        baseline_key_of: Key of a baseline row in post-migration terms
        written_by_key: Re-read destination table indexed by identity key

    Returns:
        IdentityMap covering every baseline row

    Raises:
        InconsistentBaseline: If a baseline row has no counterpart after the write
    """
    pairs: Dict[Any, Any] = {}
    for row in baseline_rows:
        key = baseline_key_of(row)
        written = written_by_key.get(key)
        if written is None:
            raise InconsistentBaseline(
                f"Baseline {kind.name} {kind.id_of(row)!r} with key {key!r} "
                f"is missing from {kind.table} after the write"
            )
        pairs[kind.id_of(row)] = kind.id_of(written)
    logger.info(f"Built {kind.name} identity map with {len(pairs)} entries")
    return IdentityMap(kind.name, pairs)


def remap(identity_map: IdentityMap, field: str, value: Any) -> Any:
    """
    Translate ``value`` through ``identity_map``.

    Raises:
        UnresolvedReference: If the map has no entry for ``value``
    """
    try:
        return identity_map[value]
    except KeyError:
        raise UnresolvedReference(identity_map.kind, field, value) from None


def resolve_attribute_cross_schema(
    source_attribute_id: Any,
    source_attributes: Mapping[Any, Row],
    destination_attributes_by_key: Mapping[Key, Row],
) -> Optional[Any]:
    """
    Destination attribute id for a source attribute id, via the business key.

    First hop: the source attribute's (entity type, code) from the source
    snapshot. Second hop: that key in the post-merge destination attribute
    table. None means either hop failed; callers drop the reference.

    Args:
        source_attribute_id: Attribute id as stored in the source schema
        source_attributes: Source attributes keyed by id
        destination_attributes_by_key: Post-merge destination attributes keyed by identity key

    Returns:
        Destination attribute id, or None
    """
    source_row = source_attributes.get(source_attribute_id)
    if source_row is None:
        return None
    destination_row = destination_attributes_by_key.get(ATTRIBUTE.key_of(source_row))
    if destination_row is None:
        return None
    return ATTRIBUTE.id_of(destination_row)
