"""Key-based merge of transformed source rows with existing destination rows."""

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from eavmigrate.errors import UnresolvedReference
from eavmigrate.model.records import Insert, Row, RowIntent, intent_for, without_field
from eavmigrate.transform.fields import RecordTransformer
from eavmigrate.config.logging import get_logger
from .identity import Key

logger = get_logger(__name__)


@dataclass
class MergeOutcome:
    intents: List[RowIntent] = field(default_factory=list)
    remaining: Dict[Key, Row] = field(default_factory=dict)
    merged: int = 0
    dropped: int = 0


def merge_source_rows(
    source_rows: Iterable[Row],
    transformer: RecordTransformer,
    id_field: Optional[str],
    source_key_of: Callable[[Row], Key],
    existing_by_key: Dict[Key, Row],
    keep_seed_id: bool = False,
    finish: Optional[Callable[[Row, Row], Row]] = None,
) -> MergeOutcome:
    """
    Seed-then-transform every source row.

    A source row whose key matches an existing destination row starts from
    that row's values, so destination-only fields survive; the existing row
    is consumed. Unmatched source rows start from an all-null row.

    Args:
        source_rows: Rows read from the source table
        transformer: Source to destination row transformer
        id_field: Identifier column of the destination table
        source_key_of: Key of a source row in destination terms; raising
            UnresolvedReference drops the row
        existing_by_key: Existing destination rows indexed by the same key
        keep_seed_id: Seed with the existing row's identifier too
        finish: Optional hook applied to (source row, destination row) after
            the transform; raising UnresolvedReference drops the row

    Returns:
        MergeOutcome with one intent per surviving source row and the
        destination rows that matched nothing
    """
    outcome = MergeOutcome(remaining=dict(existing_by_key))
    for source_row in source_rows:
        try:
            key = source_key_of(source_row)
        except UnresolvedReference as e:
            logger.debug(f"Dropping source row: {e}")
            outcome.dropped += 1
            continue

        existing = outcome.remaining.pop(key, None)
        seed = None
        if existing is not None:
            outcome.merged += 1
            seed = existing if keep_seed_id else without_field(existing, id_field)

        row = transformer.transform(source_row, seed)
        if finish is not None:
            try:
                row = finish(source_row, row)
            except UnresolvedReference as e:
                logger.debug(f"Dropping source row: {e}")
                outcome.dropped += 1
                continue
        outcome.intents.append(intent_for(row, id_field))
    return outcome


def fresh_inserts(rows: Iterable[Row], id_field: Optional[str]) -> List[RowIntent]:
    """Insert intents for rows that must get a new identifier."""
    return [Insert(fields=without_field(row, id_field)) for row in rows]
