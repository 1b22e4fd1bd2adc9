"""Row and write-intent models."""

from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

Row = Dict[str, Any]


class Insert(BaseModel):
    """Write a row under a freshly assigned identifier."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["insert"] = "insert"
    fields: Row = Field(default_factory=dict)


class Update(BaseModel):
    """Write a row under an identifier that is already known."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["update"] = "update"
    id: Any
    fields: Row = Field(default_factory=dict)


RowIntent = Union[Insert, Update]


def without_field(row: Row, field: Optional[str]) -> Row:
    """Copy of ``row`` with ``field`` removed (no-op when field is None)."""
    return {k: v for k, v in row.items() if k != field}


def intent_for(row: Row, id_field: Optional[str]) -> RowIntent:
    """
    Pick the write intent for an assembled destination row.

    Rows that carry a value in their identifier column keep it, everything
    else is inserted fresh.

    Args:
        row: Destination-shaped row
        id_field: Identifier column of the destination table, if any

    Returns:
        Update when the row has an identifier, Insert otherwise
    """
    if id_field and row.get(id_field) is not None:
        return Update(id=row[id_field], fields=without_field(row, id_field))
    return Insert(fields=without_field(row, id_field))
