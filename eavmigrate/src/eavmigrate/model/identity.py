"""Old-id to new-id maps published by the taxonomy stages."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Optional


class IdentityMap(Mapping):
    """
    Read-only mapping from a baseline identifier to its post-migration identifier.

    Built once, after the owning stage has written its table, and only read
    by later stages.
    """

    def __init__(self, kind: str, pairs: Optional[Dict[Any, Any]] = None):
        self.kind = kind
        self._pairs = MappingProxyType(dict(pairs or {}))

    def __getitem__(self, old_id: Any) -> Any:
        return self._pairs[old_id]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"IdentityMap(kind={self.kind!r}, size={len(self)})"


@dataclass(frozen=True)
class IdentityMaps:
    """The three identity maps, threaded from one stage into the next."""

    attribute_sets: IdentityMap = field(default_factory=lambda: IdentityMap("attribute_set"))
    attribute_groups: IdentityMap = field(default_factory=lambda: IdentityMap("attribute_group"))
    attributes: IdentityMap = field(default_factory=lambda: IdentityMap("attribute"))

    def sizes(self) -> Dict[str, int]:
        return {
            "attribute_set": len(self.attribute_sets),
            "attribute_group": len(self.attribute_groups),
            "attribute": len(self.attributes),
        }
