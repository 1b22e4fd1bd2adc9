"""Source to destination table-name mapping."""

from typing import Dict, Optional


class TableNameMapper:
    """Tables keep their name unless the map renames them."""

    def __init__(self, table_map: Optional[Dict[str, str]] = None):
        self.table_map = dict(table_map or {})

    def destination(self, source_table: str) -> str:
        return self.table_map.get(source_table, source_table)
