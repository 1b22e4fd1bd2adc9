"""Per-table outcome of a migration run."""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class TableReport(BaseModel):
    """What one stage did to one destination table."""

    table: str
    stage: str
    source_rows: int = 0
    rows_written: int = 0
    merged: int = 0  # source rows seeded from an existing destination row
    carried_over: int = 0  # destination-only rows kept alongside the source rows
    dropped_unresolved: int = 0
    dropped_duplicate: int = 0
    skipped: bool = False


class MigrationReport(BaseModel):
    """Summary of a whole run."""

    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    tables: List[TableReport] = Field(default_factory=list)
    identity_map_sizes: Dict[str, int] = Field(default_factory=dict)

    def add(self, table_report: TableReport) -> TableReport:
        self.tables.append(table_report)
        return table_report

    def for_table(self, table: str) -> Optional[TableReport]:
        for table_report in self.tables:
            if table_report.table == table:
                return table_report
        return None

    @property
    def total_rows_written(self) -> int:
        return sum(t.rows_written for t in self.tables)

    @property
    def total_dropped(self) -> int:
        return sum(t.dropped_unresolved + t.dropped_duplicate for t in self.tables)


def save_report(report: MigrationReport, report_path: Path) -> None:
    """
    Save a MigrationReport to a JSON file.

    Note:
        Creates parent directories if they don't exist.
    """
    report_path = Path(report_path)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(report.model_dump_json(indent=2), encoding="utf-8")
