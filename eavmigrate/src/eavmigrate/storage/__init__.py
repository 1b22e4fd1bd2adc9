"""Record store backends."""

from .base import RecordStore
from .memory import InMemoryRecordStore
from .csv_store import CsvRecordStore

__all__ = ["RecordStore", "InMemoryRecordStore", "CsvRecordStore"]
