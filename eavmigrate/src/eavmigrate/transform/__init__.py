"""Row and table-name transformation."""

from .fields import RecordTransformer, TransformerFactory
from .tables import TableNameMapper

__all__ = ["RecordTransformer", "TransformerFactory", "TableNameMapper"]
