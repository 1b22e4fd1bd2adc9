"""Error logging with migration context."""

from typing import Any, Dict, Optional

from eavmigrate.errors import InconsistentBaseline, StorageFailure, UnresolvedReference
from eavmigrate.config.logging import get_logger

logger = get_logger(__name__)


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    operation: Optional[str] = None,
    table_name: Optional[str] = None,
    stage: Optional[str] = None,
    log_level: str = "error",
) -> None:
    """
    Log an error with its type, message, context and traceback.

    Args:
        error: The exception that occurred
        context: Additional context dictionary (e.g., {'rows': 1000})
        operation: Description of the operation being performed
        table_name: Destination table involved
        stage: Migration stage name
        log_level: Logging level ('error', 'warning', 'critical')
    """
    error_type = type(error).__name__

    context_parts = []
    if operation:
        context_parts.append(f"Operation: {operation}")
    if stage:
        context_parts.append(f"Stage: {stage}")
    if table_name:
        context_parts.append(f"Table: {table_name}")
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        context_parts.append(f"Context: {context_str}")

    error_msg = f"[{error_type}] {error}"
    if context_parts:
        error_msg += " | " + " | ".join(context_parts)

    if log_level.lower() == "critical":
        logger.critical(error_msg, exc_info=error)
    elif log_level.lower() == "warning":
        logger.warning(error_msg, exc_info=error)
    else:
        logger.error(error_msg, exc_info=error)

    if isinstance(error, StorageFailure):
        logger.debug(f"StorageFailure details: {error.operation} on {error.table}")
    elif isinstance(error, InconsistentBaseline):
        logger.debug("InconsistentBaseline details: the destination baseline references missing rows")
    elif isinstance(error, UnresolvedReference):
        logger.debug(f"UnresolvedReference details: {error.kind} {error.field}={error.value!r}")

    logger.info("Recover with rollback, fix the cause, then rerun the migration")
