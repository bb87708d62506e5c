# Import models/schemas that should be accessible directly from shared_models

# Import specific API schemas
from .api_schemas import (
    CheckpointPage,
    CheckpointSummaryRead,
    PendingWriteRead,
    ThreadCreate,
    ThreadRead,
    ThreadUpdate,
)

# Import logging utilities
from .logging import (
    LogEventType,
    clear_context,
    configure_logging,
    get_correlation_id,
    get_logger,
    get_thread_id,
    set_correlation_id,
    set_thread_id,
)

__all__ = [
    # Logging
    "LogEventType",
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "set_thread_id",
    "get_thread_id",
    "clear_context",
    # API Schemas
    "api_schemas",
    "CheckpointPage",
    "CheckpointSummaryRead",
    "PendingWriteRead",
    "ThreadCreate",
    "ThreadRead",
    "ThreadUpdate",
]
