from .error_handler import (
    handle_exceptions,
    convert_exceptions,
    is_auth_error,
    is_fatal_error,
    ErrorHandler,
)
from .logging_config import log_manager, configure_logging
from .execution_timer import ExecutionTimer

__all__ = [
    "handle_exceptions",
    "convert_exceptions",
    "is_auth_error",
    "is_fatal_error",
    "ErrorHandler",
    "log_manager",
    "configure_logging",
    "ExecutionTimer",
]
