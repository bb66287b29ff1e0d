"""Core module for configuration and utilities."""

from modpanel.core.config import Settings, settings
from modpanel.core.logging import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
    evaluation_context,
    setup_logging,
    setup_logging_from_settings,
    log_error,
    log_warning,
    log_info,
)

__all__ = [
    "Settings",
    "settings",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "evaluation_context",
    "setup_logging",
    "setup_logging_from_settings",
    "log_error",
    "log_warning",
    "log_info",
]
