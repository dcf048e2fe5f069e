"""
Common utilities and shared modules.
"""

from audnet.common.config import get_settings
from audnet.common.exceptions import AudnetError, BadInputError, ConfigError, TransportError
from audnet.common.logger import get_logger, log_context, setup_logging

__all__ = [
    "get_settings",
    "setup_logging",
    "get_logger",
    "log_context",
    "AudnetError",
    "BadInputError",
    "ConfigError",
    "TransportError",
]
