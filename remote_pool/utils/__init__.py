"""Utilities for remote_pool."""

from remote_pool.utils.console import ColorfulFormatter, configure_logging
from remote_pool.utils.shell import in_directory, quote_path
from remote_pool.utils.validation import validate_host, validate_port

__all__ = [
    "ColorfulFormatter",
    "configure_logging",
    "in_directory",
    "quote_path",
    "validate_host",
    "validate_port",
]
