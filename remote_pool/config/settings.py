"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ENV_PREFIX = "REMOTE_POOL_"


@dataclass
class Settings:
    """Pool settings from environment.

    Times are in seconds.
    """

    # Connection pool
    idle_timeout: int = field(default=300)
    reap_interval: int = field(default=60)
    max_pool_size: int = field(default=100)

    # Remote operations
    command_timeout: int = field(default=30)
    connect_timeout: int = field(default=10)
    transfer_timeout: int = field(default=300)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)
    log_file: str | None = field(default=None)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from REMOTE_POOL_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            idle_timeout=cls._get_positive_int("IDLE_TIMEOUT", 300),
            reap_interval=cls._get_positive_int("REAP_INTERVAL", 60),
            max_pool_size=cls._get_positive_int("MAX_SIZE", 100),
            command_timeout=cls._get_positive_int("COMMAND_TIMEOUT", 30),
            connect_timeout=cls._get_positive_int("CONNECT_TIMEOUT", 10),
            transfer_timeout=cls._get_positive_int("TRANSFER_TIMEOUT", 300),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("LOG_COLORS", True),
            log_file=os.getenv(f"{ENV_PREFIX}LOG_FILE") or None,
        )

    @staticmethod
    def _get_positive_int(name: str, default: int) -> int:
        """Get a positive integer from environment.

        Args:
            name: Variable name without the REMOTE_POOL_ prefix
            default: Default value if unset or invalid

        Returns:
            Integer value from environment or default
        """
        key = f"{ENV_PREFIX}{name}"
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

        if parsed <= 0:
            logger.warning("%s must be > 0, got %d, using default %d", key, parsed, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(name: str, default: bool) -> bool:
        value = os.getenv(f"{ENV_PREFIX}{name}")
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
