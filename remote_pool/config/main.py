"""Application configuration.

Delegates to specialized components:
- Settings: Environment variables
- HostKeyVerifier: Manages known_hosts
"""

import logging
import os
from dataclasses import dataclass

from remote_pool.config.host_keys import HostKeyVerifier
from remote_pool.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """Application configuration.

    Aggregates settings from the environment and the host key policy.
    """

    settings: Settings
    host_keys: HostKeyVerifier

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment.

        Returns:
            Configured instance with all components initialized
        """
        settings = Settings.from_env()
        host_keys = HostKeyVerifier(
            known_hosts_path=os.getenv("REMOTE_POOL_KNOWN_HOSTS"),
            strict_checking=cls._get_bool_env("REMOTE_POOL_STRICT_HOST_KEY_CHECKING", True),
        )
        return cls(settings=settings, host_keys=host_keys)

    @staticmethod
    def _get_bool_env(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() != "false"

    # Delegate to settings for convenience
    @property
    def idle_timeout(self) -> int:
        """Seconds a session may sit unused before the reaper closes it."""
        return self.settings.idle_timeout

    @property
    def reap_interval(self) -> int:
        """Seconds between reaper ticks."""
        return self.settings.reap_interval

    @property
    def max_pool_size(self) -> int:
        """Maximum number of pooled sessions."""
        return self.settings.max_pool_size

    @property
    def command_timeout(self) -> int:
        """Default command timeout in seconds."""
        return self.settings.command_timeout

    @property
    def connect_timeout(self) -> int:
        """SSH connect/handshake timeout in seconds."""
        return self.settings.connect_timeout

    @property
    def transfer_timeout(self) -> int:
        """Upload/download timeout in seconds."""
        return self.settings.transfer_timeout

    @property
    def known_hosts_path(self) -> str | None:
        """Path to known_hosts file or None if disabled."""
        return self.host_keys.get_known_hosts_path()

    @property
    def strict_host_key_checking(self) -> bool:
        """Whether to reject unknown host keys."""
        return self.host_keys.strict_checking
