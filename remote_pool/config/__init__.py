"""Configuration module for remote_pool.

- Config: Main configuration class (aggregates all components)
- HostKeyVerifier: Manages SSH host key verification
- Settings: Environment variable configuration
"""

from remote_pool.config.host_keys import HostKeyVerifier
from remote_pool.config.main import Config
from remote_pool.config.settings import Settings

__all__ = ["Config", "HostKeyVerifier", "Settings"]
