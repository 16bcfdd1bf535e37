"""Dependency injection container for remote_pool.

The pool is an explicit object built once at process start and passed to
callers, never module-level state.
"""

from dataclasses import dataclass

from remote_pool.config import Config
from remote_pool.services.pool import ConnectionPool


@dataclass
class Dependencies:
    """Container for remote_pool dependencies.

    Example:
        deps = Dependencies.create()
        try:
            result = await deps.pool.execute_command(target, "uptime")
        finally:
            await deps.cleanup()
    """

    config: Config
    pool: ConnectionPool

    @classmethod
    def create(cls) -> "Dependencies":
        """Create dependencies from the environment.

        Returns:
            Initialized Dependencies instance
        """
        return cls.from_config(Config.from_env())

    @classmethod
    def from_config(cls, config: Config) -> "Dependencies":
        """Create dependencies with custom configuration.

        Args:
            config: Custom Config instance

        Returns:
            Dependencies with pool initialized from config
        """
        pool = ConnectionPool(
            idle_timeout=config.idle_timeout,
            reap_interval=config.reap_interval,
            max_size=config.max_pool_size,
            command_timeout=config.command_timeout,
            connect_timeout=config.connect_timeout,
            transfer_timeout=config.transfer_timeout,
            known_hosts=config.known_hosts_path,
            strict_host_key_checking=config.strict_host_key_checking,
        )
        return cls(config=config, pool=pool)

    async def cleanup(self) -> None:
        """Shut down the pool (close all sessions, stop the reaper)."""
        await self.pool.shutdown()
