"""Pooled SSH session model."""

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from remote_pool.models.target import TargetDescriptor, TargetIdentity

if TYPE_CHECKING:
    import asyncssh

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Session:
    """One authenticated connection to a single target.

    The session owns its transport. Once disposed it is never reused; a
    reconnect always produces a new Session object.
    """

    target: TargetDescriptor
    connection: "asyncssh.SSHClientConnection"
    created_at: float = field(default_factory=time.monotonic)
    last_used: float = field(default_factory=time.monotonic)
    in_use: int = field(default=0, init=False)
    _disposed: bool = field(default=False, init=False, repr=False)

    @property
    def identity(self) -> TargetIdentity:
        return self.target.identity

    def touch(self) -> None:
        """Update last-used timestamp (never moves backwards)."""
        self.last_used = max(self.last_used, time.monotonic())

    def retain(self) -> None:
        """Mark one more operation as running on this session."""
        self.in_use += 1
        self.touch()

    def release(self) -> None:
        """Mark an operation finished; counts as use."""
        self.in_use = max(0, self.in_use - 1)
        self.touch()

    @property
    def is_busy(self) -> bool:
        return self.in_use > 0

    def idle_for(self, now: float | None = None) -> float:
        """Seconds since the session was last used."""
        if now is None:
            now = time.monotonic()
        return max(0.0, now - self.last_used)

    def matches(self, target: TargetDescriptor) -> bool:
        """Check the session was opened with the same credential as target."""
        return self.target.auth == target.auth

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def is_alive(self) -> bool:
        """Optimistic liveness check; reuse can still fail."""
        if self._disposed:
            return False
        return not self.connection.is_closed()

    def dispose(self) -> None:
        """Close the transport. Close failures are logged, not raised."""
        if self._disposed:
            return
        self._disposed = True
        try:
            self.connection.close()
        except Exception as e:
            logger.warning("Error closing connection to %s: %s", self.identity, e)
