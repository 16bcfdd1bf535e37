"""Exception taxonomy for remote_pool."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from remote_pool.models.target import TargetIdentity


class RemotePoolError(Exception):
    """Base class for remote_pool errors."""

    def __init__(self, message: str, target: "TargetIdentity | None" = None):
        """Initialize error.

        Args:
            message: Human readable description
            target: Identity of the target the error relates to, if any
        """
        self.message = message
        self.target = target
        if target is not None:
            message = f"{target}: {message}"
        super().__init__(message)


class InvalidTarget(RemotePoolError, ValueError):
    """Target descriptor cannot be used (no credential, bad port or host)."""


class AuthenticationError(RemotePoolError):
    """Credential rejected or missing."""


class ConnectionError(RemotePoolError):
    """Host unreachable or SSH handshake failed."""

    def __init__(
        self,
        message: str,
        target: "TargetIdentity | None" = None,
        original_error: Exception | None = None,
    ):
        self.original_error = original_error
        super().__init__(message, target)


class ExecutionTimeout(RemotePoolError):
    """Remote command did not finish within its timeout."""

    def __init__(self, timeout: float, target: "TargetIdentity | None" = None):
        self.timeout = timeout
        super().__init__(f"Command timed out after {timeout:g}s", target)


class ExecutionError(RemotePoolError):
    """Transport failed while running a command on a pooled session."""


class PoolClosedError(RemotePoolError):
    """Operation attempted on a pool that has been shut down."""

    def __init__(self, target: "TargetIdentity | None" = None):
        super().__init__("Connection pool is shut down", target)


class TransferError(RemotePoolError):
    """File could not be transferred to or from the target."""

    def __init__(
        self,
        message: str,
        target: "TargetIdentity | None" = None,
        local_path: str | None = None,
        remote_path: str | None = None,
        direction: str | None = None,
    ):
        self.local_path = local_path
        self.remote_path = remote_path
        self.direction = direction
        super().__init__(message, target)
