"""Pooled SSH sessions for running commands and moving files on deployment targets."""

from remote_pool.dependencies import Dependencies
from remote_pool.exceptions import (
    AuthenticationError,
    ConnectionError,
    ExecutionError,
    ExecutionTimeout,
    InvalidTarget,
    PoolClosedError,
    RemotePoolError,
    TransferError,
)
from remote_pool.models import (
    CommandOptions,
    CommandResult,
    PasswordAuth,
    PrivateKeyAuth,
    TargetDescriptor,
    TargetIdentity,
    TransferResult,
)
from remote_pool.services.pool import ConnectionPool

__all__ = [
    "AuthenticationError",
    "CommandOptions",
    "CommandResult",
    "ConnectionError",
    "ConnectionPool",
    "Dependencies",
    "ExecutionError",
    "ExecutionTimeout",
    "InvalidTarget",
    "PasswordAuth",
    "PoolClosedError",
    "PrivateKeyAuth",
    "RemotePoolError",
    "TargetDescriptor",
    "TargetIdentity",
    "TransferError",
    "TransferResult",
]
