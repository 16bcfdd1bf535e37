"""Data models for remote_pool."""

from remote_pool.models.command import LOCAL_FAILURE_CODE, CommandOptions, CommandResult
from remote_pool.models.session import Session
from remote_pool.models.target import (
    AuthMethod,
    PasswordAuth,
    PrivateKeyAuth,
    TargetDescriptor,
    TargetIdentity,
)
from remote_pool.models.transfer import TransferDirection, TransferResult

__all__ = [
    "AuthMethod",
    "CommandOptions",
    "CommandResult",
    "LOCAL_FAILURE_CODE",
    "PasswordAuth",
    "PrivateKeyAuth",
    "Session",
    "TargetDescriptor",
    "TargetIdentity",
    "TransferDirection",
    "TransferResult",
]
