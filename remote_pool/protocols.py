"""Protocol interfaces for dependency inversion.

Callers such as an HTTP layer depend on RemoteExecutor rather than on
ConnectionPool, so tests can hand them a fake.

Usage Example:

    from remote_pool.protocols import RemoteExecutor

    async def run_deploy(executor: RemoteExecutor, target, script: str):
        result = await executor.execute_command(target, script)
        return result.to_dict()
"""

from typing import Protocol, runtime_checkable

from remote_pool.models import (
    CommandOptions,
    CommandResult,
    TargetDescriptor,
    TransferResult,
)


@runtime_checkable
class RemoteExecutor(Protocol):
    """Operations offered to callers that manage deployment targets."""

    async def test_connection(self, target: TargetDescriptor) -> bool:
        """Return whether target is reachable. Never raises."""
        ...

    async def execute_command(
        self,
        target: TargetDescriptor,
        command: str,
        options: CommandOptions | None = None,
    ) -> CommandResult:
        """Run command on target. Never raises; failures have exit_code -1."""
        ...

    async def upload_file(
        self, target: TargetDescriptor, local_path: str, remote_path: str
    ) -> TransferResult:
        """Upload a file.

        Raises:
            TransferError: If the file could not be transferred
        """
        ...

    async def download_file(
        self, target: TargetDescriptor, remote_path: str, local_path: str
    ) -> TransferResult:
        """Download a file.

        Raises:
            TransferError: If the file could not be transferred
        """
        ...

    async def shutdown(self) -> None:
        """Release every connection. Idempotent."""
        ...
