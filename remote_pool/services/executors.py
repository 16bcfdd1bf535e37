"""Command and file transfer executors run against one SSH connection."""

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import asyncssh

from remote_pool.exceptions import ExecutionError, ExecutionTimeout, TransferError
from remote_pool.models import CommandResult, TransferDirection, TransferResult
from remote_pool.utils.shell import in_directory

if TYPE_CHECKING:
    from remote_pool.models import TargetIdentity

logger = logging.getLogger(__name__)

PROBE_COMMAND = 'echo "connection test"'


def _decode(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def _exit_code(result: asyncssh.SSHCompletedProcess) -> int:
    """Remote exit status; signals map to 128+N so -1 stays reserved."""
    code = result.returncode
    if code is None:
        return 1
    if code < 0:
        return 128 - code
    return code


async def run_command(
    conn: asyncssh.SSHClientConnection,
    command: str,
    timeout: float,
    working_directory: str | None = None,
    identity: "TargetIdentity | None" = None,
) -> CommandResult:
    """Execute a command, racing it against a timeout.

    Args:
        conn: SSH connection to execute on
        command: Shell command line
        timeout: Seconds to wait before giving up
        working_directory: Directory to cd into first, if given
        identity: Target identity used in error messages

    Returns:
        CommandResult with stdout, stderr and remote exit code

    Raises:
        ExecutionTimeout: If the command outlives the timeout
        ExecutionError: If the transport fails during the run
    """
    full_command = in_directory(command, working_directory)

    try:
        result = await asyncio.wait_for(conn.run(full_command, check=False), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ExecutionTimeout(timeout, target=identity) from e
    except (OSError, asyncssh.Error) as e:
        raise ExecutionError(f"Command execution failed: {e}", target=identity) from e

    return CommandResult(
        stdout=_decode(result.stdout),
        stderr=_decode(result.stderr),
        exit_code=_exit_code(result),
    )


async def probe(conn: asyncssh.SSHClientConnection, timeout: float) -> bool:
    """Run a no-op command and report whether it round-tripped."""
    result = await run_command(conn, PROBE_COMMAND, timeout)
    if not result.success:
        logger.warning("Connection probe exited %d: %s", result.exit_code, result.stderr.strip())
    return result.success


async def _sftp_put(conn: asyncssh.SSHClientConnection, local_path: str, remote_path: str) -> None:
    async with conn.start_sftp_client() as sftp:
        await sftp.put(local_path, remote_path)


async def _sftp_get(conn: asyncssh.SSHClientConnection, remote_path: str, local_path: str) -> None:
    async with conn.start_sftp_client() as sftp:
        await sftp.get(remote_path, local_path)


async def upload_file(
    conn: asyncssh.SSHClientConnection,
    local_path: str,
    remote_path: str,
    timeout: float | None = None,
    identity: "TargetIdentity | None" = None,
) -> TransferResult:
    """Copy a local file to the remote host over SFTP.

    Args:
        conn: SSH connection to transfer over
        local_path: File on this machine
        remote_path: Destination path on the remote host
        timeout: Seconds allowed for the whole transfer, None for no limit
        identity: Target identity used in error messages

    Raises:
        TransferError: If the source is missing or the transfer fails or
            times out
    """
    source = Path(local_path)
    if not source.is_file():
        raise TransferError(
            f"Source file not found: {local_path}",
            target=identity,
            local_path=local_path,
            remote_path=remote_path,
            direction=TransferDirection.UPLOAD.value,
        )

    try:
        await asyncio.wait_for(_sftp_put(conn, str(source), remote_path), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise TransferError(
            f"Upload timed out after {timeout:g}s",
            target=identity,
            local_path=local_path,
            remote_path=remote_path,
            direction=TransferDirection.UPLOAD.value,
        ) from e
    except (OSError, asyncssh.Error) as e:
        raise TransferError(
            f"Upload failed: {e}",
            target=identity,
            local_path=local_path,
            remote_path=remote_path,
            direction=TransferDirection.UPLOAD.value,
        ) from e

    return TransferResult(
        direction=TransferDirection.UPLOAD,
        local_path=local_path,
        remote_path=remote_path,
        bytes_transferred=source.stat().st_size,
    )


async def download_file(
    conn: asyncssh.SSHClientConnection,
    remote_path: str,
    local_path: str,
    timeout: float | None = None,
    identity: "TargetIdentity | None" = None,
) -> TransferResult:
    """Copy a remote file to this machine over SFTP.

    The file is written next to local_path with a .part suffix and renamed
    into place once complete, so a failed download never leaves a truncated
    file at local_path.

    Raises:
        TransferError: If the transfer fails or times out
    """
    dest = Path(local_path)
    partial = dest.with_name(dest.name + ".part")
    try:
        await asyncio.wait_for(_sftp_get(conn, remote_path, str(partial)), timeout=timeout)
        partial.replace(dest)
    except asyncio.TimeoutError as e:
        raise TransferError(
            f"Download timed out after {timeout:g}s",
            target=identity,
            local_path=local_path,
            remote_path=remote_path,
            direction=TransferDirection.DOWNLOAD.value,
        ) from e
    except (OSError, asyncssh.Error) as e:
        raise TransferError(
            f"Download failed: {e}",
            target=identity,
            local_path=local_path,
            remote_path=remote_path,
            direction=TransferDirection.DOWNLOAD.value,
        ) from e
    finally:
        partial.unlink(missing_ok=True)

    return TransferResult(
        direction=TransferDirection.DOWNLOAD,
        local_path=local_path,
        remote_path=remote_path,
        bytes_transferred=dest.stat().st_size,
    )
