"""SSH connection pool with background idle eviction.

Sessions are resolved through the SessionRegistry. Connecting happens
outside the registry lock, so a slow handshake to one target never blocks
others; two callers racing on a cold target may both connect, and the loser
disposes its connection and adopts the winner's session.

Command execution and file transfer run outside the lock as well, on a
leased session the reaper leaves alone until the operation finishes. A timed
out or broken operation costs its session: it is evicted so the next call
reconnects.
"""

import asyncio
import logging
from typing import Any

import asyncssh

from remote_pool.exceptions import (
    ExecutionError,
    ExecutionTimeout,
    PoolClosedError,
    RemotePoolError,
    TransferError,
)
from remote_pool.models import (
    CommandOptions,
    CommandResult,
    Session,
    TargetDescriptor,
    TargetIdentity,
    TransferDirection,
    TransferResult,
)
from remote_pool.services import executors
from remote_pool.services.connection import open_connection
from remote_pool.services.registry import SessionRegistry

logger = logging.getLogger(__name__)

# Transfer failures with these causes mean the session itself is broken.
# A timed out transfer also costs its session.
TRANSPORT_ERRORS = (asyncssh.DisconnectError, asyncssh.ChannelOpenError)


class ConnectionPool:
    """Pool of authenticated SSH sessions keyed by target identity."""

    def __init__(
        self,
        idle_timeout: float = 300,
        reap_interval: float = 60,
        max_size: int = 100,
        command_timeout: float = 30,
        connect_timeout: float = 10,
        transfer_timeout: float = 300,
        known_hosts: str | None = None,
        strict_host_key_checking: bool = True,
    ) -> None:
        """Initialize pool.

        Args:
            idle_timeout: Seconds a session may sit unused before the reaper
                closes it
            reap_interval: Seconds between reaper ticks
            max_size: Maximum number of pooled sessions (must be > 0)
            command_timeout: Default command timeout in seconds
            connect_timeout: SSH connect/handshake timeout in seconds
            transfer_timeout: Upload/download timeout in seconds
            known_hosts: Path to known_hosts file, or None to disable verification
            strict_host_key_checking: Whether to reject unknown host keys

        Raises:
            ValueError: If max_size is not positive
        """
        self.idle_timeout = idle_timeout
        self.reap_interval = reap_interval
        self.command_timeout = command_timeout
        self.connect_timeout = connect_timeout
        self.transfer_timeout = transfer_timeout
        self._registry = SessionRegistry(max_size=max_size)
        self._reaper_task: asyncio.Task[Any] | None = None
        self._closed = False
        self._connect_count = 0

        self._known_hosts = known_hosts
        self._strict_host_key = strict_host_key_checking

        if self._known_hosts is None:
            logger.warning(
                "SSH host key verification DISABLED - vulnerable to MITM attacks. "
                "Set REMOTE_POOL_KNOWN_HOSTS to a valid known_hosts file path."
            )

        logger.info(
            "ConnectionPool initialized (idle_timeout=%ss, reap_interval=%ss, max_size=%d)",
            idle_timeout,
            reap_interval,
            max_size,
        )

    async def __aenter__(self) -> "ConnectionPool":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()

    async def start(self) -> None:
        """Start the reaper. Sessions are otherwise opened on demand.

        Raises:
            PoolClosedError: If the pool has been shut down
        """
        if self._closed:
            raise PoolClosedError()
        self._ensure_reaper()

    def _ensure_reaper(self) -> None:
        if self._closed:
            return
        if self._reaper_task is None or self._reaper_task.done():
            self._reaper_task = asyncio.create_task(self._reaper_loop())
            logger.debug("Started session reaper (interval=%ss)", self.reap_interval)

    async def _reaper_loop(self) -> None:
        """Periodically close idle sessions until shutdown."""
        while True:
            await asyncio.sleep(self.reap_interval)
            try:
                await self.reap_idle()
            except Exception:
                logger.exception("Reaper tick failed")

    async def reap_idle(self) -> int:
        """Run one reaper tick.

        Returns:
            Number of sessions closed
        """
        removed = await self._registry.evict_idle(self.idle_timeout)
        if removed:
            logger.debug(
                "Reaper removed %d session(s), %d remaining",
                removed,
                self._registry.size,
            )
        return removed

    async def _open(self, target: TargetDescriptor) -> asyncssh.SSHClientConnection:
        return await open_connection(
            target,
            known_hosts=self._known_hosts,
            strict_host_key_checking=self._strict_host_key,
            connect_timeout=self.connect_timeout,
        )

    async def get_session(self, target: TargetDescriptor) -> Session:
        """Get the pooled session for target, connecting if needed.

        The session is not leased, so the reaper may close it once idle.

        Raises:
            PoolClosedError: If the pool has been shut down
            InvalidTarget: If the descriptor is unusable
            AuthenticationError: If the credential is rejected
            ConnectionError: If the host cannot be reached
        """
        return await self._checkout(target, lease=False)

    async def _checkout(self, target: TargetDescriptor, lease: bool) -> Session:
        if self._closed:
            raise PoolClosedError(target.identity)
        target.validate()

        session = await self._registry.acquire(target, lease=lease)
        if session is not None:
            return session

        # Network I/O outside the registry lock
        self._connect_count += 1
        connection = await self._open(target)
        session = await self._registry.insert_or_adopt(
            Session(target=target, connection=connection), lease=lease
        )
        self._ensure_reaper()
        return session

    async def test_connection(self, target: TargetDescriptor) -> bool:
        """Check a target is reachable with its credential.

        Uses a short-lived connection that is never added to the pool.

        Returns:
            True if a probe command round-tripped, False on any failure
        """
        if self._closed:
            logger.warning("Connection test to %s refused: pool is shut down", target.identity)
            return False

        connection: asyncssh.SSHClientConnection | None = None
        try:
            connection = await self._open(target)
            ok = await executors.probe(connection, self.command_timeout)
        except RemotePoolError as e:
            logger.error("Connection test to %s failed: %s", target.identity, e.message)
            return False
        except Exception as e:
            logger.exception("Connection test to %s failed unexpectedly: %s", target.identity, e)
            return False
        finally:
            if connection is not None:
                try:
                    connection.close()
                except Exception as e:
                    logger.warning("Error closing test connection to %s: %s", target.identity, e)

        if ok:
            logger.info("Connection test to %s succeeded", target.identity)
        return ok

    async def execute_command(
        self,
        target: TargetDescriptor,
        command: str,
        options: CommandOptions | None = None,
    ) -> CommandResult:
        """Run a command on the pooled session for target.

        Never raises: local failures are returned as a result with
        exit_code -1 and the error message in stderr.
        """
        options = options or CommandOptions()
        timeout = self.command_timeout if options.timeout is None else options.timeout
        identity = target.identity

        if timeout <= 0:
            logger.error("Command on %s not run: invalid timeout %r", identity, timeout)
            return CommandResult.failure(f"Invalid timeout: must be > 0, got {timeout!r}")

        try:
            session = await self._checkout(target, lease=True)
        except RemotePoolError as e:
            logger.error("Command on %s not run: %s", identity, e.message)
            return CommandResult.failure(str(e))
        except Exception as e:
            logger.exception("Command on %s not run: %s", identity, e)
            return CommandResult.failure(f"Unexpected error: {e}")

        logger.info("Executing command on %s: %s", identity, command)
        try:
            result = await executors.run_command(
                session.connection,
                command,
                timeout,
                working_directory=options.working_directory,
                identity=identity,
            )
        except ExecutionTimeout as e:
            logger.warning("Command on %s timed out after %ss, dropping session", identity, timeout)
            await self._registry.evict(identity, session, reason="timed-out")
            return CommandResult.failure(str(e))
        except ExecutionError as e:
            logger.error("Command on %s failed: %s, dropping session", identity, e.message)
            await self._registry.evict(identity, session, reason="broken")
            return CommandResult.failure(str(e))
        except Exception as e:
            logger.exception("Command on %s failed unexpectedly: %s", identity, e)
            await self._registry.evict(identity, session, reason="broken")
            return CommandResult.failure(f"Unexpected error: {e}")
        finally:
            session.release()

        logger.debug("Command on %s exited %d", identity, result.exit_code)
        return result

    async def _transfer_session(
        self,
        target: TargetDescriptor,
        local_path: str,
        remote_path: str,
        direction: TransferDirection,
    ) -> Session:
        try:
            return await self._checkout(target, lease=True)
        except RemotePoolError as e:
            raise TransferError(
                f"Cannot reach target: {e.message}",
                target=target.identity,
                local_path=local_path,
                remote_path=remote_path,
                direction=direction.value,
            ) from e

    async def _transfer_failed(self, session: Session, error: TransferError) -> None:
        logger.error("File transfer on %s failed: %s", session.identity, error.message)
        if isinstance(error.__cause__, asyncio.TimeoutError):
            await self._registry.evict(session.identity, session, reason="timed-out")
        elif not session.is_alive or isinstance(error.__cause__, TRANSPORT_ERRORS):
            await self._registry.evict(session.identity, session, reason="broken")

    async def upload_file(
        self, target: TargetDescriptor, local_path: str, remote_path: str
    ) -> TransferResult:
        """Upload a local file to target.

        Raises:
            TransferError: If the file could not be transferred
        """
        session = await self._transfer_session(
            target, local_path, remote_path, TransferDirection.UPLOAD
        )
        try:
            result = await executors.upload_file(
                session.connection,
                local_path,
                remote_path,
                timeout=self.transfer_timeout,
                identity=session.identity,
            )
        except TransferError as e:
            await self._transfer_failed(session, e)
            raise
        finally:
            session.release()

        logger.info("%s on %s (%d bytes)", result.message, session.identity, result.bytes_transferred)
        return result

    async def download_file(
        self, target: TargetDescriptor, remote_path: str, local_path: str
    ) -> TransferResult:
        """Download a file from target to this machine.

        Raises:
            TransferError: If the file could not be transferred
        """
        session = await self._transfer_session(
            target, local_path, remote_path, TransferDirection.DOWNLOAD
        )
        try:
            result = await executors.download_file(
                session.connection,
                remote_path,
                local_path,
                timeout=self.transfer_timeout,
                identity=session.identity,
            )
        except TransferError as e:
            await self._transfer_failed(session, e)
            raise
        finally:
            session.release()

        logger.info("%s on %s (%d bytes)", result.message, session.identity, result.bytes_transferred)
        return result

    async def remove_session(self, target: TargetDescriptor | TargetIdentity) -> bool:
        """Close and forget the pooled session for a target, if any."""
        identity = target.identity if isinstance(target, TargetDescriptor) else target
        return await self._registry.evict(identity, reason="removed")

    async def shutdown(self) -> None:
        """Close every session and stop the reaper. Safe to call twice.

        The pool is unusable afterwards.
        """
        if self._closed:
            return
        self._closed = True

        task, self._reaper_task = self._reaper_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
            logger.debug("Session reaper cancelled")

        closed = await self._registry.drain()
        logger.info("Connection pool shut down, closed %d session(s)", closed)

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def max_size(self) -> int:
        return self._registry.max_size

    @property
    def connect_count(self) -> int:
        """Number of pooled connects attempted so far."""
        return self._connect_count

    @property
    def pool_size(self) -> int:
        """Return the current number of sessions in the pool."""
        return self._registry.size

    @property
    def active_targets(self) -> list[TargetIdentity]:
        """Return identities of targets with pooled sessions."""
        return self._registry.identities

    def get(self, identity: TargetIdentity) -> Session | None:
        """Return the pooled session for identity without touching it."""
        return self._registry.get(identity)
