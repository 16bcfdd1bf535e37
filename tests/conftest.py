"""Shared fixtures: an in-memory stand-in for asyncssh connections."""

import asyncio
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import asyncssh
import pytest
import pytest_asyncio

from remote_pool.models import PasswordAuth, TargetDescriptor
from remote_pool.services.pool import ConnectionPool


class FakeSFTP:
    """SFTP client backed by a dict of remote path -> bytes."""

    def __init__(self, files: dict[str, bytes], delay: float = 0.0) -> None:
        self.files = files
        self.delay = delay

    async def put(self, localpath: str, remotepath: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.files[remotepath] = Path(localpath).read_bytes()

    async def get(self, remotepath: str, localpath: str) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if remotepath not in self.files:
            raise asyncssh.SFTPNoSuchFile(f"No such file: {remotepath}")
        Path(localpath).write_bytes(self.files[remotepath])


class _SFTPContext:
    def __init__(self, sftp: FakeSFTP) -> None:
        self.sftp = sftp

    async def __aenter__(self) -> FakeSFTP:
        return self.sftp

    async def __aexit__(self, *exc_info: object) -> bool:
        return False


class FakeSSH:
    """Replacement for asyncssh.connect that records every connection.

    Commands of the form ``sleep N`` sleep for N seconds; ``exit N`` exits
    with status N; anything else echoes the command back with status 0.
    A connection closed while a command is running fails that command with
    ConnectionLost, like a real transport.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.connections: list[MagicMock] = []
        self.remote_files: dict[str, bytes] = {}
        self.connect_delay = 0.0
        self.transfer_delay = 0.0
        self.fail_with: Exception | None = None

    @property
    def connect_count(self) -> int:
        return len(self.connections)

    async def connect(self, host: str, **kwargs: Any) -> MagicMock:
        self.calls.append((host, kwargs))
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.fail_with is not None:
            raise self.fail_with
        conn = self._make_connection()
        self.connections.append(conn)
        return conn

    def _make_connection(self) -> MagicMock:
        conn = MagicMock()
        state = {"closed": False}

        def close() -> None:
            state["closed"] = True

        async def run(command: str, check: bool = False) -> SimpleNamespace:
            if state["closed"]:
                raise asyncssh.ConnectionLost("Connection closed")
            code = 0
            last = command.rsplit("&& ", 1)[-1]
            if last.startswith("sleep "):
                await asyncio.sleep(float(last.split()[1]))
            elif last.startswith("exit "):
                code = int(last.split()[1])
            if state["closed"]:
                raise asyncssh.ConnectionLost("Connection closed")
            return SimpleNamespace(stdout=f"{command}\n", stderr="", returncode=code)

        conn.is_closed = MagicMock(side_effect=lambda: state["closed"])
        conn.close = MagicMock(side_effect=close)
        conn.run = AsyncMock(side_effect=run)
        conn.start_sftp_client = MagicMock(
            side_effect=lambda: _SFTPContext(FakeSFTP(self.remote_files, self.transfer_delay))
        )
        return conn


@pytest.fixture
def fake_ssh():
    """Patch asyncssh.connect with a FakeSSH instance."""
    fake = FakeSSH()
    with patch("asyncssh.connect", new=fake.connect):
        yield fake


@pytest_asyncio.fixture
async def pool():
    """Pool with host key verification disabled, shut down after the test."""
    pool = ConnectionPool(
        idle_timeout=300,
        reap_interval=60,
        command_timeout=5,
        known_hosts=None,
    )
    yield pool
    await pool.shutdown()


@pytest.fixture
def target() -> TargetDescriptor:
    return TargetDescriptor(
        host="web1.example.com",
        username="deploy",
        auth=PasswordAuth("s3cret"),
    )


def make_target(host: str, password: str = "s3cret", port: int = 22) -> TargetDescriptor:
    """Build a password target for host."""
    return TargetDescriptor(host=host, username="deploy", auth=PasswordAuth(password), port=port)


@pytest.fixture
def target_factory():
    return make_target
