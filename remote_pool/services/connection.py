"""Open authenticated SSH connections to deployment targets."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import asyncssh

from remote_pool.exceptions import AuthenticationError, ConnectionError
from remote_pool.models import PasswordAuth, PrivateKeyAuth, TargetDescriptor

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10


def build_connect_options(target: TargetDescriptor) -> dict[str, Any]:
    """Map a descriptor's credential onto asyncssh.connect keyword arguments.

    Only the supplied credential is offered; default keys and the ssh-agent
    are not consulted.

    Raises:
        AuthenticationError: If a private key file does not exist
    """
    options: dict[str, Any] = {
        "port": target.port,
        "username": target.username,
        "agent_path": None,
    }
    auth = target.auth
    if isinstance(auth, PasswordAuth):
        options["password"] = auth.password
        options["client_keys"] = None
    elif isinstance(auth, PrivateKeyAuth):
        key_path = Path(auth.path).expanduser()
        if not key_path.is_file():
            raise AuthenticationError(
                f"Private key not found: {key_path}", target=target.identity
            )
        options["client_keys"] = [str(key_path)]
    return options


async def open_connection(
    target: TargetDescriptor,
    *,
    known_hosts: str | None = None,
    strict_host_key_checking: bool = True,
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
) -> asyncssh.SSHClientConnection:
    """Connect and authenticate to a target.

    Args:
        target: Host and credential to connect with
        known_hosts: Path to known_hosts file, or None to skip verification
        strict_host_key_checking: Whether an unverifiable host key is fatal
        connect_timeout: Seconds allowed for TCP connect plus SSH handshake

    Returns:
        Authenticated asyncssh connection, owned by the caller

    Raises:
        InvalidTarget: If the descriptor is unusable
        AuthenticationError: If the credential is rejected or missing
        ConnectionError: If the host is unreachable or the handshake fails
    """
    target.validate()
    identity = target.identity
    options = build_connect_options(target)

    logger.info("Opening SSH connection to %s", identity)
    try:
        try:
            return await asyncssh.connect(
                target.host,
                known_hosts=known_hosts,
                connect_timeout=connect_timeout,
                **options,
            )
        except asyncssh.HostKeyNotVerifiable as e:
            if strict_host_key_checking:
                logger.error(
                    "Host key verification failed for %s: %s. Add the host key "
                    "to %s or set REMOTE_POOL_STRICT_HOST_KEY_CHECKING=false",
                    identity,
                    e,
                    known_hosts,
                )
                raise ConnectionError(
                    f"Host key verification failed: {e}",
                    target=identity,
                    original_error=e,
                ) from e
            logger.warning(
                "Host key not verified for %s (strict mode disabled): %s",
                identity,
                e,
            )
            return await asyncssh.connect(
                target.host,
                known_hosts=None,
                connect_timeout=connect_timeout,
                **options,
            )
    except asyncssh.PermissionDenied as e:
        logger.error("Authentication failed for %s: %s", identity, e)
        raise AuthenticationError(f"Authentication failed: {e}", target=identity) from e
    except asyncssh.KeyImportError as e:
        logger.error("Unusable private key for %s: %s", identity, e)
        raise AuthenticationError(f"Unusable private key: {e}", target=identity) from e
    except asyncio.TimeoutError as e:
        logger.error("SSH connection to %s timed out after %ss", identity, connect_timeout)
        raise ConnectionError(
            f"Connection timed out after {connect_timeout}s",
            target=identity,
            original_error=e,
        ) from e
    except (OSError, asyncssh.Error) as e:
        logger.error("SSH connection to %s failed: %s", identity, e)
        raise ConnectionError(
            f"SSH connection failed: {e}", target=identity, original_error=e
        ) from e
