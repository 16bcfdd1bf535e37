"""Target field validation utilities."""

from typing import Final

# Characters that could enable injection when a host ends up in a command line
SUSPICIOUS_HOST_CHARS: Final[list[str]] = ["/", "\\", ";", "&", "|", "$", "`", "\n", "\r", "\x00", " "]

MIN_PORT: Final[int] = 1
MAX_PORT: Final[int] = 65535


def validate_host(host: str) -> str:
    """Validate a host name or address.

    Args:
        host: The host name to validate

    Returns:
        Validated host name

    Raises:
        ValueError: If host name is invalid
    """
    if not host:
        raise ValueError("Host cannot be empty")

    if len(host) > 253:
        raise ValueError(f"Host name too long: {len(host)} chars")

    for char in SUSPICIOUS_HOST_CHARS:
        if char in host:
            raise ValueError(f"Host contains invalid characters: {host!r}")

    return host


def validate_port(port: int) -> int:
    """Validate a TCP port number.

    Raises:
        ValueError: If port is not an int in 1..65535
    """
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValueError(f"Port must be an integer, got {port!r}")
    if not MIN_PORT <= port <= MAX_PORT:
        raise ValueError(f"Port out of range ({MIN_PORT}-{MAX_PORT}): {port}")
    return port
