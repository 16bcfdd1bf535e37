"""Deployment target data models."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple

from remote_pool.exceptions import InvalidTarget
from remote_pool.utils.validation import validate_host, validate_port


@dataclass(frozen=True)
class PasswordAuth:
    """Password authentication material."""

    password: str

    def __repr__(self) -> str:
        return "PasswordAuth(password='***')"


@dataclass(frozen=True)
class PrivateKeyAuth:
    """Private key authentication (path to a key file on this machine)."""

    path: str


AuthMethod = PasswordAuth | PrivateKeyAuth


def _text_field(record: Mapping[str, Any], key: str) -> str:
    """Read an optional text field from a server record.

    Numbers are accepted as their string form; other types are rejected.
    """
    value = record.get(key)
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise InvalidTarget(f"Invalid {key}: expected text, got {type(value).__name__}")


class TargetIdentity(NamedTuple):
    """Key a pooled session is registered under."""

    host: str
    port: int
    username: str

    def __str__(self) -> str:
        return f"{self.username}@{self.host}:{self.port}"


@dataclass(frozen=True)
class TargetDescriptor:
    """A remote host plus the credentials needed to log in to it.

    Two descriptors with the same host, port and username refer to the same
    logical target even when their auth material differs.
    """

    host: str
    username: str
    auth: AuthMethod | None
    port: int = 22

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "TargetDescriptor":
        """Build a descriptor from a persisted server record.

        A non-blank password wins over a private key path.

        Args:
            record: Mapping with host, port, username, password and
                private_key_path keys

        Returns:
            Validated TargetDescriptor

        Raises:
            InvalidTarget: If the record has no usable credential or bad fields
        """
        password = _text_field(record, "password")
        key_path = _text_field(record, "private_key_path")

        auth: AuthMethod | None
        if password.strip():
            auth = PasswordAuth(password)
        elif key_path.strip():
            auth = PrivateKeyAuth(key_path.strip())
        else:
            auth = None

        port = record.get("port") or 22
        try:
            port = int(port)
        except (TypeError, ValueError) as e:
            raise InvalidTarget(f"Invalid port: {port!r}") from e

        target = cls(
            host=str(record.get("host") or "").strip(),
            username=str(record.get("username") or "").strip(),
            auth=auth,
            port=port,
        )
        target.validate()
        return target

    @property
    def identity(self) -> TargetIdentity:
        """Registry key for this target."""
        return TargetIdentity(self.host, self.port, self.username)

    def validate(self) -> "TargetDescriptor":
        """Check the descriptor can be used to connect.

        Raises:
            InvalidTarget: On a bad host, username, port or missing credential
        """
        try:
            validate_host(self.host)
            validate_port(self.port)
        except ValueError as e:
            raise InvalidTarget(str(e), target=self.identity) from e

        if not self.username:
            raise InvalidTarget("Username cannot be empty", target=self.identity)

        if isinstance(self.auth, PasswordAuth):
            if not self.auth.password:
                raise InvalidTarget("Password cannot be empty", target=self.identity)
        elif isinstance(self.auth, PrivateKeyAuth):
            if not self.auth.path.strip():
                raise InvalidTarget("Private key path cannot be empty", target=self.identity)
        else:
            raise InvalidTarget(
                "No valid credential supplied (password or private key path)",
                target=self.identity,
            )
        return self
