"""Command execution data models."""

from dataclasses import dataclass
from typing import Any

LOCAL_FAILURE_CODE = -1


@dataclass
class CommandOptions:
    """Per-call execution options."""

    timeout: float | None = None
    working_directory: str | None = None


@dataclass
class CommandResult:
    """Result of a remote command execution.

    An exit code of -1 means the command never reached the remote host.
    """

    stdout: str
    stderr: str
    exit_code: int

    @property
    def success(self) -> bool:
        """Whether the remote command exited with status 0."""
        return self.exit_code == 0

    @classmethod
    def failure(cls, message: str) -> "CommandResult":
        """Result for a local failure (auth, connect, timeout, transport)."""
        return cls(stdout="", stderr=message, exit_code=LOCAL_FAILURE_CODE)

    def to_dict(self) -> dict[str, Any]:
        """Render the shape the HTTP layer returns as JSON."""
        return {
            "success": self.success,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "code": self.exit_code,
        }
