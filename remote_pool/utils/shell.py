"""Shell command safety utilities."""

import shlex


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    return shlex.quote(path)


def in_directory(command: str, working_directory: str | None) -> str:
    """Prefix command with a cd into working_directory, if given."""
    if not working_directory:
        return command
    return f"cd {quote_path(working_directory)} && {command}"
