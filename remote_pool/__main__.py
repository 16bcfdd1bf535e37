"""Command-line entry point for one-off operations against a target.

Examples:
    python -m remote_pool --host web1 --user deploy --key ~/.ssh/id_ed25519 test
    python -m remote_pool --host web1 --user deploy --key ~/.ssh/id_ed25519 exec --cwd /srv/app "git pull"
    REMOTE_POOL_PASSWORD=... python -m remote_pool --host web1 --user deploy upload dist.tgz /tmp/dist.tgz
"""

import argparse
import asyncio
import json
import logging
import os
import sys

from remote_pool.config import Settings
from remote_pool.dependencies import Dependencies
from remote_pool.exceptions import RemotePoolError, TransferError
from remote_pool.models import CommandOptions, TargetDescriptor
from remote_pool.utils.console import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="remote_pool", description=__doc__.splitlines()[0])
    parser.add_argument("--host", required=True)
    parser.add_argument("--port", type=int, default=22)
    parser.add_argument("--user", required=True, dest="username")
    parser.add_argument(
        "--password",
        default=os.getenv("REMOTE_POOL_PASSWORD"),
        help="Password (defaults to REMOTE_POOL_PASSWORD)",
    )
    parser.add_argument("--key", dest="private_key_path", help="Path to a private key file")

    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("test", help="Check the target is reachable")

    exec_parser = sub.add_parser("exec", help="Run a shell command")
    exec_parser.add_argument("command")
    exec_parser.add_argument("--cwd", dest="working_directory")
    exec_parser.add_argument("--timeout", type=float)

    upload_parser = sub.add_parser("upload", help="Copy a local file to the target")
    upload_parser.add_argument("local_path")
    upload_parser.add_argument("remote_path")

    download_parser = sub.add_parser("download", help="Copy a remote file here")
    download_parser.add_argument("remote_path")
    download_parser.add_argument("local_path")
    return parser


async def run(args: argparse.Namespace, deps: Dependencies) -> int:
    """Perform the requested action and return a process exit status."""
    target = TargetDescriptor.from_record(vars(args))
    pool = deps.pool

    if args.action == "test":
        ok = await pool.test_connection(target)
        print("ok" if ok else "failed")
        return 0 if ok else 1

    if args.action == "exec":
        options = CommandOptions(timeout=args.timeout, working_directory=args.working_directory)
        result = await pool.execute_command(target, args.command, options)
        print(json.dumps(result.to_dict(), indent=2))
        return 0 if result.success else 1

    try:
        if args.action == "upload":
            transfer = await pool.upload_file(target, args.local_path, args.remote_path)
        else:
            transfer = await pool.download_file(target, args.remote_path, args.local_path)
    except TransferError as e:
        print(f"Transfer failed: {e}", file=sys.stderr)
        return 1
    print(transfer.message)
    return 0


async def main_async(args: argparse.Namespace) -> int:
    deps = Dependencies.create()
    try:
        return await run(args, deps)
    finally:
        await deps.cleanup()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    configure_logging(
        level=settings.log_level,
        use_colors=settings.log_colors and sys.stderr.isatty(),
        log_file=settings.log_file,
    )
    try:
        return asyncio.run(main_async(args))
    except RemotePoolError as e:
        logger.error("%s", e)
        return 2
    except FileNotFoundError as e:
        # known_hosts missing in strict mode
        logger.error("%s", e)
        return 2


if __name__ == "__main__":
    sys.exit(main())
