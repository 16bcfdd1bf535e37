"""Services for remote_pool."""

from remote_pool.services.connection import open_connection
from remote_pool.services.executors import download_file, probe, run_command, upload_file
from remote_pool.services.pool import ConnectionPool
from remote_pool.services.registry import SessionRegistry

__all__ = [
    "ConnectionPool",
    "SessionRegistry",
    "download_file",
    "open_connection",
    "probe",
    "run_command",
    "upload_file",
]
