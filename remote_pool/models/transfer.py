"""File transfer data models."""

from dataclasses import dataclass
from enum import Enum


class TransferDirection(Enum):
    """Which way a file moves relative to this machine."""

    UPLOAD = "upload"
    DOWNLOAD = "download"


@dataclass
class TransferResult:
    """Result of a completed file transfer."""

    direction: TransferDirection
    local_path: str
    remote_path: str
    bytes_transferred: int = 0

    @property
    def message(self) -> str:
        if self.direction is TransferDirection.UPLOAD:
            return f"Uploaded {self.local_path} → {self.remote_path}"
        return f"Downloaded {self.remote_path} → {self.local_path}"
