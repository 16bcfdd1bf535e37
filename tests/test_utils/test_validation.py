"""Tests for host/port validation and shell helpers."""

import pytest

from remote_pool.utils.shell import in_directory
from remote_pool.utils.validation import validate_host, validate_port


@pytest.mark.parametrize("host", ["web1", "web1.example.com", "10.0.0.5", "::1"])
def test_validate_host_accepts(host: str) -> None:
    assert validate_host(host) == host


@pytest.mark.parametrize("host", ["", "a;b", "a|b", "$(id)", "a b", "a\nb", "x" * 254])
def test_validate_host_rejects(host: str) -> None:
    with pytest.raises(ValueError):
        validate_host(host)


@pytest.mark.parametrize("port", [1, 22, 65535])
def test_validate_port_accepts(port: int) -> None:
    assert validate_port(port) == port


@pytest.mark.parametrize("port", [0, 65536, True, "22", 22.0])
def test_validate_port_rejects(port: object) -> None:
    with pytest.raises(ValueError):
        validate_port(port)  # type: ignore[arg-type]


def test_in_directory_quotes_path() -> None:
    assert in_directory("make", "/srv/my app") == "cd '/srv/my app' && make"


def test_in_directory_without_directory() -> None:
    assert in_directory("uptime", None) == "uptime"
    assert in_directory("uptime", "") == "uptime"
