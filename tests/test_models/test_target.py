"""Tests for TargetDescriptor and TargetIdentity."""

import pytest

from remote_pool.exceptions import InvalidTarget
from remote_pool.models import (
    PasswordAuth,
    PrivateKeyAuth,
    TargetDescriptor,
    TargetIdentity,
)


def test_identity_ignores_auth_material() -> None:
    """Same host/port/user with different credentials is the same target."""
    a = TargetDescriptor(host="web1", username="deploy", auth=PasswordAuth("one"))
    b = TargetDescriptor(host="web1", username="deploy", auth=PrivateKeyAuth("/k"))

    assert a.identity == b.identity
    assert a.identity == TargetIdentity("web1", 22, "deploy")


def test_identity_renders_user_at_host_port() -> None:
    target = TargetDescriptor(host="web1", username="deploy", auth=PasswordAuth("x"), port=2222)
    assert str(target.identity) == "deploy@web1:2222"


def test_password_not_shown_in_repr() -> None:
    target = TargetDescriptor(host="web1", username="deploy", auth=PasswordAuth("hunter2"))
    assert "hunter2" not in repr(target)


def test_validate_accepts_password_target() -> None:
    target = TargetDescriptor(host="10.0.0.5", username="root", auth=PasswordAuth("pw"))
    assert target.validate() is target


def test_validate_rejects_missing_auth() -> None:
    target = TargetDescriptor(host="web1", username="deploy", auth=None)
    with pytest.raises(InvalidTarget, match="No valid credential"):
        target.validate()


@pytest.mark.parametrize("port", [0, -1, 65536, 100000])
def test_validate_rejects_port_out_of_range(port: int) -> None:
    target = TargetDescriptor(host="web1", username="deploy", auth=PasswordAuth("pw"), port=port)
    with pytest.raises(InvalidTarget, match="Port out of range"):
        target.validate()


def test_validate_rejects_bad_host() -> None:
    target = TargetDescriptor(host="web1;rm -rf /", username="deploy", auth=PasswordAuth("pw"))
    with pytest.raises(InvalidTarget):
        target.validate()


def test_validate_rejects_empty_username() -> None:
    target = TargetDescriptor(host="web1", username="", auth=PasswordAuth("pw"))
    with pytest.raises(InvalidTarget, match="Username"):
        target.validate()


def test_invalid_target_is_value_error() -> None:
    """Callers that only know about ValueError still catch it."""
    with pytest.raises(ValueError):
        TargetDescriptor(host="", username="deploy", auth=PasswordAuth("pw")).validate()


class TestFromRecord:
    """Building descriptors from persisted server records."""

    def test_password_wins_over_key(self) -> None:
        target = TargetDescriptor.from_record(
            {
                "host": "web1",
                "port": 22,
                "username": "deploy",
                "password": "pw",
                "private_key_path": "/home/deploy/.ssh/id_rsa",
            }
        )
        assert target.auth == PasswordAuth("pw")

    def test_blank_password_falls_back_to_key(self) -> None:
        target = TargetDescriptor.from_record(
            {
                "host": "web1",
                "username": "deploy",
                "password": "   ",
                "private_key_path": " /keys/id_ed25519 ",
            }
        )
        assert target.auth == PrivateKeyAuth("/keys/id_ed25519")

    def test_port_defaults_to_22(self) -> None:
        target = TargetDescriptor.from_record(
            {"host": "web1", "username": "deploy", "password": "pw", "port": None}
        )
        assert target.port == 22

    def test_port_string_is_converted(self) -> None:
        target = TargetDescriptor.from_record(
            {"host": "web1", "username": "deploy", "password": "pw", "port": "2222"}
        )
        assert target.port == 2222

    def test_no_credential_is_invalid(self) -> None:
        with pytest.raises(InvalidTarget, match="No valid credential"):
            TargetDescriptor.from_record(
                {"host": "web1", "username": "deploy", "password": "", "private_key_path": None}
            )

    def test_non_numeric_port_is_invalid(self) -> None:
        with pytest.raises(InvalidTarget, match="Invalid port"):
            TargetDescriptor.from_record(
                {"host": "web1", "username": "deploy", "password": "pw", "port": "ssh"}
            )

    def test_numeric_password_is_coerced(self) -> None:
        target = TargetDescriptor.from_record(
            {"host": "web1", "username": "deploy", "password": 123456}
        )
        assert target.auth == PasswordAuth("123456")

    @pytest.mark.parametrize(
        "record",
        [
            {"host": "web1", "username": "deploy", "password": ["pw"]},
            {"host": "web1", "username": "deploy", "private_key_path": {"path": "/k"}},
            {"host": "web1", "username": "deploy", "password": True},
        ],
    )
    def test_non_text_credential_is_invalid(self, record) -> None:
        with pytest.raises(InvalidTarget, match="expected text"):
            TargetDescriptor.from_record(record)
