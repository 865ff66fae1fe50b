from __future__ import annotations

import errno
import socket
from unittest.mock import MagicMock, patch

import paramiko
import pytest

from rmremember.config.app_config import TabletSettings
from rmremember.errors import TabletConnectionError, TransportError
from rmremember.remote.ssh_client import Host, TabletSessions


def test_host_from_settings_defaults_to_usb_address() -> None:
    host = Host.from_settings(TabletSettings(tablet_password="pw"))
    assert host.host == "10.11.99.1"
    assert host.user == "root"
    assert host.password == "pw"
    assert host.timeout_s == 2.0

    assert Host.from_settings(TabletSettings(tablet_ip="192.168.1.5")).host == "192.168.1.5"


@patch("rmremember.remote.ssh_client.paramiko.SSHClient")
def test_sftp_session_closes_everything(mock_client_cls) -> None:
    client = MagicMock()
    sftp = MagicMock()
    client.open_sftp.return_value = sftp
    mock_client_cls.return_value = client

    sessions = TabletSessions(Host(host="10.11.99.1", user="root", password="pw"))
    with sessions.sftp_session() as opened:
        assert opened is sftp

    kwargs = client.connect.call_args.kwargs
    assert kwargs["hostname"] == "10.11.99.1"
    assert kwargs["timeout"] == 2.0
    sftp.close.assert_called_once()
    client.close.assert_called_once()


@patch("rmremember.remote.ssh_client.paramiko.SSHClient")
def test_session_closed_when_body_raises(mock_client_cls) -> None:
    client = MagicMock()
    mock_client_cls.return_value = client

    sessions = TabletSessions(Host(host="h", user="root"))
    with pytest.raises(ValueError):
        with sessions.ssh_session():
            raise ValueError("business error")
    client.close.assert_called_once()


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ConnectionRefusedError(errno.ECONNREFUSED, "refused"), TabletConnectionError.SSH_NOT_CONFIGURED),
        (OSError(errno.EHOSTUNREACH, "no route to host"), TabletConnectionError.SSH_NOT_CONNECTED),
        (socket.timeout("timed out"), TabletConnectionError.SSH_NOT_CONNECTED),
        (paramiko.AuthenticationException("Authentication failed."), TabletConnectionError.SSH_NOT_CONFIGURED),
        (paramiko.SSHException("No existing session"), None),
    ],
)
@patch("rmremember.remote.ssh_client.paramiko.SSHClient")
def test_connect_failures_are_classified(mock_client_cls, exc, expected) -> None:
    client = MagicMock()
    client.connect.side_effect = exc
    mock_client_cls.return_value = client

    sessions = TabletSessions(Host(host="h", user="root"))
    with pytest.raises(TransportError) as info:
        with sessions.sftp_session():
            pytest.fail("session body must not run")

    assert info.value.error is expected
    assert info.value.__cause__ is exc
    client.close.assert_called_once()
    if expected is None:
        assert str(info.value) == str(exc)


@pytest.mark.parametrize(
    "exc",
    [paramiko.SSHException("Channel closed."), EOFError()],
)
@patch("rmremember.remote.ssh_client.paramiko.SSHClient")
def test_open_sftp_failure_becomes_unclassified_transport_error(mock_client_cls, exc) -> None:
    client = MagicMock()
    client.open_sftp.side_effect = exc
    mock_client_cls.return_value = client

    sessions = TabletSessions(Host(host="h", user="root"))
    with pytest.raises(TransportError) as info:
        with sessions.sftp_session():
            pytest.fail("session body must not run")

    assert info.value.error is None
    assert info.value.message
    assert info.value.__cause__ is exc
    client.close.assert_called_once()
