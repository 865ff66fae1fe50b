"""Short-lived SSH/SFTP sessions to the tablet."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import paramiko

from ..config.app_config import DEFAULT_SSH_TIMEOUT_S, TabletSettings
from ..errors import (
    TransportError,
    classify_ssh_failure,
    describe_ssh_exception,
    transport_error,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Host:
    """Connection details for the tablet (password-based auth only)."""

    host: str
    user: str
    password: str = ""
    port: int = 22
    timeout_s: float = DEFAULT_SSH_TIMEOUT_S

    @classmethod
    def from_settings(cls, settings: TabletSettings) -> Host:
        return cls(
            host=settings.ssh_host,
            user=settings.ssh_user,
            password=settings.tablet_password,
            timeout_s=settings.ssh_timeout_s,
        )


class TabletSessions:
    """
    Opens one paramiko session per call and always closes it again.

    Connect failures are classified into :class:`~rmremember.errors.TransportError`
    with the original exception attached as ``__cause__``.
    """

    def __init__(self, host: Host) -> None:
        self.host = host

    # ------------------------------------------------------------------ internals
    def _connect(self) -> paramiko.SSHClient:
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        logger.info(
            "Connecting to %s@%s:%s", self.host.user, self.host.host, self.host.port
        )
        try:
            client.connect(
                hostname=self.host.host,
                username=self.host.user,
                port=self.host.port,
                password=self.host.password,
                look_for_keys=False,
                allow_agent=False,
                timeout=self.host.timeout_s,
                banner_timeout=self.host.timeout_s,
                auth_timeout=self.host.timeout_s,
            )
        except (OSError, paramiko.SSHException) as exc:
            client.close()
            failure = describe_ssh_exception(exc)
            error = classify_ssh_failure(failure)
            logger.warning(
                "SSH connect to %s failed (%s): %s",
                self.host.host,
                error.name if error else "unclassified",
                failure.message,
            )
            raise transport_error(error, failure) from exc
        return client

    # ------------------------------------------------------------------ sessions
    @contextmanager
    def ssh_session(self) -> Iterator[paramiko.SSHClient]:
        """Context manager that yields a connected SSH client."""

        client = self._connect()
        try:
            yield client
        finally:
            client.close()

    @contextmanager
    def sftp_session(self) -> Iterator[paramiko.SFTPClient]:
        """Context manager that yields an SFTP client on a fresh connection."""

        with self.ssh_session() as client:
            try:
                sftp = client.open_sftp()
            except (OSError, EOFError, paramiko.SSHException) as exc:
                logger.warning("Opening SFTP on %s failed: %s", self.host.host, exc)
                raise TransportError(None, str(exc) or type(exc).__name__) from exc
            try:
                yield sftp
            finally:
                sftp.close()
