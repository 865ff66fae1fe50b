"""Error taxonomy for talking to the tablet.

Two families never mix:

* :class:`TransportError` means the device could not be reached (or the
  transport broke in a way we do not recognise).  ``error`` holds one of the
  :class:`TabletConnectionError` values, or ``None`` for an unclassified
  failure that only carries a message.
* :class:`TabletValidationError` and its subclasses mean the device was
  reachable but the request or the on-device data was not acceptable.

Low-level exceptions are first reduced to a :class:`TransportFailure`
descriptor and then classified per transport, so the mapping tables live in
one place and can be tested without sockets.
"""

from __future__ import annotations

import errno as _errno
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx
import paramiko


class TabletConnectionError(Enum):
    SSH_NOT_CONFIGURED = "ssh_not_configured"
    SSH_NOT_CONNECTED = "ssh_not_connected"
    USB_NOT_ACTIVATED = "usb_not_activated"
    USB_NOT_CONNECTED = "usb_not_connected"


_MESSAGES = {
    TabletConnectionError.SSH_NOT_CONFIGURED: "SSH protocol information are not configured or wrong.",
    TabletConnectionError.SSH_NOT_CONNECTED: "reMarkable is not connected via WiFi or USB.",
    TabletConnectionError.USB_NOT_ACTIVATED: "USB web interface is not activated.",
    TabletConnectionError.USB_NOT_CONNECTED: "reMarkable is not connected via USB.",
}


class TabletError(Exception):
    """Base class for everything raised by the tablet access layer."""


class TransportError(TabletError):
    """The device could not be reached over one of its transports."""

    def __init__(self, error: Optional[TabletConnectionError], message: str | None = None) -> None:
        if message is None:
            message = _MESSAGES.get(error, "Unknown transport failure.")
        super().__init__(message)
        self.error = error
        self.message = message

    @property
    def classified(self) -> bool:
        return self.error is not None


class TabletValidationError(TabletError):
    """The device answered, but the request or its data was not acceptable."""


class UnsupportedFileError(TabletValidationError):
    pass


class NotebookFormatError(TabletValidationError):
    pass


class TemplateManifestError(TabletValidationError):
    pass


class RemoteCommandError(TabletValidationError):
    """A remote shell command exited with a non-zero status."""

    def __init__(self, command: str, exit_status: int, stderr: str) -> None:
        super().__init__(stderr.strip() or f"Command failed with exit status {exit_status}: {command}")
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr


class HttpStatusError(TabletValidationError):
    """The local web interface answered with a non-success status."""

    def __init__(self, status_code: int, url: str) -> None:
        super().__init__(f"HTTP {status_code} for {url}")
        self.status_code = status_code
        self.url = url


# ---------------------------------------------------------------------------
# Low-level failure descriptors
# ---------------------------------------------------------------------------

class FailureKind(Enum):
    SOCKET = "socket"
    AUTHENTICATION = "authentication"
    TIMEOUT = "timeout"
    OTHER = "other"


@dataclass(frozen=True)
class TransportFailure:
    """Structured view of a low-level exception (kind plus socket errno)."""

    kind: FailureKind
    errno: Optional[int] = None
    message: str = ""


CONNECTION_REFUSED = frozenset({_errno.ECONNREFUSED})
UNREACHABLE = frozenset(
    {
        _errno.EHOSTDOWN,
        _errno.EHOSTUNREACH,
        _errno.ENETDOWN,
        _errno.ENETUNREACH,
    }
)


def _socket_errno(exc: BaseException) -> Optional[int]:
    # paramiko reports "all addresses failed" with errno None and the
    # per-address errors in ``errors``.
    if isinstance(exc, paramiko.ssh_exception.NoValidConnectionsError):
        for inner in exc.errors.values():
            if getattr(inner, "errno", None) is not None:
                return inner.errno
        return None
    return getattr(exc, "errno", None)


def describe_ssh_exception(exc: BaseException) -> TransportFailure:
    """Reduce an exception raised while connecting over SSH to a descriptor."""

    message = str(exc)
    if isinstance(exc, paramiko.AuthenticationException):
        return TransportFailure(FailureKind.AUTHENTICATION, message=message)
    if isinstance(exc, (socket.timeout, TimeoutError)):
        return TransportFailure(FailureKind.TIMEOUT, message=message)
    if isinstance(exc, OSError):
        return TransportFailure(FailureKind.SOCKET, _socket_errno(exc), message)
    return TransportFailure(FailureKind.OTHER, message=message)


def describe_http_exception(exc: BaseException) -> TransportFailure:
    """Reduce an httpx exception to a descriptor, digging out the socket errno."""

    message = str(exc)
    if isinstance(exc, httpx.TimeoutException):
        return TransportFailure(FailureKind.TIMEOUT, message=message)

    seen: set[int] = set()
    cause: Optional[BaseException] = exc
    while cause is not None and id(cause) not in seen:
        seen.add(id(cause))
        if isinstance(cause, OSError) and cause.errno is not None:
            return TransportFailure(FailureKind.SOCKET, cause.errno, message)
        cause = cause.__cause__ or cause.__context__
    return TransportFailure(FailureKind.OTHER, message=message)


def classify_ssh_failure(failure: TransportFailure) -> Optional[TabletConnectionError]:
    if failure.kind is FailureKind.AUTHENTICATION:
        return TabletConnectionError.SSH_NOT_CONFIGURED
    if failure.kind is FailureKind.TIMEOUT:
        return TabletConnectionError.SSH_NOT_CONNECTED
    if failure.kind is FailureKind.SOCKET:
        if failure.errno in CONNECTION_REFUSED:
            return TabletConnectionError.SSH_NOT_CONFIGURED
        if failure.errno in UNREACHABLE:
            return TabletConnectionError.SSH_NOT_CONNECTED
    return None


def classify_usb_failure(failure: TransportFailure) -> Optional[TabletConnectionError]:
    if failure.kind is FailureKind.TIMEOUT:
        return TabletConnectionError.USB_NOT_CONNECTED
    if failure.kind is FailureKind.SOCKET:
        if failure.errno in CONNECTION_REFUSED:
            return TabletConnectionError.USB_NOT_ACTIVATED
        if failure.errno in UNREACHABLE:
            return TabletConnectionError.USB_NOT_CONNECTED
    return None


def transport_error(error: Optional[TabletConnectionError], failure: TransportFailure) -> TransportError:
    """Build the exception to raise for a classified (or unclassified) failure."""

    if error is None:
        return TransportError(None, failure.message or "Unknown transport failure.")
    return TransportError(error)


__all__ = [
    "TabletConnectionError",
    "TabletError",
    "TransportError",
    "TabletValidationError",
    "UnsupportedFileError",
    "NotebookFormatError",
    "TemplateManifestError",
    "RemoteCommandError",
    "HttpStatusError",
    "FailureKind",
    "TransportFailure",
    "describe_ssh_exception",
    "describe_http_exception",
    "classify_ssh_failure",
    "classify_usb_failure",
    "transport_error",
]
