"""File and command helpers that run on an already open SFTP/SSH session."""

from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Union

import paramiko

from ..errors import RemoteCommandError


logger = logging.getLogger(__name__)

Content = Union[str, bytes]
EntryFilter = Callable[[paramiko.SFTPAttributes], bool]


@dataclass
class CommandResult:
    command: str
    exit_status: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


def join_remote(directory: str | PurePosixPath, name: str) -> str:
    return str(PurePosixPath(str(directory)) / name)


def is_directory(attr: paramiko.SFTPAttributes) -> bool:
    return attr.st_mode is not None and stat.S_ISDIR(attr.st_mode)


def is_regular_file(attr: paramiko.SFTPAttributes) -> bool:
    return attr.st_mode is not None and stat.S_ISREG(attr.st_mode)


def not_dot_entry(attr: paramiko.SFTPAttributes) -> bool:
    return attr.filename not in (".", "..")


def path_exists(sftp: paramiko.SFTPClient, remote_path: str) -> bool:
    """Return True if *remote_path* exists on the tablet."""

    try:
        sftp.stat(remote_path)
    except IOError:
        return False
    else:
        return True


def list_directory(sftp: paramiko.SFTPClient, remote_dir: str) -> list[paramiko.SFTPAttributes]:
    return sftp.listdir_attr(remote_dir)


def read_bytes(sftp: paramiko.SFTPClient, remote_path: str) -> bytes:
    with sftp.open(remote_path, "rb") as fh:
        return fh.read()


def read_text(sftp: paramiko.SFTPClient, remote_path: str, encoding: str = "utf-8") -> str:
    return read_bytes(sftp, remote_path).decode(encoding)


def delete_file(sftp: paramiko.SFTPClient, remote_path: str) -> bool:
    """Remove *remote_path* if it exists; a missing file is not an error."""

    if not path_exists(sftp, remote_path):
        return False
    sftp.remove(remote_path)
    logger.debug("Deleted %s", remote_path)
    return True


def write_file(sftp: paramiko.SFTPClient, remote_path: str, content: Content) -> None:
    """
    Replace *remote_path* with *content*.

    The existing file is deleted first and a new one created; the tablet's
    filesystem does not get overwritten in place.
    """

    if isinstance(content, str):
        data = content.encode("utf-8")
    elif isinstance(content, (bytes, bytearray)):
        data = bytes(content)
    else:
        raise TypeError(f"Unsupported content type: {type(content).__name__}")

    delete_file(sftp, remote_path)
    with sftp.open(remote_path, "wb") as fh:
        fh.write(data)
    logger.debug("Wrote %d bytes to %s", len(data), remote_path)


def backup_tree(
    sftp: paramiko.SFTPClient,
    remote_dir: str,
    local_dir: Path,
    entry_filter: EntryFilter = not_dot_entry,
) -> int:
    """
    Mirror *remote_dir* into *local_dir* and return the number of files copied.

    *entry_filter* only applies to the top level; nested directories copy
    everything except ``.`` and ``..``.  An interrupted copy may leave a
    truncated local file behind.
    """

    local_dir = Path(local_dir)
    local_dir.mkdir(parents=True, exist_ok=True)
    copied = 0

    for attr in sftp.listdir_attr(remote_dir):
        if not entry_filter(attr):
            continue

        remote_path = join_remote(remote_dir, attr.filename)
        local_path = local_dir / attr.filename

        if is_directory(attr):
            copied += backup_tree(sftp, remote_path, local_path, not_dot_entry)
        elif is_regular_file(attr):
            logger.debug("Backing up %s -> %s", remote_path, local_path)
            with local_path.open("wb") as fh:
                sftp.getfo(remote_path, fh)
            copied += 1

    return copied


def run_command(
    client: paramiko.SSHClient,
    command: str,
    check_exit_code: bool = True,
) -> CommandResult:
    """
    Run *command* and wait for it to finish.

    With *check_exit_code* a non-zero exit raises :class:`RemoteCommandError`
    carrying the remote stderr; without it the failure is only logged.
    """

    logger.debug("Running remote command: %s", command)
    _, stdout, stderr = client.exec_command(command)
    # Streams must be drained first: the exit status never arrives while the
    # channel window is full.
    out = stdout.read().decode("utf-8", errors="replace")
    err = stderr.read().decode("utf-8", errors="replace")
    exit_status = stdout.channel.recv_exit_status()
    result = CommandResult(command=command, exit_status=exit_status, stdout=out, stderr=err)

    if not result.ok:
        if check_exit_code:
            raise RemoteCommandError(command, exit_status, result.stderr)
        logger.warning("Ignoring exit status %d of %r", exit_status, command)
    return result
