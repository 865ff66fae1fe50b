"""In-memory stand-ins for paramiko sessions used across the tests."""

from __future__ import annotations

import errno
import io
import stat
import threading
from contextlib import contextmanager
from pathlib import PurePosixPath
from typing import Callable, Iterator, Optional

import paramiko
import pytest


def _norm(path: str) -> str:
    return str(PurePosixPath(path)) if path != "/" else path


class _WriteHandle(io.BytesIO):
    def __init__(self, sftp: FakeSftp, path: str) -> None:
        super().__init__()
        self._sftp = sftp
        self._path = path

    def close(self) -> None:
        if not self.closed:
            self._sftp.files[self._path] = self.getvalue()
            self._sftp.log.append(("write", self._path))
        super().close()


class FakeSftp:
    """Tiny SFTP server model: ``files`` maps absolute paths to bytes."""

    def __init__(self, files: Optional[dict[str, bytes]] = None) -> None:
        self.files: dict[str, bytes] = {_norm(k): v for k, v in (files or {}).items()}
        self.extra_dirs: set[str] = set()
        self.log: list[tuple[str, str]] = []
        self.closed = False

    def _dirs(self) -> set[str]:
        dirs = set(self.extra_dirs)
        for path in self.files:
            for parent in PurePosixPath(path).parents:
                dirs.add(str(parent))
        return dirs

    def _attr(self, name: str, is_dir: bool, size: int = 0) -> paramiko.SFTPAttributes:
        attr = paramiko.SFTPAttributes()
        attr.filename = name
        attr.st_mode = (stat.S_IFDIR | 0o755) if is_dir else (stat.S_IFREG | 0o644)
        attr.st_size = size
        return attr

    def stat(self, path: str) -> paramiko.SFTPAttributes:
        path = _norm(path)
        if path in self.files:
            return self._attr(PurePosixPath(path).name, False, len(self.files[path]))
        if path in self._dirs():
            return self._attr(PurePosixPath(path).name, True)
        raise FileNotFoundError(errno.ENOENT, "No such file", path)

    def listdir_attr(self, path: str) -> list[paramiko.SFTPAttributes]:
        path = _norm(path)
        self.log.append(("list", path))
        entries = []
        for file_path, data in self.files.items():
            if str(PurePosixPath(file_path).parent) == path:
                entries.append(self._attr(PurePosixPath(file_path).name, False, len(data)))
        for dir_path in sorted(self._dirs()):
            if dir_path != path and str(PurePosixPath(dir_path).parent) == path:
                entries.append(self._attr(PurePosixPath(dir_path).name, True))
        return entries

    def open(self, path: str, mode: str = "r"):
        path = _norm(path)
        if "w" in mode:
            return _WriteHandle(self, path)
        if path not in self.files:
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        self.log.append(("read", path))
        return io.BytesIO(self.files[path])

    def remove(self, path: str) -> None:
        path = _norm(path)
        if path not in self.files:
            raise FileNotFoundError(errno.ENOENT, "No such file", path)
        del self.files[path]
        self.log.append(("remove", path))

    def getfo(self, path: str, fh) -> int:
        data = self.files[_norm(path)]
        fh.write(data)
        return len(data)

    def close(self) -> None:
        self.closed = True


class _Stream:
    def __init__(self, name: str, data: str, exit_status: int, calls: list[str]) -> None:
        self._name = name
        self._data = data.encode("utf-8")
        self.channel = self
        self._exit_status = exit_status
        self._calls = calls

    def recv_exit_status(self) -> int:
        self._calls.append("exit_status")
        return self._exit_status

    def read(self) -> bytes:
        self._calls.append(f"read {self._name}")
        return self._data


class FakeSsh:
    """Records commands; ``results`` maps a command to (status, stdout, stderr)."""

    def __init__(self, results: Optional[dict[str, tuple[int, str, str]]] = None) -> None:
        self.results = dict(results or {})
        self.commands: list[str] = []
        self.calls: list[str] = []
        self.closed = False

    def exec_command(self, command: str):
        self.commands.append(command)
        status, out, err = self.results.get(command, (0, "", ""))
        return None, _Stream("stdout", out, status, self.calls), _Stream("stderr", err, status, self.calls)

    def close(self) -> None:
        self.closed = True


class FakeSessions:
    """Drop-in for :class:`TabletSessions` handing out the same fakes."""

    def __init__(
        self,
        sftp: Optional[FakeSftp] = None,
        ssh: Optional[FakeSsh] = None,
        on_open: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.sftp = sftp or FakeSftp()
        self.ssh = ssh or FakeSsh()
        self.on_open = on_open
        self.opened: list[str] = []
        self.active = 0
        self._lock = threading.Lock()

    @contextmanager
    def _session(self, kind: str, value) -> Iterator:
        with self._lock:
            self.opened.append(kind)
            self.active += 1
        try:
            if self.on_open is not None:
                self.on_open(kind)
            yield value
        finally:
            with self._lock:
                self.active -= 1

    def sftp_session(self):
        return self._session("sftp", self.sftp)

    def ssh_session(self):
        return self._session("ssh", self.ssh)


@pytest.fixture
def fake_sftp() -> FakeSftp:
    return FakeSftp()


@pytest.fixture
def fake_ssh() -> FakeSsh:
    return FakeSsh()
