"""High-level operations against the paired tablet.

Every public method takes the guard of the transport it uses (SSH or USB),
opens a fresh session, does its work and lets go of both on every exit path.
Methods block, so GUI or asyncio callers should run them in a worker thread
(``asyncio.to_thread`` works fine); calls on the same transport queue up in
arrival order, calls on different transports run side by side.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Any, Iterator, Optional

import httpx
import paramiko

from ..config.app_config import AppPaths, DEFAULT_TABLET_IP, TabletSettings
from ..core.content import parse_content_descriptor, parse_metadata_record, resolve_page_ids
from ..core.item_tree import build_item_tree
from ..core.models import Item, Notebook, TabletTemplate
from ..core.templates import dump_manifest, parse_manifest, remove_entry, upsert_entry
from ..errors import TransportError
from ..tools.debug import time_block
from . import sftp_ops
from .lamy_eraser import (
    ACTIVATE_COMMANDS,
    BINARY_PATH,
    SERVICE_PATH,
    STOP_COMMANDS,
    LamyEraserOptions,
    fetch_release,
)
from .sftp_ops import CommandResult, EntryFilter, not_dot_entry
from .ssh_client import Host, TabletSessions
from .transport_slot import TransportSlot
from .usb_client import UsbClient


logger = logging.getLogger(__name__)

PATH_NOTEBOOKS = "/home/root/.local/share/remarkable/xochitl/"
PATH_TEMPLATES = "/usr/share/remarkable/templates/"
TEMPLATES_FILE = "templates.json"
METADATA_SUFFIX = ".metadata"
CONTENT_SUFFIX = ".content"
PAGE_SUFFIX = ".rm"


class Tablet:
    """Remote access to one tablet over SSH/SFTP and the USB web interface."""

    def __init__(
        self,
        settings: Optional[TabletSettings] = None,
        *,
        sessions: Optional[TabletSessions] = None,
        usb: Optional[UsbClient] = None,
        web: Optional[httpx.Client] = None,
    ) -> None:
        self.settings = settings or TabletSettings()
        self.sessions = sessions or TabletSessions(Host.from_settings(self.settings))
        self.usb = usb or UsbClient(DEFAULT_TABLET_IP, probe_timeout_s=self.settings.usb_timeout_s)
        self.web = web or httpx.Client(follow_redirects=True)
        self.ssh_slot = TransportSlot("ssh")
        self.usb_slot = TransportSlot("usb")

    def close(self) -> None:
        self.usb.close()
        self.web.close()

    def __enter__(self) -> Tablet:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ scoped sessions
    @contextmanager
    def _sftp(self) -> Iterator[paramiko.SFTPClient]:
        with self.ssh_slot.hold(), self.sessions.sftp_session() as sftp:
            yield sftp

    @contextmanager
    def _ssh(self) -> Iterator[paramiko.SSHClient]:
        with self.ssh_slot.hold(), self.sessions.ssh_session() as client:
            yield client

    # ------------------------------------------------------------------ connectivity
    def probe_connectivity(self) -> Optional[TransportError]:
        """
        Check SSH, then USB; return the first failure or ``None`` if healthy.

        The SSH guard is released before the USB guard is taken.
        """
        try:
            with self._sftp():
                pass
        except TransportError as exc:
            return exc

        try:
            with self.usb_slot.hold():
                self.usb.probe()
        except TransportError as exc:
            return exc

        return None

    # ------------------------------------------------------------------ files & commands
    def list_directory(self, remote_dir: str) -> list[paramiko.SFTPAttributes]:
        with self._sftp() as sftp:
            return sftp_ops.list_directory(sftp, remote_dir)

    def read_text(self, remote_path: str) -> str:
        with self._sftp() as sftp:
            return sftp_ops.read_text(sftp, remote_path)

    def read_bytes(self, remote_path: str) -> bytes:
        with self._sftp() as sftp:
            return sftp_ops.read_bytes(sftp, remote_path)

    def write_text(self, remote_path: str, text: str) -> None:
        with self._sftp() as sftp:
            sftp_ops.write_file(sftp, remote_path, text)

    def write_bytes(self, remote_path: str, data: bytes) -> None:
        with self._sftp() as sftp:
            sftp_ops.write_file(sftp, remote_path, data)

    def delete_file(self, remote_path: str) -> bool:
        with self._sftp() as sftp:
            return sftp_ops.delete_file(sftp, remote_path)

    def run_command(self, command: str, check_exit_code: bool = True) -> CommandResult:
        with self._ssh() as client:
            return sftp_ops.run_command(client, command, check_exit_code)

    def backup_tree(
        self,
        remote_root: str,
        local_root: Path,
        entry_filter: EntryFilter = not_dot_entry,
    ) -> int:
        with self._sftp() as sftp, time_block(f"backup {remote_root}"):
            return sftp_ops.backup_tree(sftp, remote_root, Path(local_root), entry_filter)

    def backup(self, item_id: str, target_dir: Optional[Path] = None) -> int:
        """Copy every notebook file whose name starts with *item_id*."""
        if target_dir is None:
            target_dir = self.settings.backup_dir or AppPaths().backups
        logger.info("Backing up %s to %s", item_id, target_dir)
        return self.backup_tree(
            PATH_NOTEBOOKS,
            Path(target_dir),
            lambda attr: attr.filename.startswith(item_id),
        )

    def restart(self) -> None:
        logger.info("Restarting the tablet UI")
        self.run_command("systemctl restart xochitl")

    # ------------------------------------------------------------------ documents
    def list_items(self) -> list[Item]:
        with self._sftp() as sftp:
            records = []
            for attr in sftp_ops.list_directory(sftp, PATH_NOTEBOOKS):
                if not (sftp_ops.is_regular_file(attr) and attr.filename.endswith(METADATA_SUFFIX)):
                    continue
                text = sftp_ops.read_text(sftp, sftp_ops.join_remote(PATH_NOTEBOOKS, attr.filename))
                record = parse_metadata_record(attr.filename[: -len(METADATA_SUFFIX)], text)
                if not record.deleted:
                    records.append(record)

        logger.debug("Read %d metadata records", len(records))
        return build_item_tree(records)

    def get_notebook(self, item_id: str) -> Notebook:
        with self._sftp() as sftp, time_block(f"notebook {item_id}"):
            content = sftp_ops.read_text(sftp, f"{PATH_NOTEBOOKS}{item_id}{CONTENT_SUFFIX}")
            descriptor = parse_content_descriptor(content)

            page_dir = PurePosixPath(PATH_NOTEBOOKS) / item_id
            pages = [
                sftp_ops.read_bytes(sftp, str(page_dir / f"{page_id}{PAGE_SUFFIX}"))
                for page_id in resolve_page_ids(descriptor)
            ]
        return Notebook(pages=pages, portrait=descriptor.portrait)

    # ------------------------------------------------------------------ templates
    def upsert_template(self, template: TabletTemplate) -> None:
        manifest_path = f"{PATH_TEMPLATES}{TEMPLATES_FILE}"
        with self._sftp() as sftp:
            manifest = parse_manifest(sftp_ops.read_text(sftp, manifest_path))
            upsert_entry(manifest, template)

            sftp_ops.write_file(sftp, f"{PATH_TEMPLATES}{template.file_name}.png", template.bytes_png)
            sftp_ops.write_file(sftp, f"{PATH_TEMPLATES}{template.file_name}.svg", template.bytes_svg)
            sftp_ops.write_file(sftp, manifest_path, dump_manifest(manifest))
        logger.info("Uploaded template %s", template.file_name)

    def delete_template(self, template: TabletTemplate) -> None:
        manifest_path = f"{PATH_TEMPLATES}{TEMPLATES_FILE}"
        with self._sftp() as sftp:
            manifest = parse_manifest(sftp_ops.read_text(sftp, manifest_path))
            remove_entry(manifest, template.file_name)

            sftp_ops.delete_file(sftp, f"{PATH_TEMPLATES}{template.file_name}.png")
            sftp_ops.delete_file(sftp, f"{PATH_TEMPLATES}{template.file_name}.svg")
            sftp_ops.write_file(sftp, manifest_path, dump_manifest(manifest))
        logger.info("Deleted template %s", template.file_name)

    # ------------------------------------------------------------------ services
    def install_lamy_eraser(self, press: bool = False, undo: bool = True, left_handed: bool = False) -> None:
        options = LamyEraserOptions(press=press, undo=undo, left_handed=left_handed)
        with self.ssh_slot.hold():
            with self.sessions.sftp_session() as sftp, self.sessions.ssh_session() as client:
                for command in STOP_COMMANDS:
                    sftp_ops.run_command(client, command, check_exit_code=False)

                release = fetch_release(self.web, options)
                sftp_ops.write_file(sftp, SERVICE_PATH, release.service_text)
                sftp_ops.write_file(sftp, BINARY_PATH, release.binary)

                for command in ACTIVATE_COMMANDS:
                    sftp_ops.run_command(client, command)
        logger.info("Installed LamyEraser service (%s)", options.cli_args().strip())

    # ------------------------------------------------------------------ USB web interface
    def list_folder(self, parent_id: str = "") -> Any:
        with self.usb_slot.hold():
            return self.usb.list_folder(parent_id)

    @contextmanager
    def download(self, document_id: str) -> Iterator[Iterator[bytes]]:
        """Stream a document; the USB guard is held until the block exits."""
        with self.usb_slot.hold(), self.usb.download(document_id) as chunks:
            yield chunks

    def download_to(self, document_id: str, target: Path) -> Path:
        target = Path(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        with self.download(document_id) as chunks, target.open("wb") as fh:
            for chunk in chunks:
                fh.write(chunk)
        return target

    def upload(self, path: str | Path, parent_id: str = "") -> None:
        with self.usb_slot.hold():
            self.usb.upload(path, parent_id)
