"""Installer pieces for the RemarkableLamyEraser systemd service."""

from __future__ import annotations

from dataclasses import dataclass

import httpx

RELEASE_URL = "https://raw.githubusercontent.com/isaacwisdom/RemarkableLamyEraser/v1/RemarkableLamyEraser"
SERVICE_URL = f"{RELEASE_URL}/LamyEraser.service"
BINARY_URL = f"{RELEASE_URL}/RemarkableLamyEraser"

SERVICE_NAME = "LamyEraser.service"
SERVICE_PATH = f"/lib/systemd/system/{SERVICE_NAME}"
BINARY_PATH = "/usr/sbin/RemarkableLamyEraser"

EXEC_START = f"ExecStart={BINARY_PATH}"

# Stop/disable may fail when the service was never installed.
STOP_COMMANDS = (
    f"systemctl stop {SERVICE_NAME} 2&> /dev/null",
    f"systemctl disable {SERVICE_NAME} 2&> /dev/null",
)
ACTIVATE_COMMANDS = (
    f"chmod +x {BINARY_PATH}",
    "systemctl daemon-reload",
    f"systemctl enable {SERVICE_NAME}",
    f"systemctl start {SERVICE_NAME}",
)

DOWNLOAD_TIMEOUT_S = 30.0


@dataclass(frozen=True)
class LamyEraserOptions:
    press: bool = False
    undo: bool = True
    left_handed: bool = False

    def cli_args(self) -> str:
        args = " --press" if self.press else " --toggle"
        args += " --double-press undo" if self.undo else " --double-press redo"
        if self.left_handed:
            args += " --left-handed"
        return args


def apply_options(service_text: str, options: LamyEraserOptions) -> str:
    """Append the eraser options to the unit's ``ExecStart`` line."""
    return service_text.replace(EXEC_START, f"{EXEC_START}{options.cli_args()}")


@dataclass(frozen=True)
class LamyEraserRelease:
    service_text: str
    binary: bytes


def fetch_release(client: httpx.Client, options: LamyEraserOptions) -> LamyEraserRelease:
    """Download the unit file and binary; HTTP errors propagate unchanged."""
    service = client.get(SERVICE_URL, timeout=DOWNLOAD_TIMEOUT_S)
    service.raise_for_status()
    binary = client.get(BINARY_URL, timeout=DOWNLOAD_TIMEOUT_S)
    binary.raise_for_status()
    return LamyEraserRelease(
        service_text=apply_options(service.text, options),
        binary=binary.content,
    )
