"""Default application paths and tablet settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .recognition import DEFAULT_LANGUAGE, is_supported_language


DEFAULT_TABLET_IP = "10.11.99.1"
DEFAULT_SSH_USER = "root"
DEFAULT_SSH_TIMEOUT_S = 2.0
DEFAULT_USB_TIMEOUT_S = 1.0

SETTINGS_FILENAME = "settings.yaml"


@dataclass
class AppPaths:
    """
    Commonly used local paths.

    ``RMREMEMBER_CONFIG_DIR`` and ``RMREMEMBER_DATA_ROOT`` override the
    defaults under ``~/.config/rmremember`` and ``~/.local/share/rmremember``
    so that tests and alternate installs can store files elsewhere.
    """

    config_dir: Path = field(init=False)
    data_root: Path = field(init=False)
    backups: Path = field(init=False)

    def __post_init__(self) -> None:
        env_config = os.environ.get("RMREMEMBER_CONFIG_DIR")
        if env_config:
            self.config_dir = Path(env_config).expanduser()
        else:
            self.config_dir = Path("~/.config/rmremember").expanduser()

        env_data_root = os.environ.get("RMREMEMBER_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = Path("~/.local/share/rmremember").expanduser()

        self.backups = self.data_root / "backups"

    @property
    def settings_file(self) -> Path:
        return self.config_dir / SETTINGS_FILENAME

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        for path in (self.config_dir, self.data_root, self.backups):
            path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class TabletSettings:
    """
    Read-only connection settings for the paired tablet.

    Expected ``settings.yaml`` structure (unknown keys are ignored):

    .. code-block:: yaml

        tablet:
          ip: 192.168.1.20        # empty means the USB address
          password: "hunter2"
        backup_dir: ~/rm-backups
        recognition_language: en_US
    """

    tablet_ip: str = ""
    tablet_password: str = ""
    ssh_user: str = DEFAULT_SSH_USER
    ssh_timeout_s: float = DEFAULT_SSH_TIMEOUT_S
    usb_timeout_s: float = DEFAULT_USB_TIMEOUT_S
    backup_dir: Optional[Path] = None
    recognition_language: str = DEFAULT_LANGUAGE

    @property
    def ssh_host(self) -> str:
        """WiFi address if configured, otherwise the fixed USB address."""
        return self.tablet_ip.strip() or DEFAULT_TABLET_IP

    def sanitized(self) -> TabletSettings:
        """Return a copy with derived limits applied."""
        backup_dir = self.backup_dir
        if backup_dir is not None:
            backup_dir = Path(str(backup_dir)).expanduser()
        return TabletSettings(
            tablet_ip=str(self.tablet_ip or "").strip(),
            tablet_password=str(self.tablet_password or ""),
            ssh_user=str(self.ssh_user or DEFAULT_SSH_USER),
            ssh_timeout_s=max(0.1, float(self.ssh_timeout_s)),
            usb_timeout_s=max(0.1, float(self.usb_timeout_s)),
            backup_dir=backup_dir,
            recognition_language=str(self.recognition_language),
        )


def _recognized_fields() -> set[str]:
    return {f.name for f in fields(TabletSettings)}


def _normalize_mapping(data: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten the optional ``tablet`` block into ``tablet_*`` keys."""
    merged: dict[str, Any] = {}
    for key, value in data.items():
        if key == "tablet" and isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                merged[f"tablet_{sub_key}"] = sub_value
        else:
            merged[str(key)] = value
    return merged


def settings_from_mapping(
    data: Mapping[str, Any] | None,
    environ: Mapping[str, str] | None = None,
) -> TabletSettings:
    """Build :class:`TabletSettings` from ``data`` plus environment overrides."""
    environ = os.environ if environ is None else environ

    normalized = _normalize_mapping(data or {})
    if environ.get("RMREMEMBER_TABLET_IP"):
        normalized["tablet_ip"] = environ["RMREMEMBER_TABLET_IP"]
    if environ.get("RMREMEMBER_TABLET_PASSWORD"):
        normalized["tablet_password"] = environ["RMREMEMBER_TABLET_PASSWORD"]

    known = _recognized_fields()
    payload = {key: normalized[key] for key in normalized.keys() & known}
    settings = TabletSettings(**payload).sanitized()

    if not is_supported_language(settings.recognition_language):
        raise ValueError(
            f"Language is not supported for recognition: {settings.recognition_language}"
        )
    return settings


def load_settings(path: str | Path | None = None) -> TabletSettings:
    """
    Load settings from ``path`` (defaults to ``AppPaths().settings_file``).

    Missing files fall back to default :class:`TabletSettings`.
    """
    cfg_path = Path(path) if path is not None else AppPaths().settings_file
    if not cfg_path.exists():
        return settings_from_mapping(None)
    with cfg_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return settings_from_mapping(raw)
