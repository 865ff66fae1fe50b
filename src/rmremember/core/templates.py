"""Read/modify/write helpers for the tablet's ``templates.json`` manifest."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..errors import TemplateManifestError
from .models import TabletTemplate, TemplateManifest, TemplateManifestEntry

# Landscape template icons sit in their own glyph block of the tablet's
# icon font.
LANDSCAPE_ICON_FIRST = "\ue9d0"
LANDSCAPE_ICON_LAST = "\ue9ff"

_ENTRY_KEYS = {"filename", "name", "iconCode", "categories", "landscape"}


def is_landscape(icon_code: str) -> Optional[bool]:
    """Return ``True`` for landscape icons, ``None`` (omitted) otherwise."""
    if len(icon_code) == 1 and LANDSCAPE_ICON_FIRST <= icon_code <= LANDSCAPE_ICON_LAST:
        return True
    return None


def _entry_from_mapping(raw: Mapping[str, Any]) -> TemplateManifestEntry:
    if not isinstance(raw, Mapping) or not isinstance(raw.get("filename"), str):
        raise TemplateManifestError("Template entry without a filename.")
    landscape = raw.get("landscape")
    return TemplateManifestEntry(
        filename=raw["filename"],
        name=str(raw.get("name", "")),
        icon_code=str(raw.get("iconCode", "")),
        categories=[str(category) for category in raw.get("categories") or []],
        landscape=bool(landscape) if landscape is not None else None,
        extra={key: value for key, value in raw.items() if key not in _ENTRY_KEYS},
    )


def _entry_to_mapping(entry: TemplateManifestEntry) -> dict[str, Any]:
    data: dict[str, Any] = {
        "categories": list(entry.categories),
        "filename": entry.filename,
        "iconCode": entry.icon_code,
    }
    if entry.landscape is not None:
        data["landscape"] = entry.landscape
    data["name"] = entry.name
    data.update(entry.extra)
    return data


def parse_manifest(text: str) -> TemplateManifest:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TemplateManifestError(f"Invalid templates file: {exc}") from exc
    if not isinstance(raw, Mapping) or not isinstance(raw.get("templates"), list):
        raise TemplateManifestError("Invalid templates file: missing 'templates' list.")
    return TemplateManifest(
        templates=[_entry_from_mapping(item) for item in raw["templates"]],
        extra={key: value for key, value in raw.items() if key != "templates"},
    )


def dump_manifest(manifest: TemplateManifest) -> str:
    data: dict[str, Any] = {"templates": [_entry_to_mapping(entry) for entry in manifest.templates]}
    data.update(manifest.extra)
    return json.dumps(data, indent=2, ensure_ascii=False)


def entry_from_template(template: TabletTemplate) -> TemplateManifestEntry:
    return TemplateManifestEntry(
        filename=template.file_name,
        name=template.name,
        icon_code=template.icon_code,
        categories=[template.category],
        landscape=is_landscape(template.icon_code),
    )


def find_entry(manifest: TemplateManifest, filename: str) -> int:
    """Index of the entry with exactly ``filename`` (case-sensitive), or -1."""
    for index, entry in enumerate(manifest.templates):
        if entry.filename == filename:
            return index
    return -1


def upsert_entry(manifest: TemplateManifest, template: TabletTemplate) -> int:
    """Replace the matching entry in place or append; return its index."""
    entry = entry_from_template(template)
    index = find_entry(manifest, template.file_name)
    if index > -1:
        manifest.templates[index] = entry
        return index
    manifest.templates.append(entry)
    return len(manifest.templates) - 1


def remove_entry(manifest: TemplateManifest, filename: str) -> bool:
    index = find_entry(manifest, filename)
    if index > -1:
        del manifest.templates[index]
        return True
    return False
