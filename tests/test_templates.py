from __future__ import annotations

import json

import pytest

from rmremember.core.models import TabletTemplate
from rmremember.core.templates import (
    dump_manifest,
    entry_from_template,
    is_landscape,
    parse_manifest,
    remove_entry,
    upsert_entry,
)
from rmremember.errors import TemplateManifestError

MANIFEST = json.dumps(
    {
        "templates": [
            {"name": "Blank", "filename": "Blank", "iconCode": "\ue9fe", "categories": ["Creative"]},
            {"name": "Lined", "filename": "P Lines medium", "iconCode": "\ue9a8", "categories": ["Lines"], "landscape": False},
            {"name": "Grid", "filename": "P Grid small", "iconCode": "\ue99e", "categories": ["Grids"], "custom": 1},
        ]
    }
)


def _template(name: str = "Dots", icon: str = "\ue98d", category: str = "Custom") -> TabletTemplate:
    return TabletTemplate(file_name="P Dots", category=category, icon_code=icon, name=name)


def test_upsert_appends_new_entry() -> None:
    manifest = parse_manifest(MANIFEST)
    index = upsert_entry(manifest, _template())

    assert index == 3
    assert [entry.filename for entry in manifest.templates][-1] == "P Dots"


def test_upsert_twice_keeps_single_entry_at_original_index() -> None:
    manifest = parse_manifest(MANIFEST)
    upsert_entry(manifest, TabletTemplate(file_name="P Lines medium", category="A", icon_code="x", name="First"))
    upsert_entry(manifest, TabletTemplate(file_name="P Lines medium", category="B", icon_code="y", name="Second"))

    matches = [i for i, entry in enumerate(manifest.templates) if entry.filename == "P Lines medium"]
    assert matches == [1]
    assert manifest.templates[1].name == "Second"
    assert manifest.templates[1].categories == ["B"]
    assert len(manifest.templates) == 3


def test_filename_match_is_case_sensitive() -> None:
    manifest = parse_manifest(MANIFEST)
    upsert_entry(manifest, TabletTemplate(file_name="blank", category="c", icon_code="i", name="n"))
    assert [entry.filename for entry in manifest.templates].count("Blank") == 1
    assert len(manifest.templates) == 4


def test_remove_entry() -> None:
    manifest = parse_manifest(MANIFEST)
    assert remove_entry(manifest, "Blank") is True
    assert remove_entry(manifest, "Blank") is False
    assert [entry.filename for entry in manifest.templates] == ["P Lines medium", "P Grid small"]


def test_dump_keeps_unknown_keys_and_omits_missing_landscape() -> None:
    manifest = parse_manifest(MANIFEST)
    data = json.loads(dump_manifest(manifest))

    blank, lined, grid = data["templates"]
    assert "landscape" not in blank
    assert lined["landscape"] is False
    assert grid["custom"] == 1
    assert set(blank) == {"name", "filename", "iconCode", "categories"}


def test_landscape_flag_from_icon_code() -> None:
    assert is_landscape("\ue9fe") is True
    assert is_landscape("\ue98d") is None
    assert entry_from_template(_template(icon="\ue9d5")).landscape is True
    assert entry_from_template(_template()).landscape is None


@pytest.mark.parametrize("text", ["{", "{}", '{"templates": {}}', '{"templates": [{"name": "x"}]}'])
def test_malformed_manifest(text: str) -> None:
    with pytest.raises(TemplateManifestError):
        parse_manifest(text)
