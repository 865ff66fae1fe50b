"""Parsers for the JSON descriptors the tablet keeps next to each item."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from ..errors import NotebookFormatError
from .models import ContentDescriptor, MetadataRecord, PageRecord

NOTEBOOK_FILE_TYPE = "notebook"
SUPPORTED_FORMAT_VERSIONS = (1, 2)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _load_object(text: str, what: str) -> Mapping[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise NotebookFormatError(f"Invalid reMarkable {what} file: {exc}") from exc
    if not isinstance(data, Mapping):
        raise NotebookFormatError(f"Invalid reMarkable {what} file: expected an object.")
    return data


def epoch_ms_to_datetime(value: str | int | float) -> datetime:
    """Convert an epoch-millisecond value (usually a string) to UTC."""
    return _EPOCH + timedelta(milliseconds=float(value))


def parse_content_descriptor(text: str) -> ContentDescriptor:
    """
    Parse and validate a ``.content`` file.

    Raises :class:`NotebookFormatError` for anything other than a version 1
    or 2 notebook, before any page is looked at.
    """
    data = _load_object(text, "content")

    file_type = data.get("fileType")
    if file_type != NOTEBOOK_FILE_TYPE:
        raise NotebookFormatError("Invalid reMarkable file type.")

    version = data.get("formatVersion")
    if isinstance(version, bool) or version not in SUPPORTED_FORMAT_VERSIONS:
        raise NotebookFormatError(f"Invalid reMarkable file format version: '{version}'.")

    pages: tuple[str, ...] = ()
    records: tuple[PageRecord, ...] = ()
    if version == 1:
        entries = data.get("pages") or []
        if not isinstance(entries, list):
            raise NotebookFormatError("Invalid reMarkable content file: 'pages' is not a list.")
        pages = tuple(str(page) for page in entries)
    else:
        container = data.get("cPages")
        if not isinstance(container, Mapping):
            raise NotebookFormatError("Invalid reMarkable content file: missing 'cPages'.")
        entries = container.get("pages") or []
        if not isinstance(entries, list) or not all(isinstance(page, Mapping) for page in entries):
            raise NotebookFormatError("Invalid reMarkable content file: malformed page entry.")
        records = tuple(
            PageRecord(id=str(page.get("id", "")), deleted=page.get("deleted") is not None)
            for page in entries
        )

    return ContentDescriptor(
        file_type=file_type,
        format_version=version,
        orientation=str(data.get("orientation") or "portrait"),
        pages=pages,
        page_records=records,
    )


def resolve_page_ids(descriptor: ContentDescriptor) -> list[str]:
    """Return visible page ids in their stored order."""
    if descriptor.format_version == 1:
        return list(descriptor.pages)
    return [page.id for page in descriptor.page_records if not page.deleted]


def parse_metadata_record(record_id: str, text: str) -> MetadataRecord:
    data = _load_object(text, "metadata")
    last_modified = str(data.get("lastModified") or "0")
    try:
        epoch_ms_to_datetime(last_modified)
    except (ValueError, OverflowError) as exc:
        raise NotebookFormatError(
            f"Invalid reMarkable metadata file {record_id}: bad lastModified {last_modified!r}."
        ) from exc
    return MetadataRecord(
        id=record_id,
        last_modified=last_modified,
        parent=str(data.get("parent") or ""),
        type=str(data.get("type") or ""),
        visible_name=str(data.get("visibleName") or ""),
        deleted=data.get("deleted") is True,
    )
