"""Shared dataclasses for tablet items, notebooks and templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

DOCUMENT_TYPE = "DocumentType"
COLLECTION_TYPE = "CollectionType"
TRASH_PARENT = "trash"
DOCUMENT_SUFFIX = ".pdf"


@dataclass(frozen=True)
class MetadataRecord:
    """One ``<id>.metadata`` file as stored on the tablet."""

    id: str
    last_modified: str
    parent: str
    type: str
    visible_name: str
    deleted: bool = False

    @property
    def is_collection(self) -> bool:
        return self.type == COLLECTION_TYPE


@dataclass
class Item:
    id: str
    modified: datetime
    name: str
    parent_collection_id: str
    trashed: bool = False
    children: Optional[list[Item]] = None

    @property
    def is_collection(self) -> bool:
        return self.children is not None


@dataclass(frozen=True)
class PageRecord:
    id: str
    deleted: bool = False


@dataclass(frozen=True)
class ContentDescriptor:
    """Parsed ``<id>.content`` file."""

    file_type: str
    format_version: int
    orientation: str = "portrait"
    pages: tuple[str, ...] = ()
    page_records: tuple[PageRecord, ...] = ()

    @property
    def portrait(self) -> bool:
        return self.orientation == "portrait"


@dataclass
class Notebook:
    pages: list[bytes]
    portrait: bool = True


@dataclass(frozen=True)
class TabletTemplate:
    """A template supplied by the caller; never modified here."""

    file_name: str
    category: str
    icon_code: str
    name: str
    bytes_png: bytes = b""
    bytes_svg: bytes = b""


@dataclass
class TemplateManifestEntry:
    filename: str
    name: str
    icon_code: str
    categories: list[str] = field(default_factory=list)
    landscape: Optional[bool] = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class TemplateManifest:
    templates: list[TemplateManifestEntry] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
