"""Pure data handling: on-device descriptors, the item tree and templates.

Nothing in this package touches the network; the :mod:`rmremember.remote`
layer reads the raw files and hands their text to these helpers.
"""

from .content import parse_content_descriptor, parse_metadata_record, resolve_page_ids
from .item_tree import build_item_tree
from .models import (
    ContentDescriptor,
    Item,
    MetadataRecord,
    Notebook,
    TabletTemplate,
    TemplateManifest,
    TemplateManifestEntry,
)

__all__ = [
    "parse_content_descriptor",
    "parse_metadata_record",
    "resolve_page_ids",
    "build_item_tree",
    "ContentDescriptor",
    "Item",
    "MetadataRecord",
    "Notebook",
    "TabletTemplate",
    "TemplateManifest",
    "TemplateManifestEntry",
]
