"""Rebuild the document/collection hierarchy from flat metadata records."""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from .content import epoch_ms_to_datetime
from .models import DOCUMENT_SUFFIX, DOCUMENT_TYPE, TRASH_PARENT, Item, MetadataRecord


def item_from_record(record: MetadataRecord, trashed: bool) -> Item:
    name = record.visible_name
    if record.type == DOCUMENT_TYPE:
        name = f"{name}{DOCUMENT_SUFFIX}"
    return Item(
        id=record.id,
        modified=epoch_ms_to_datetime(record.last_modified),
        name=name,
        parent_collection_id=record.parent,
        trashed=trashed,
        children=[] if record.is_collection else None,
    )


def build_item_tree(records: Iterable[MetadataRecord]) -> list[Item]:
    """
    Return the root items (parent ``""`` or ``"trash"``) with linked subtrees.

    Deleted records are skipped.  Every descendant inherits ``trashed`` from
    its parent item, whatever its own stored parent.  Records whose parent
    does not exist are not reachable and therefore not returned.
    """
    live = [record for record in records if not record.deleted]

    by_parent: dict[str, list[MetadataRecord]] = defaultdict(list)
    for record in live:
        by_parent[record.parent].append(record)

    roots = [
        item_from_record(record, trashed=record.parent == TRASH_PARENT)
        for record in live
        if record.parent in ("", TRASH_PARENT)
    ]

    stack = list(roots)
    visited = {item.id for item in roots}
    while stack:
        current = stack.pop()
        for record in by_parent.get(current.id, ()):
            if record.id in visited:
                continue
            visited.add(record.id)
            child = item_from_record(record, trashed=current.trashed)
            # Non-collections have no container; the walk still continues.
            if current.children is not None:
                current.children.append(child)
            stack.append(child)
    return roots
