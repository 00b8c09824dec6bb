"""Invariant-preserving operations on a portfolio collection.

Every function here takes a collection and returns a new list; neither the
input list nor its items are modified. The functions are total: an identity
that is not in the collection turns the operation into a no-op.

Invariants kept on every returned collection:
    1. Identities are unique.
    2. A non-empty collection has exactly one featured item.
    3. Every item has a server id or a pending upload.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from typing import Any

from talent_portfolio.constants.portfolio_constants import TEMP_KEY_PREFIX
from talent_portfolio.models import (
    Identity,
    PendingUpload,
    PersistedId,
    PortfolioItem,
    TempKey,
)

__all__ = [
    "PreviewFactory",
    "add_items",
    "as_identity",
    "find_item",
    "load",
    "new_temp_key",
    "normalize_featured",
    "remove_item",
    "reorder",
    "set_featured",
]

PreviewFactory = Callable[[TempKey, PendingUpload], str]


def new_temp_key() -> TempKey:
    """Mint a fresh local identity for an unsynced item."""
    return TempKey(f"{TEMP_KEY_PREFIX}{uuid.uuid4().hex}")


def as_identity(key: Identity | int | str) -> Identity:
    """Coerce a raw UI key into an identity.

    Integers are server ids, strings are temp keys.
    """
    if isinstance(key, (PersistedId, TempKey)):
        return key
    if isinstance(key, int) and not isinstance(key, bool):
        return PersistedId(key)
    if isinstance(key, str):
        return TempKey(key)
    raise TypeError(f"unsupported identity key: {key!r}")


def _index_of(collection: Sequence[PortfolioItem], identity: Identity | int | str) -> int:
    try:
        target = as_identity(identity)
    except (TypeError, ValueError):
        return -1
    for idx, item in enumerate(collection):
        if item.identity == target:
            return idx
    return -1


def find_item(
    collection: Sequence[PortfolioItem], identity: Identity | int | str
) -> PortfolioItem | None:
    """Return the item with ``identity``, or None."""
    idx = _index_of(collection, identity)
    return collection[idx] if idx != -1 else None


def normalize_featured(collection: Sequence[PortfolioItem]) -> list[PortfolioItem]:
    """Leave exactly one featured item.

    With no featured item the first one is promoted; with several, only the
    first flagged item keeps the flag.
    """
    if not collection:
        return []
    featured_index = next(
        (idx for idx, item in enumerate(collection) if item.featured_image), 0
    )
    return [
        item
        if item.featured_image == (idx == featured_index)
        else replace(item, featured_image=idx == featured_index)
        for idx, item in enumerate(collection)
    ]


def load(server_items: Iterable[dict[str, Any] | PortfolioItem]) -> list[PortfolioItem]:
    """Build a fresh collection from the server's (unordered) item list."""
    items = [
        entry if isinstance(entry, PortfolioItem) else PortfolioItem.from_server(entry, idx)
        for idx, entry in enumerate(server_items)
    ]
    # sorted() is stable, so equal priorities keep response order.
    return normalize_featured(sorted(items, key=lambda item: item.priority))


def _default_preview(temp_key: TempKey, upload: PendingUpload) -> str:
    return f"blob:{temp_key.value}"


def add_items(
    collection: Sequence[PortfolioItem],
    files: Iterable[PendingUpload],
    make_preview: PreviewFactory | None = None,
) -> list[PortfolioItem]:
    """Append one new unsynced item per file.

    The first new item becomes featured only if nothing in ``collection`` is
    featured yet.

    Args:
        collection: Current collection.
        files: Newly selected files, in selection order.
        make_preview: Returns a display URL for a new item. Defaults to a
            ``blob:`` URL derived from the temp key.

    Returns:
        The appended, normalized collection.
    """
    preview = make_preview or _default_preview
    has_featured = any(item.featured_image for item in collection)
    new_items: list[PortfolioItem] = []
    for idx, upload in enumerate(files):
        temp_key = new_temp_key()
        new_items.append(
            PortfolioItem(
                identity=temp_key,
                media_type=upload.media_type,
                preview_url=preview(temp_key, upload),
                featured_image=not has_featured and idx == 0,
                priority=len(collection) + idx,
                pending_upload=upload,
            )
        )
    if not new_items:
        return list(collection)
    return normalize_featured([*collection, *new_items])


def remove_item(
    collection: Sequence[PortfolioItem], identity: Identity | int | str
) -> list[PortfolioItem]:
    """Drop the item with ``identity``.

    If it was the featured item, the new first item is promoted.
    """
    idx = _index_of(collection, identity)
    if idx == -1:
        return list(collection)
    remaining = [item for pos, item in enumerate(collection) if pos != idx]
    if remaining and not any(item.featured_image for item in remaining):
        remaining[0] = replace(remaining[0], featured_image=True)
    return remaining


def set_featured(
    collection: Sequence[PortfolioItem], identity: Identity | int | str
) -> list[PortfolioItem]:
    """Make ``identity`` the only featured item."""
    idx = _index_of(collection, identity)
    if idx == -1:
        return list(collection)
    return [
        item
        if item.featured_image == (pos == idx)
        else replace(item, featured_image=pos == idx)
        for pos, item in enumerate(collection)
    ]


def reorder(
    collection: Sequence[PortfolioItem],
    from_identity: Identity | int | str,
    to_identity: Identity | int | str,
) -> list[PortfolioItem]:
    """Move the ``from_identity`` item to the position of ``to_identity``.

    Featured flags are left alone; order and featured status are independent.
    """
    old_index = _index_of(collection, from_identity)
    new_index = _index_of(collection, to_identity)
    if old_index == -1 or new_index == -1 or old_index == new_index:
        return list(collection)
    moved = list(collection)
    moved.insert(new_index, moved.pop(old_index))
    return moved
