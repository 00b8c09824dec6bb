"""Translate drag-and-drop gestures into collection reorders.

The drag library decides when a gesture ends and which two rendered items
are involved; this module only maps that pair onto ``item_store.reorder``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from talent_portfolio.models import Identity, PortfolioItem
from talent_portfolio.services import item_store

DragKey = Identity | int | str


@dataclass(frozen=True, slots=True)
class DragEndEvent:
    """A finished or cancelled drag gesture.

    Attributes:
        active: Key of the dragged item.
        over: Key of the item it was dropped on, or None when cancelled.
    """

    active: DragKey
    over: DragKey | None = None


def on_drag_end(
    collection: Sequence[PortfolioItem], active: DragKey, over: DragKey | None
) -> list[PortfolioItem]:
    """Apply a drag that ended with ``active`` dropped over ``over``."""
    if over is None or active == over:
        return list(collection)
    return item_store.reorder(collection, active, over)


def apply_drag_event(
    collection: Sequence[PortfolioItem], event: DragEndEvent
) -> list[PortfolioItem]:
    return on_drag_end(collection, event.active, event.over)
