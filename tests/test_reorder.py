"""Tests for the drag-and-drop reorder adapter."""

from __future__ import annotations

from talent_portfolio.models import PendingUpload, PersistedId, PortfolioItem
from talent_portfolio.services import item_store
from talent_portfolio.services.reorder import DragEndEvent, apply_drag_event, on_drag_end


def _collection() -> list[PortfolioItem]:
    persisted = [
        PortfolioItem(identity=PersistedId(10), featured_image=True),
        PortfolioItem(identity=PersistedId(20)),
    ]
    upload = PendingUpload(filename="new.jpg", content_type="image/jpeg", data=b"x")
    return item_store.add_items(persisted, [upload])


def test_drag_end_moves_item() -> None:
    items = _collection()
    result = on_drag_end(items, 10, 20)
    assert [item.key for item in result] == [20, 10, items[2].key]


def test_drag_end_with_temp_key_identity() -> None:
    items = _collection()
    new_key = items[2].key
    result = on_drag_end(items, new_key, 10)
    assert [item.key for item in result] == [new_key, 10, 20]
    # featured stays with the item, not the position
    assert result[1].featured_image is True


def test_cancelled_drag_is_noop() -> None:
    items = _collection()
    assert on_drag_end(items, 10, None) == items


def test_drop_on_itself_is_noop() -> None:
    items = _collection()
    assert on_drag_end(items, 20, 20) == items


def test_unknown_over_is_noop() -> None:
    items = _collection()
    assert on_drag_end(items, 10, 999) == items


def test_apply_drag_event() -> None:
    items = _collection()
    result = apply_drag_event(items, DragEndEvent(active=PersistedId(20), over=PersistedId(10)))
    assert [item.key for item in result][:2] == [20, 10]
