"""Services"""

from talent_portfolio.services.editor import PortfolioEditor
from talent_portfolio.services.previews import PreviewRegistry
from talent_portfolio.services.reorder import DragEndEvent, apply_drag_event, on_drag_end
from talent_portfolio.services.sync_engine import (
    SyncEngine,
    SyncState,
    build_sync_payload,
    prepare_for_sync,
    validate,
)
from talent_portfolio.services.transport import (
    HttpPortfolioTransport,
    PortfolioTransport,
    PortfolioTransportError,
    SyncPayload,
    create_http_transport,
)

__all__ = [
    "DragEndEvent",
    "HttpPortfolioTransport",
    "PortfolioEditor",
    "PortfolioTransport",
    "PortfolioTransportError",
    "PreviewRegistry",
    "SyncEngine",
    "SyncPayload",
    "SyncState",
    "apply_drag_event",
    "build_sync_payload",
    "create_http_transport",
    "on_drag_end",
    "prepare_for_sync",
    "validate",
]
