"""One editing session over a profile's portfolio.

The editor owns the working collection for a single profile. User actions
replace it through ``item_store``; ``save`` hands it to the ``SyncEngine``
and, on success, swaps in the reloaded server copy. While a save is running
every mutating call raises ``SyncInProgressError``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from talent_portfolio.constants.portfolio_constants import GENERIC_SYNC_FAILURE
from talent_portfolio.models import (
    Identity,
    MissingProfileError,
    PendingUpload,
    PortfolioItem,
    StaleCollectionError,
    SyncInProgressError,
    SyncResult,
    TempKey,
)
from talent_portfolio.services import item_store, reorder
from talent_portfolio.services.previews import PreviewRegistry
from talent_portfolio.services.sync_engine import SyncEngine
from talent_portfolio.services.transport import PortfolioTransportError

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load portfolio"


class PortfolioEditor:
    """Editing session for one profile.

    Args:
        profile_id: Profile whose portfolio is edited.
        engine: Sync engine used for loading and saving.
        previews: Registry for local previews of unsynced files. A private
            one is created when omitted.

    Attributes:
        errors: Messages from the last load or save, local and server alike.
    """

    def __init__(
        self,
        profile_id: int | None,
        engine: SyncEngine,
        previews: PreviewRegistry | None = None,
    ) -> None:
        if profile_id is None:
            raise MissingProfileError("No active profile ID found")
        self.profile_id = profile_id
        self.errors: list[str] = []
        self._engine = engine
        self._previews = previews if previews is not None else PreviewRegistry()
        self._items: list[PortfolioItem] = []
        self._saving = False
        self._needs_reload = False

    @property
    def items(self) -> tuple[PortfolioItem, ...]:
        return tuple(self._items)

    @property
    def saving(self) -> bool:
        return self._saving

    @property
    def needs_reload(self) -> bool:
        return self._needs_reload

    def close(self) -> None:
        self._previews.close()

    def _ensure_idle(self) -> None:
        if self._saving:
            raise SyncInProgressError("Wait for the current save to finish.")

    def _replace_items(self, items: list[PortfolioItem]) -> None:
        kept = {item.identity for item in items}
        for item in self._items:
            if isinstance(item.identity, TempKey) and item.identity not in kept:
                self._previews.release(item.identity)
        self._items = items

    def load(self) -> bool:
        """Replace the collection with the server's copy.

        Returns:
            True on success. On failure the collection is untouched and a
            message is added to ``errors``.
        """
        self._ensure_idle()
        try:
            items = self._engine.fetch(self.profile_id)
        except PortfolioTransportError as exc:
            logger.warning("Failed to load portfolio for profile %s: %s", self.profile_id, exc)
            self.errors = [LOAD_FAILED_MESSAGE]
            return False
        self._replace_items(items)
        self._needs_reload = False
        self.errors = []
        return True

    def add_files(self, files: Iterable[PendingUpload]) -> list[PortfolioItem]:
        """Append newly selected files and return the items created for them."""
        self._ensure_idle()
        before = {item.identity for item in self._items}
        self._items = item_store.add_items(self._items, files, make_preview=self._previews.acquire)
        return [item for item in self._items if item.identity not in before]

    def remove(self, identity: Identity | int | str) -> None:
        self._ensure_idle()
        self._replace_items(item_store.remove_item(self._items, identity))

    def set_featured(self, identity: Identity | int | str) -> None:
        self._ensure_idle()
        self._items = item_store.set_featured(self._items, identity)

    def on_drag_end(
        self, active: Identity | int | str, over: Identity | int | str | None
    ) -> None:
        self._ensure_idle()
        self._items = reorder.on_drag_end(self._items, active, over)

    def save(self) -> SyncResult:
        """Sync the collection.

        On success the reloaded server copy replaces the local one and the
        previews of uploaded items are released. On failure the collection
        is left exactly as it was and ``errors`` lists what went wrong.

        Raises:
            SyncInProgressError: If a save is already running.
            StaleCollectionError: If the reload after the previous save failed
                and ``load`` has not been called since.
        """
        self._ensure_idle()
        if self._needs_reload:
            raise StaleCollectionError("Reload the portfolio before saving again.")

        self._saving = True
        self.errors = []
        try:
            result = self._engine.sync(self.profile_id, self._items)
        finally:
            self._saving = False

        if not result.success:
            self.errors = result.error_messages() or [GENERIC_SYNC_FAILURE]
            return result

        if result.items is None:
            self._needs_reload = True
        else:
            self._replace_items(result.items)
        return result
