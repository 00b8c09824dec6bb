"""Validate, serialize and submit a portfolio collection in one bulk request.

A sync attempt moves through these states::

    idle -> validating -> validation_failed -> idle
                       -> submitting -> submitted -> reloading -> idle
                                     -> network_failed -> idle

Nothing is retried automatically and the input collection is never modified,
so a failed attempt leaves the caller free to edit and resubmit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import replace
from enum import StrEnum

from talent_portfolio.constants.portfolio_constants import (
    FILE_TOO_LARGE_MESSAGE,
    GENERAL_ERROR_FIELD,
    GENERIC_SYNC_FAILURE,
    MAX_UPLOAD_BYTES,
    MISSING_FILE_MESSAGE,
    MULTIPLE_FEATURED_MESSAGE,
    NO_FEATURED_MESSAGE,
    SYNC_SUCCESS_MESSAGE,
    VALIDATION_FAILED_MESSAGE,
)
from talent_portfolio.models import (
    MissingProfileError,
    PortfolioItem,
    SyncInProgressError,
    SyncResult,
)
from talent_portfolio.services import item_store
from talent_portfolio.services.transport import (
    PortfolioTransport,
    PortfolioTransportError,
    SyncPayload,
)

logger = logging.getLogger(__name__)

__all__ = [
    "SyncEngine",
    "SyncState",
    "build_sync_payload",
    "prepare_for_sync",
    "validate",
]


class SyncState(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    VALIDATION_FAILED = "validation_failed"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    RELOADING = "reloading"
    NETWORK_FAILED = "network_failed"


StateListener = Callable[[SyncState, SyncState], None]


def validate(
    collection: Sequence[PortfolioItem], max_upload_bytes: int = MAX_UPLOAD_BYTES
) -> list[str]:
    """Check a collection right before it is sent.

    Args:
        collection: Items in display order.
        max_upload_bytes: Size ceiling for each pending upload.

    Returns:
        Error messages; empty when the collection can be synced.
    """
    errors: list[str] = []
    featured_count = 0
    limit_mb = max_upload_bytes // (1024 * 1024)

    for idx, item in enumerate(collection):
        upload = item.pending_upload
        if not item.is_persisted and upload is None:
            errors.append(MISSING_FILE_MESSAGE.format(position=idx + 1))
        if upload is not None and upload.size > max_upload_bytes:
            errors.append(FILE_TOO_LARGE_MESSAGE.format(filename=upload.filename, limit=limit_mb))
        if item.featured_image:
            featured_count += 1

    # Collections built outside item_store may hold zero or several featured items.
    if collection and featured_count == 0:
        errors.append(NO_FEATURED_MESSAGE)
    if featured_count > 1:
        errors.append(MULTIPLE_FEATURED_MESSAGE)

    return errors


def prepare_for_sync(collection: Sequence[PortfolioItem]) -> list[PortfolioItem]:
    """Rewrite ``priority`` to the item's index so stored order matches display order."""
    return [
        item if item.priority == idx else replace(item, priority=idx)
        for idx, item in enumerate(collection)
    ]


def build_sync_payload(profile_id: int, collection: Sequence[PortfolioItem]) -> SyncPayload:
    """Serialize a prepared collection into indexed multipart fields.

    Persisted items send their id; items with a pending upload (new ones and
    replacements) send a file part.
    """
    payload = SyncPayload(profile_id=profile_id)
    payload.fields["profile_id"] = str(profile_id)

    for idx, item in enumerate(collection):
        prefix = f"portfolio[{idx}]"
        payload.fields[f"{prefix}[priority]"] = str(item.priority)
        payload.fields[f"{prefix}[featured_image]"] = "1" if item.featured_image else "0"
        if item.id is not None:
            payload.fields[f"{prefix}[id]"] = str(item.id)
        if item.pending_upload is not None:
            upload = item.pending_upload
            payload.files[f"{prefix}[file]"] = (
                upload.filename,
                upload.data,
                upload.content_type,
            )

    return payload


class SyncEngine:
    """Runs sync attempts against one transport, one at a time.

    Args:
        transport: Load and bulk-sync boundary.
        max_upload_bytes: Per-file size ceiling enforced before submitting.
        on_state_change: Called with ``(old, new)`` on every state transition.
    """

    def __init__(
        self,
        transport: PortfolioTransport,
        max_upload_bytes: int = MAX_UPLOAD_BYTES,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._transport = transport
        self._max_upload_bytes = max_upload_bytes
        self._on_state_change = on_state_change
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is not SyncState.IDLE

    def _transition(self, new_state: SyncState) -> None:
        old_state = self._state
        self._state = new_state
        if self._on_state_change is not None:
            self._on_state_change(old_state, new_state)

    def fetch(self, profile_id: int | None) -> list[PortfolioItem]:
        """Load the authoritative collection for ``profile_id``.

        Raises:
            MissingProfileError: If no profile id was given.
            PortfolioTransportError: If the list request fails.
        """
        _require_profile(profile_id)
        return item_store.load(self._transport.fetch_portfolio(profile_id))

    def sync(self, profile_id: int | None, collection: Sequence[PortfolioItem]) -> SyncResult:
        """Validate, submit and reload.

        Local validation and transport failures are returned as unsuccessful
        results, never raised.

        Raises:
            MissingProfileError: If no profile id was given.
            SyncInProgressError: If another sync on this engine has not finished.
        """
        _require_profile(profile_id)
        if self.busy:
            raise SyncInProgressError("A portfolio sync is already in progress.")

        try:
            return self._attempt(profile_id, collection)
        finally:
            self._transition(SyncState.IDLE)

    def _attempt(self, profile_id: int, collection: Sequence[PortfolioItem]) -> SyncResult:
        self._transition(SyncState.VALIDATING)
        errors = validate(collection, self._max_upload_bytes)
        if errors:
            logger.warning("Portfolio validation failed for profile %s: %s", profile_id, errors)
            self._transition(SyncState.VALIDATION_FAILED)
            return SyncResult(
                success=False,
                message=VALIDATION_FAILED_MESSAGE,
                errors={GENERAL_ERROR_FIELD: errors},
            )

        payload = build_sync_payload(profile_id, prepare_for_sync(collection))
        self._transition(SyncState.SUBMITTING)
        try:
            message = self._transport.submit_sync(payload)
        except PortfolioTransportError as exc:
            logger.warning("Portfolio sync failed for profile %s: %s", profile_id, exc.message)
            self._transition(SyncState.NETWORK_FAILED)
            return SyncResult(
                success=False,
                message=exc.message or GENERIC_SYNC_FAILURE,
                errors=exc.errors,
            )

        self._transition(SyncState.SUBMITTED)
        logger.info("Synced %d portfolio items for profile %s", len(collection), profile_id)
        result = SyncResult(success=True, message=message or SYNC_SUCCESS_MESSAGE)

        self._transition(SyncState.RELOADING)
        try:
            result.items = self.fetch(profile_id)
        except PortfolioTransportError:
            logger.exception("Reload after sync failed for profile %s", profile_id)
        return result


def _require_profile(profile_id: int | None) -> None:
    if profile_id is None or profile_id == "":
        raise MissingProfileError("No active profile ID found")
