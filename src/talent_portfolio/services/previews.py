"""Local preview files for items that have not been uploaded yet.

Each unsynced item gets its bytes written to a scratch file so it can be
displayed before the server knows about it. The preview is acquired when the
item is added and must be released when the item is removed or replaced by
its server copy after a sync.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from talent_portfolio.models import PendingUpload, TempKey

logger = logging.getLogger(__name__)


class PreviewRegistry:
    """Acquire/release bookkeeping for local preview files, keyed by temp key."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root
        self._owns_root = root is None
        self._previews: dict[TempKey, Path] = {}

    def __enter__(self) -> PreviewRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __len__(self) -> int:
        return len(self._previews)

    def __contains__(self, temp_key: object) -> bool:
        return temp_key in self._previews

    def _ensure_root(self) -> Path:
        if self._root is None:
            self._root = Path(tempfile.mkdtemp(prefix="portfolio-previews-"))
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    def acquire(self, temp_key: TempKey, upload: PendingUpload) -> str:
        """Write ``upload`` to a preview file and return its ``file://`` URL."""
        existing = self._previews.get(temp_key)
        if existing is not None:
            return existing.as_uri()

        suffix = Path(upload.filename).suffix
        path = self._ensure_root() / f"{temp_key.value}{suffix}"
        path.write_bytes(upload.data)
        self._previews[temp_key] = path.resolve()
        return self._previews[temp_key].as_uri()

    def release(self, temp_key: TempKey) -> bool:
        """Delete the preview for ``temp_key``; False if none was held."""
        path = self._previews.pop(temp_key, None)
        if path is None:
            return False
        path.unlink(missing_ok=True)
        return True

    def release_all(self) -> int:
        released = 0
        for temp_key in list(self._previews):
            if self.release(temp_key):
                released += 1
        return released

    def close(self) -> None:
        """Release every preview and remove the scratch directory if we created it."""
        released = self.release_all()
        if released:
            logger.debug("Released %d portfolio previews", released)
        if self._owns_root and self._root is not None:
            shutil.rmtree(self._root, ignore_errors=True)
            self._root = None
