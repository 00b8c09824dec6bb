from __future__ import annotations

from pathlib import Path

import pytest

from talent_portfolio.services.media_storage import (
    delete_media,
    get_media_content_type,
    get_media_storage_root,
    normalize_content_type,
    resolve_media_path,
    store_media,
    validate_media_upload,
)


@pytest.fixture
def media_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    root = tmp_path / "media"
    monkeypatch.setenv("PORTFOLIO_MEDIA_DIR", str(root))
    return root.resolve()


def test_storage_root_from_environment(media_root: Path) -> None:
    assert get_media_storage_root() == media_root


def test_normalize_content_type() -> None:
    assert normalize_content_type("IMAGE/JPG; charset=binary") == "image/jpeg"
    assert normalize_content_type(None) == ""


@pytest.mark.parametrize(
    ("content_type", "size", "expected"),
    [
        ("image/png", 10, None),
        ("video/mp4", 100 * 1024 * 1024, None),
        ("application/pdf", 10, "The file must be an image or a video."),
        (None, 10, "The file must be an image or a video."),
        ("video/mp4", 100 * 1024 * 1024 + 1, "The file may not be greater than 100MB."),
    ],
)
def test_validate_media_upload(content_type: str | None, size: int, expected: str | None) -> None:
    assert validate_media_upload(content_type, size) == expected


def test_store_resolve_and_delete(media_root: Path) -> None:
    relative = store_media(7, "holiday.jpeg", "image/jpeg", b"bytes")

    assert relative.startswith("7/")
    assert relative.endswith(".jpg")
    path = resolve_media_path(relative)
    assert path is not None
    assert path.read_bytes() == b"bytes"
    assert get_media_content_type(path) == "image/jpeg"

    assert delete_media(relative) is True
    assert resolve_media_path(relative) is None
    assert delete_media(relative) is False


def test_unknown_type_keeps_original_extension(media_root: Path) -> None:
    relative = store_media(1, "clip.MKV", "video/x-matroska", b"v")
    assert relative.endswith(".mkv")


def test_paths_outside_root_are_not_resolved(media_root: Path, tmp_path: Path) -> None:
    outside = tmp_path / "secret.txt"
    outside.write_text("nope")
    assert resolve_media_path("../secret.txt") is None
