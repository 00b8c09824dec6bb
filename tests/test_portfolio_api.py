from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from talent_portfolio.api.main import app
from talent_portfolio.data.db import get_session
from talent_portfolio.data.models import PortfolioMedia, Profile
from talent_portfolio.models import ApprovalStatus, MediaType, PendingUpload
from talent_portfolio.services import item_store
from talent_portfolio.services.editor import PortfolioEditor
from talent_portfolio.services.media_storage import get_media_storage_root
from talent_portfolio.services.previews import PreviewRegistry
from talent_portfolio.services.sync_engine import SyncEngine
from talent_portfolio.services.transport import HttpPortfolioTransport

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"fake"
JPEG_BYTES = b"\xff\xd8\xff" + b"fake"
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"fake"


def _create_profile(name: str = "Talent") -> int:
    with get_session() as session:
        profile = Profile(display_name=name)
        session.add(profile)
        session.flush()
        return profile.id


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def editor_factory(client: TestClient, tmp_path: Path):
    editors: list[PortfolioEditor] = []

    def make(profile_id: int) -> PortfolioEditor:
        engine = SyncEngine(HttpPortfolioTransport(client))
        editor = PortfolioEditor(profile_id, engine, PreviewRegistry(root=tmp_path / "previews"))
        editors.append(editor)
        return editor

    yield make
    for editor in editors:
        editor.close()


def _media_files(profile_id: int) -> list[Path]:
    directory = get_media_storage_root() / str(profile_id)
    return sorted(directory.iterdir()) if directory.exists() else []


class TestListPortfolio:
    def test_unknown_profile_returns_404(self, client: TestClient) -> None:
        response = client.get("/api/profile/999/portfolio")
        assert response.status_code == 404

    def test_empty_portfolio(self, client: TestClient) -> None:
        profile_id = _create_profile()
        response = client.get(f"/api/profile/{profile_id}/portfolio")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": []}


class TestSyncPortfolioEndpoint:
    def test_creates_media_and_serves_files(self, client: TestClient) -> None:
        profile_id = _create_profile()

        response = client.post(
            "/api/profile/sync-portfolio",
            data={
                "profile_id": str(profile_id),
                "portfolio[0][priority]": "0",
                "portfolio[0][featured_image]": "1",
                "portfolio[1][priority]": "1",
                "portfolio[1][featured_image]": "0",
            },
            files={
                "portfolio[0][file]": ("a.png", PNG_BYTES, "image/png"),
                "portfolio[1][file]": ("clip.mp4", MP4_BYTES, "video/mp4"),
            },
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Portfolio synced successfully"

        listing = client.get(f"/api/profile/{profile_id}/portfolio").json()["data"]
        assert [item["media_type"] for item in listing] == ["image", "video"]
        assert [item["featured_image"] for item in listing] == [True, False]
        assert all(item["approval_status"] == "pending" for item in listing)

        media = client.get(listing[0]["file_url"])
        assert media.status_code == 200
        assert media.content == PNG_BYTES
        assert media.headers["content-type"] == "image/png"

    def test_profile_id_header_fallback(self, client: TestClient) -> None:
        profile_id = _create_profile()
        response = client.post(
            "/api/profile/sync-portfolio",
            data={"portfolio[0][featured_image]": "1"},
            files={"portfolio[0][file]": ("a.jpg", JPEG_BYTES, "image/jpeg")},
            headers={"X-Profile-Id": str(profile_id)},
        )
        assert response.status_code == 200

    def test_missing_profile_id_returns_400(self, client: TestClient) -> None:
        response = client.post(
            "/api/profile/sync-portfolio",
            data={"portfolio[0][featured_image]": "1"},
            files={"portfolio[0][file]": ("a.jpg", JPEG_BYTES, "image/jpeg")},
        )
        assert response.status_code == 400

    def test_unknown_profile_returns_404(self, client: TestClient) -> None:
        response = client.post(
            "/api/profile/sync-portfolio",
            data={"profile_id": "424242", "portfolio[0][featured_image]": "1"},
            files={"portfolio[0][file]": ("a.jpg", JPEG_BYTES, "image/jpeg")},
        )
        assert response.status_code == 404

    def test_new_entry_without_file_is_rejected(self, client: TestClient) -> None:
        profile_id = _create_profile()
        response = client.post(
            "/api/profile/sync-portfolio",
            data={"profile_id": str(profile_id), "portfolio[0][featured_image]": "1"},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "The given data was invalid."
        assert body["errors"]["portfolio.0.file"] == [
            "A file is required for new portfolio items."
        ]

    def test_two_featured_entries_are_rejected(self, client: TestClient) -> None:
        profile_id = _create_profile()
        response = client.post(
            "/api/profile/sync-portfolio",
            data={
                "profile_id": str(profile_id),
                "portfolio[0][featured_image]": "1",
                "portfolio[1][featured_image]": "1",
            },
            files={
                "portfolio[0][file]": ("a.jpg", JPEG_BYTES, "image/jpeg"),
                "portfolio[1][file]": ("b.jpg", JPEG_BYTES, "image/jpeg"),
            },
        )
        assert response.status_code == 422
        assert response.json()["errors"]["portfolio"] == [
            "Exactly one portfolio item must be featured."
        ]
        assert _media_files(profile_id) == []

    def test_foreign_media_id_is_rejected(self, client: TestClient) -> None:
        owner = _create_profile("Owner")
        other = _create_profile("Other")
        with get_session() as session:
            media = PortfolioMedia(profile_id=owner, file_path="x.jpg", featured_image=True)
            session.add(media)
            session.flush()
            media_id = media.id

        response = client.post(
            "/api/profile/sync-portfolio",
            data={
                "profile_id": str(other),
                "portfolio[0][id]": str(media_id),
                "portfolio[0][featured_image]": "1",
            },
        )
        assert response.status_code == 422
        assert "portfolio.0.id" in response.json()["errors"]

    def test_non_media_file_is_rejected(self, client: TestClient) -> None:
        profile_id = _create_profile()
        response = client.post(
            "/api/profile/sync-portfolio",
            data={"profile_id": str(profile_id), "portfolio[0][featured_image]": "1"},
            files={"portfolio[0][file]": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 422
        assert response.json()["errors"]["portfolio.0.file"] == [
            "The file must be an image or a video."
        ]

    def test_malformed_fields_are_rejected(self, client: TestClient) -> None:
        profile_id = _create_profile()
        response = client.post(
            "/api/profile/sync-portfolio",
            data={
                "profile_id": str(profile_id),
                "portfolio[0][priority]": "first",
                "portfolio[0][featured_image]": "maybe",
            },
        )
        assert response.status_code == 422
        errors = response.json()["errors"]
        assert "portfolio.0.priority" in errors
        assert "portfolio.0.featured_image" in errors

    def test_replacing_a_file_resets_approval(self, client: TestClient) -> None:
        profile_id = _create_profile()
        client.post(
            "/api/profile/sync-portfolio",
            data={"profile_id": str(profile_id), "portfolio[0][featured_image]": "1"},
            files={"portfolio[0][file]": ("a.jpg", JPEG_BYTES, "image/jpeg")},
        )
        with get_session() as session:
            media = session.query(PortfolioMedia).filter_by(profile_id=profile_id).one()
            media.approval_status = "approved"
            media_id = media.id
        old_files = _media_files(profile_id)

        response = client.post(
            "/api/profile/sync-portfolio",
            data={
                "profile_id": str(profile_id),
                "portfolio[0][id]": str(media_id),
                "portfolio[0][featured_image]": "1",
            },
            files={"portfolio[0][file]": ("b.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 200

        listing = client.get(f"/api/profile/{profile_id}/portfolio").json()["data"]
        assert listing[0]["id"] == media_id
        assert listing[0]["approval_status"] == "pending"
        assert client.get(listing[0]["file_url"]).content == PNG_BYTES
        assert len(_media_files(profile_id)) == 1
        assert _media_files(profile_id) != old_files

    def test_unknown_media_returns_404(self, client: TestClient) -> None:
        assert client.get("/api/media/12345").status_code == 404


class TestEditorAgainstApi:
    def test_full_editing_session(self, editor_factory) -> None:
        profile_id = _create_profile()
        editor = editor_factory(profile_id)
        assert editor.load() is True
        assert editor.items == ()

        editor.add_files(
            [
                PendingUpload("a.png", "image/png", PNG_BYTES),
                PendingUpload("b.jpg", "image/jpeg", JPEG_BYTES),
                PendingUpload("c.mp4", "video/mp4", MP4_BYTES),
            ]
        )
        result = editor.save()
        assert result.success is True, editor.errors

        first_ids = [item.id for item in editor.items]
        assert all(isinstance(item_id, int) for item_id in first_ids)
        assert [item.featured_image for item in editor.items] == [True, False, False]
        assert editor.items[2].media_type is MediaType.VIDEO
        assert all(item.approval_status is ApprovalStatus.PENDING for item in editor.items)
        assert all(item.preview_url.startswith("http://testserver/") for item in editor.items)

        # Move the video to the front, feature it, and drop the jpeg.
        a_id, b_id, c_id = first_ids
        editor.on_drag_end(c_id, a_id)
        editor.set_featured(c_id)
        editor.remove(b_id)
        assert editor.save().success is True

        assert [item.id for item in editor.items] == [c_id, a_id]
        assert [item.featured_image for item in editor.items] == [True, False]
        assert [item.priority for item in editor.items] == [0, 1]
        assert len(_media_files(profile_id)) == 2

        # A fresh session sees the same state.
        other = editor_factory(profile_id)
        assert other.load() is True
        assert other.items == editor.items

    def test_server_rejection_is_listed(self, editor_factory) -> None:
        profile_id = _create_profile()
        editor = editor_factory(profile_id)
        editor.load()
        editor.add_files([PendingUpload("notes.txt", "text/plain", b"not media")])

        result = editor.save()

        assert result.success is False
        assert editor.errors == ["The file must be an image or a video."]
        assert len(editor.items) == 1
        assert editor.items[0].pending_upload is not None

    def test_removing_everything_clears_portfolio(self, editor_factory) -> None:
        profile_id = _create_profile()
        editor = editor_factory(profile_id)
        editor.load()
        editor.add_files([PendingUpload("a.png", "image/png", PNG_BYTES)])
        editor.save()

        editor.remove(editor.items[0].identity)
        assert editor.save().success is True
        assert editor.items == ()
        assert _media_files(profile_id) == []

    def test_replacement_upload_through_engine(self, client: TestClient) -> None:
        profile_id = _create_profile()
        engine = SyncEngine(HttpPortfolioTransport(client))
        first = engine.sync(
            profile_id,
            item_store.add_items([], [PendingUpload("a.png", "image/png", PNG_BYTES)]),
        )
        assert first.success is True
        items = engine.fetch(profile_id)
        replaced = replace(
            items[0], pending_upload=PendingUpload("b.jpg", "image/jpeg", JPEG_BYTES)
        )

        result = engine.sync(profile_id, [replaced])

        assert result.success is True
        assert result.items is not None
        assert result.items[0].id == items[0].id
        assert client.get(result.items[0].preview_url).content == JPEG_BYTES
