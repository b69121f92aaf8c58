"""
Unit Tests for Frame Service Models

Tests settings patches, index helpers, camelCase persistence and
pydantic integration of the validated primitives.
"""

import pytest
from pydantic import ValidationError

from microservices.frame_service.models import (
    Image,
    IndexFile,
    PhotoEntry,
    Playlist,
    PlaylistStatus,
    Settings,
    SettingsUpdate,
    StartPlaylistRequest,
)
from microservices.frame_service.primitives import CanvasUrl, Hour, Orientation

from tests.fixtures import make_image_id, make_photo_entry, make_playlist, make_quiet_hours


class TestSettings:
    """Tests for Settings defaults and partial updates"""

    def test_defaults(self):
        settings = Settings()
        assert settings.to_json_dict() == {"intervalHours": 2, "shuffle": True, "cursor": 0}

    def test_update_applies_valid_fields(self):
        """Test both fields are applied when valid"""
        update = SettingsUpdate.from_body({"intervalHours": 6, "shuffle": False})
        settings = Settings(cursor=4).apply_update(update)

        assert settings.interval_hours == 6
        assert settings.shuffle is False
        assert settings.cursor == 4

    @pytest.mark.parametrize(
        "body",
        [
            {"intervalHours": 0.5},
            {"intervalHours": "6"},
            {"intervalHours": True},
            {"intervalHours": float("inf")},
            {"intervalHours": 1e18},
            {"shuffle": "no"},
            {"shuffle": 0},
            {},
        ],
    )
    def test_invalid_fields_keep_stored_value(self, body):
        """Test invalid or missing fields do not override"""
        current = Settings(interval_hours=3, shuffle=True)
        updated = current.apply_update(SettingsUpdate.from_body(body))

        assert updated.interval_hours == 3
        assert updated.shuffle is True

    def test_mixed_patch_applies_only_valid_field(self):
        update = SettingsUpdate.from_body({"intervalHours": -1, "shuffle": False})
        updated = Settings(interval_hours=4).apply_update(update)

        assert updated.interval_hours == 4
        assert updated.shuffle is False

    def test_persisted_settings_reject_small_interval(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"intervalHours": 0, "shuffle": True, "cursor": 0})

    def test_persisted_settings_reject_huge_interval(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"intervalHours": 1e18, "shuffle": True, "cursor": 0})


class TestIndexFile:
    """Tests for IndexFile helpers"""

    def test_image_ids_preserve_order_and_dedupe(self):
        first, second = make_image_id(), make_image_id()
        index = IndexFile(photos=[
            make_photo_entry(first),
            make_photo_entry(second),
            make_photo_entry(first),
        ])
        assert index.image_ids() == [first, second]

    def test_entries_without_uuid_name_are_skipped(self):
        legacy = PhotoEntry(file="holiday_P.jpg", orientation=Orientation.PORTRAIT, added_at="2025-01-01T00:00:00Z")
        index = IndexFile(photos=[legacy])

        assert legacy.image_id is None
        assert index.image_ids() == []

    def test_find(self):
        entry = make_photo_entry()
        index = IndexFile(photos=[entry])

        assert index.find(entry.image_id) == entry
        assert index.find(make_image_id()) is None

    def test_camel_case_json(self):
        entry = make_photo_entry(orientation=Orientation.LANDSCAPE)
        data = IndexFile(photos=[entry]).to_json_dict()

        assert set(data["photos"][0]) == {"file", "orientation", "addedAt"}
        assert data["photos"][0]["orientation"] == "L"

    def test_photo_entries_are_immutable(self):
        entry = make_photo_entry()
        with pytest.raises(ValidationError):
            entry.file = "other.jpg"


class TestImage:
    def test_from_entry_builds_url(self):
        entry = make_photo_entry()
        image = Image.from_entry(entry)

        assert image.id == entry.image_id
        assert image.url == f"/images/{entry.file}"


class TestPlaylist:
    """Tests for Playlist persistence shape"""

    def test_round_trip_through_json(self):
        playlist = make_playlist(
            image_ids=[make_image_id()],
            quiet_hours=make_quiet_hours("Europe/Paris", 22, 6),
        )
        restored = Playlist.model_validate_json(playlist.model_dump_json(by_alias=True))

        assert restored == playlist
        assert isinstance(restored.canvas_url, CanvasUrl)
        assert isinstance(restored.cron_interval_in_hours, Hour)

    def test_camel_case_keys(self):
        data = make_playlist(status=PlaylistStatus.STOP).to_json_dict()

        assert data["status"] == "stop"
        assert {"id", "canvasUrl", "cronIntervalInHours", "availableImagesId", "quietHours"} <= set(data)

    def test_invalid_primitives_fail_validation(self):
        with pytest.raises(ValidationError):
            Playlist.model_validate({
                "id": "not-a-uuid",
                "canvasUrl": "http://canvas.local",
                "cronIntervalInHours": 2,
            })


class TestStartPlaylistRequest:
    """Tests for the POST /playlist/start body"""

    def test_valid_body(self):
        body = StartPlaylistRequest.model_validate({
            "canvasUrl": "http://canvas.local/",
            "cronIntervalInHours": 1.5,
            "quietHours": {"timezone": "UTC", "start": 23, "end": 7},
        })

        assert body.canvas_url == "http://canvas.local"
        assert body.cron_interval_in_hours == 1.5
        assert body.quiet_hours.enabled is True

    @pytest.mark.parametrize(
        "body",
        [
            {"canvasUrl": "canvas.local", "cronIntervalInHours": 2},
            {"canvasUrl": "http://canvas.local", "cronIntervalInHours": 0},
            {"canvasUrl": "http://canvas.local"},
            {"canvasUrl": "http://canvas.local", "cronIntervalInHours": 2,
             "quietHours": {"timezone": "Nowhere/City", "start": 1, "end": 2}},
            {"canvasUrl": "http://canvas.local", "cronIntervalInHours": 2,
             "quietHours": {"timezone": "UTC", "start": 24, "end": 2}},
        ],
    )
    def test_invalid_bodies(self, body):
        with pytest.raises(ValidationError):
            StartPlaylistRequest.model_validate(body)
