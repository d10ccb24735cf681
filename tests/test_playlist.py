"""
test_playlist.py — Unit tests for playlist.py
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from playlist import (
    add_video_to_playlist,
    get_playlist_ids,
    get_playlists,
    match_playlists,
    upsert_playlist,
)

ITEMS = [
    {"id": "PL1", "snippet": {"title": "Minecraft"}},
    {"id": "PL2", "snippet": {"title": "Lives"}},
    {"id": "PL3", "snippet": {"title": "Shorts"}},
]


@pytest.fixture
def youtube() -> MagicMock:
    """googleapiclient resource with a single page of playlists."""
    mock = MagicMock()
    mock.playlists().list().execute.return_value = {"items": ITEMS}
    mock.playlists().list_next.return_value = None
    mock.playlists().insert().execute.return_value = {"id": "PL-new"}
    mock.playlistItems().list().execute.return_value = {"items": []}
    return mock


class TestMatchPlaylists:
    """Test playlist title matching."""

    def test_exact_titles(self):
        assert match_playlists(ITEMS, ["Lives", "Minecraft"]) == [
            {"id": "PL1", "name": "Minecraft"},
            {"id": "PL2", "name": "Lives"},
        ]

    def test_no_partial_match(self):
        assert match_playlists(ITEMS, ["Mine"]) == []

    def test_empty_names(self):
        assert match_playlists(ITEMS, []) == []


class TestPlaylistLookup:

    def test_get_playlists(self, youtube):
        assert get_playlists(youtube, ["Shorts"]) == [{"id": "PL3", "name": "Shorts"}]

    def test_follows_pages(self, youtube):
        second_page = MagicMock()
        second_page.execute.return_value = {"items": [{"id": "PL9", "snippet": {"title": "Old"}}]}
        youtube.playlists().list_next.side_effect = [second_page, None]
        assert get_playlists(youtube, ["Old"]) == [{"id": "PL9", "name": "Old"}]

    def test_ids_skip_unknown_without_upsert(self, youtube):
        assert get_playlist_ids(youtube, ["Lives", "Unknown"]) == ["PL2"]

    def test_ids_create_unknown_with_upsert(self, youtube):
        assert get_playlist_ids(youtube, ["Lives", "Unknown"], upsert=True) == ["PL2", "PL-new"]

    def test_upsert_existing_does_not_insert(self, youtube):
        youtube.playlists().insert.reset_mock()
        assert upsert_playlist(youtube, "Lives") == {"id": "PL2", "name": "Lives"}
        youtube.playlists().insert.assert_not_called()


class TestAddVideoToPlaylist:

    def test_inserts_when_absent(self, youtube):
        assert add_video_to_playlist(youtube, "PL1", "vid") is True
        body = youtube.playlistItems().insert.call_args.kwargs["body"]
        assert body["snippet"]["playlistId"] == "PL1"
        assert body["snippet"]["resourceId"] == {"kind": "youtube#video", "videoId": "vid"}

    def test_skips_when_present(self, youtube):
        youtube.playlistItems().list().execute.return_value = {"items": [{"id": "item"}]}
        youtube.playlistItems().insert.reset_mock()
        assert add_video_to_playlist(youtube, "PL1", "vid") is False
        youtube.playlistItems().insert.assert_not_called()
