"""
conftest.py — Shared fixtures for YTManager unit tests
"""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to sys.path so tests can import YTManager modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from actions import Context  # noqa: E402
from models import CurrentStreamSettings, Stream, StreamLib, Vertical  # noqa: E402
from stream_library import StreamLibrary  # noqa: E402


@pytest.fixture
def sample_broadcast() -> dict:
    """liveBroadcasts.list item, as returned by the YouTube Data API."""
    return {
        "id": "broadcast-123",
        "snippet": {
            "title": "Test Stream",
            "liveChatId": "chat-123",
            "publishedAt": "2024-03-24T12:39:36Z",
            "scheduledStartTime": "2024-03-24T12:30:00Z",
        },
        "status": {"privacyStatus": "public"},
        "contentDetails": {
            "monitorStream": {"enableMonitorStream": True, "broadcastStreamDelayMs": 0},
        },
    }


@pytest.fixture
def sample_video() -> dict:
    """videos.list item of the broadcast above."""
    return {
        "id": "broadcast-123",
        "snippet": {
            "title": "Test Video",
            "description": "Test Description",
            "tags": ["tag1", "tag2"],
            "categoryId": "20",
        },
    }


@pytest.fixture
def sample_stream() -> Stream:
    return Stream(
        id="broadcast-123",
        title=["Test Video"],
        description=["Test Description"],
        tags=["tag1", "tag2"],
        category_id="20",
        start_time="2024-03-24T12:39:36Z",
        verticals={
            "Replay_2024-03-24_13-38-36.mkv": Vertical(
                id="broadcast-123",
                name="Replay_2024-03-24_13-38-36.mkv",
                title="V1",
                description="Desc",
                tags=["tag1"],
                start_time=3540,
            ),
        },
    )


@pytest.fixture
def library(tmp_path, sample_stream) -> StreamLibrary:
    """A stream library saved under tmp_path, holding one stream with one vertical."""
    lib = StreamLib(streams={sample_stream.id: sample_stream})
    lib.verticals_options.path = str(tmp_path / "verticals")
    return StreamLibrary(lib, tmp_path / "streamLib.json")


@pytest.fixture
def service(sample_broadcast, sample_video) -> MagicMock:
    """YouTubeService stand-in answering like a channel that is live."""
    mock = MagicMock()
    mock.get_live_broadcast.return_value = sample_broadcast
    mock.get_video.return_value = sample_video
    mock.get_playlists.return_value = [
        {"id": "playlist-1", "name": "Gaming"},
        {"id": "playlist-2", "name": "Live"},
    ]
    mock.set_live_stream_info.return_value = True
    mock.update_description.return_value = True
    mock.set_current_stream.side_effect = lambda broadcast, video, css: css
    mock.upload_video.return_value = "uploaded-id"
    return mock


@pytest.fixture
def ctx(service, library) -> Context:
    return Context(service=service, library=library)


@pytest.fixture
def empty_settings() -> CurrentStreamSettings:
    return CurrentStreamSettings()
