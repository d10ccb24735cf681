"""
test_models.py — Unit tests for models.py
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from models import DEFAULT_WATCH_URL, Stream, StreamLib, Vertical, Visibility


class TestStream:
    """Test Stream defaults and helpers."""

    def test_latest_title_and_description(self):
        stream = Stream(id="s1", title=["New", "Old"], description=["Desc"])
        assert stream.latest_title == "New"
        assert stream.latest_description == "Desc"

    def test_latest_of_empty_history(self):
        stream = Stream(id="s1")
        assert stream.latest_title == ""
        assert stream.latest_description == ""

    def test_camel_case_aliases(self):
        stream = Stream.model_validate({"id": "s1", "categoryId": "20", "startTime": "2024-03-24T12:39:36Z"})
        assert stream.category_id == "20"
        assert stream.start_time == "2024-03-24T12:39:36Z"


class TestVertical:

    def test_name_is_required(self):
        with pytest.raises(ValidationError):
            Vertical()

    def test_defaults(self):
        vertical = Vertical(name="a.mkv")
        assert vertical.uploaded is False
        assert vertical.category_id is None
        assert vertical.tags == []

    def test_dump_by_alias(self):
        data = Vertical(name="a.mkv", start_time=12).model_dump(by_alias=True, exclude_none=True)
        assert data["startTime"] == 12
        assert "categoryId" not in data


class TestStreamLib:

    def test_defaults(self):
        lib = StreamLib()
        assert lib.verticals_options.visibility == Visibility.PUBLIC.value
        assert lib.verticals_options.add_link_to_video is True
        assert lib.verticals_options.offset_link_to_video_in_seconds == 0
        assert lib.watch_url == DEFAULT_WATCH_URL
        assert lib.streams == {}

    def test_invalid_visibility(self):
        with pytest.raises(ValidationError):
            StreamLib.model_validate({"verticalsOptions": {"visibility": "friends"}})

    def test_defaults_are_not_shared(self):
        first, second = StreamLib(), StreamLib()
        first.streams["s1"] = Stream(id="s1")
        assert second.streams == {}
