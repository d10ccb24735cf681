"""
models.py — YTManager Shared Data Models
==========================================
Contains the canonical data models used across all modules.

Persisted (streamLib.json):
  StreamLib ── streams: {stream id → Stream}
                  Stream ── verticals: {file name → Vertical}

Ephemeral:
  CurrentStreamSettings — the parameter bag of "set current stream", shared
  by the CLI and the REST server.

The JSON document uses camelCase keys (categoryId, startTime, ...) so that
an existing library file can be read as-is. Python code uses snake_case
attributes; pydantic maps between the two.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DEFAULT_WATCH_URL = "https://www.youtube.com/watch?v="


class Visibility(str, Enum):
    """Privacy status given to uploaded verticals."""
    PUBLIC = "public"
    UNLISTED = "unlisted"
    PRIVATE = "private"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        validate_default=True,
    )


class Vertical(_CamelModel):
    """
    A short clip ("shorts") cut from a live stream.

    Attributes:
        id:          Platform video id once uploaded, the parent stream id before
        name:        Source file name, unique within the parent stream
        title:       Title used for the upload
        description: Description used for the upload
        tags:        Tags copied from the parent stream at creation
        category_id: Filled from the parent stream right before upload
        start_time:  Seconds between the clip capture time and the stream start
        uploaded:    False until the upload returned a platform id
    """
    id: str = ""
    name: str
    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category_id: str | None = None
    start_time: int = 0
    uploaded: bool = False

    @field_validator("start_time", mode="before")
    @classmethod
    def round_start_time(cls, value):
        # Older library files hold fractional offsets
        if isinstance(value, float):
            return round(value)
        return value


class Stream(_CamelModel):
    """
    One live broadcast as observed over its lifetime.

    title and description are histories, most recent first, without duplicates.
    """
    id: str = ""
    title: list[str] = Field(default_factory=list)
    description: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    category_id: str = ""
    verticals: dict[str, Vertical] = Field(default_factory=dict)
    start_time: str = ""
    timestamps: str = ""

    @property
    def latest_title(self) -> str:
        return self.title[0] if self.title else ""

    @property
    def latest_description(self) -> str:
        return self.description[0] if self.description else ""


class VerticalsOptions(_CamelModel):
    path: str = ""
    add_link_to_video: bool = True
    offset_link_to_video_in_seconds: int = 0
    visibility: Visibility = Visibility.PUBLIC


class StreamLib(_CamelModel):
    """Root of the persisted stream library."""
    verticals_options: VerticalsOptions = Field(default_factory=VerticalsOptions)
    page_dock: str = ""
    thumb_path: str = ""
    timestamps_path: str = ""
    watch_url: str = DEFAULT_WATCH_URL
    streams: dict[str, Stream] = Field(default_factory=dict)


class CurrentStreamSettings(BaseModel):
    """
    Raw and derived parameters of "set current stream".

    title_original / description_original hold the values as they were
    before compute_stream_settings() rewrote title, description and tags.
    """
    language: str | None = None
    language_sub: str | None = None
    playlists: list[str] | None = None
    tags: list[str] | None = None
    category: str | None = None
    subject: str | None = None
    subject_before_title: bool = False
    subject_after_title: bool = False
    subject_separator: str | None = None
    subject_add_to_tags: bool = False
    title: str | None = None
    title_original: str | None = None
    description: str | None = None
    description_original: str | None = None
    tags_add_description: bool = False
    tags_description_with_hash_tag: bool = False
    tags_description_new_line: bool = False
    tags_description_white_space: str | None = None
    timestamps_title: str | None = None
    timestamps: str | None = None
