"""
stream_library.py — YTManager Stream Library (local persistence)
==================================================================
Keeps a local history of the live streams seen on the channel and of the
vertical clips ("shorts") cut from them, in a single JSON file.

LIFECYCLE:
  StreamLibrary.load(path)   → reads the file, falls back to defaults
  ... add_stream / add_vertical_to_stream / ...   (in memory)
  library.save()             → rewrites the whole file (temp file + rename)

MERGE RULES:
  - A stream seen again only grows its title/description history: the newest
    value goes first, unless it is already somewhere in the list.
  - A vertical attached again only gets its title/description replaced (when
    non-empty). Its upload state and id are kept.

VERTICAL UPLOAD STATE:
  uploaded=False (attached) ──(upload returned a video id)──▶ uploaded=True

CONCURRENCY:
  None. Two processes saving the same file: the last one wins.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
import stat
import tempfile
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from errors import InvalidFormatError, PersistenceError
from files import latest_file
from models import Stream, StreamLib, Vertical

logger = logging.getLogger("ytmanager.library")

# Replay_2024-03-24_13-38-36.mkv, Backtrack_2024-03-24_13-38-36.mp4, ...
CLIP_TIMESTAMP_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})_(\d{2})-(\d{2})-(\d{2})")

JSON_INDENT = 3


# ══════════════════════════════════════════════════════════════
# CLIP OFFSET
# ══════════════════════════════════════════════════════════════

def _parse_iso(value: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (ValueError, AttributeError) as e:
        raise InvalidFormatError(f"Invalid ISO date time format: {value!r}") from e
    # No offset in the string: local wall-clock time
    return parsed.astimezone()


def compute_clip_offset(file_name: str, iso_reference: str) -> int:
    """
    Seconds between the capture time embedded in a clip name and a reference instant.

    The clip time (YYYY-MM-DD_HH-MM-SS anywhere in the name) is local
    wall-clock time, as written by OBS. The reference keeps its own offset
    (YouTube returns UTC).

    Args:
        file_name:     Clip file name, e.g. "Replay_2024-03-24_13-38-36.mkv"
        iso_reference: ISO-8601 instant, e.g. "2024-03-24T12:39:36Z"

    Returns:
        clip time - reference time, in whole seconds (negative if the clip is earlier)

    Raises:
        InvalidFormatError: If the name holds no timestamp or the reference does not parse
    """
    match = CLIP_TIMESTAMP_PATTERN.search(file_name)
    if not match:
        raise InvalidFormatError(
            "Invalid file name format. Expected format: Replay_YYYY-MM-DD_HH-MM-SS.mkv"
        )

    try:
        clip_time = datetime(*(int(group) for group in match.groups())).astimezone()
    except ValueError as e:
        raise InvalidFormatError(f"Invalid date in file name: {file_name}") from e

    reference = _parse_iso(iso_reference)
    return int((clip_time - reference).total_seconds())


# ══════════════════════════════════════════════════════════════
# CONVERSIONS
# ══════════════════════════════════════════════════════════════

def stream_from_video(video: dict, broadcast: dict | None = None) -> Stream:
    """
    Build a Stream from a YouTube video resource and its live broadcast.

    The start time comes from the broadcast publishedAt.
    """
    snippet = video.get("snippet") or {}
    broadcast_snippet = (broadcast or {}).get("snippet") or {}
    return Stream(
        id=video.get("id") or "",
        title=[snippet.get("title") or ""],
        description=[snippet.get("description") or ""],
        tags=list(snippet.get("tags") or []),
        category_id=snippet.get("categoryId") or "",
        start_time=broadcast_snippet.get("publishedAt") or "",
    )


def vertical_from_stream(stream: Stream, vertical_name: str) -> Vertical:
    """
    Build a Vertical for a clip file, inheriting the stream's latest metadata.

    Raises:
        InvalidFormatError: If the clip name or the stream start time cannot be parsed
    """
    return Vertical(
        id=stream.id,
        name=vertical_name,
        title=stream.latest_title,
        description=stream.latest_description,
        tags=list(stream.tags),
        start_time=compute_clip_offset(vertical_name, stream.start_time),
        uploaded=False,
    )


def _add_unique_front(values: list[str], value: str) -> None:
    if value not in values:
        values.insert(0, value)


def _backup(path: Path) -> None:
    backup = path.with_name(path.name + ".bak")
    try:
        shutil.copy2(path, backup)
        logger.warning(f"💾 Unreadable library kept as {backup}")
    except OSError as e:
        logger.warning(f"⚠️  Could not back up {path}: {e}")


def _file_mode(path: Path) -> int:
    """Permissions for a rewritten file: the current ones, else 0o666 minus the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


# ══════════════════════════════════════════════════════════════
# LIBRARY
# ══════════════════════════════════════════════════════════════

class StreamLibrary:
    """
    The persisted stream library.

    Usage:
        library = StreamLibrary.load("streamLib.json")
        library.add_stream(stream_from_video(video, broadcast)).save()
    """

    def __init__(self, lib: StreamLib, path: str | Path = "streamLib.json") -> None:
        self.lib = lib
        self.path = Path(path)

    @classmethod
    def load(cls, path: str | Path = "streamLib.json") -> "StreamLibrary":
        """
        Read the library file. Never fails.

        A missing, unreadable or invalid file gives an empty library with
        default options (logged). An invalid file is first copied to
        <name>.bak so the next save() does not lose its content.
        """
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls(StreamLib.model_validate(data), path)
        except FileNotFoundError:
            logger.info(f"📚 No stream library at {path}, starting a new one")
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"⚠️  Error reading {path}: {e}. Using an empty library")
            _backup(path)
        return cls(StreamLib(), path)

    def to_dict(self) -> dict:
        return self.lib.model_dump(by_alias=True, exclude_none=True)

    def save(self) -> "StreamLibrary":
        """
        Write the library to its file, replacing it atomically.

        Raises:
            PersistenceError: If the file cannot be written. The in-memory
                              library is unchanged.
        """
        data = json.dumps(self.to_dict(), indent=JSON_INDENT, ensure_ascii=False)
        directory = self.path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=directory, prefix=f".{self.path.name}.",
                suffix=".tmp", delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
            os.chmod(tmp_name, _file_mode(self.path))
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"❌ Error writing {self.path}: {e}")
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not write stream library {self.path}: {e}") from e

        logger.debug(f"Stream library saved: {self.path}")
        return self

    # ── Streams ──

    def get_stream(self, stream_id: str) -> Stream | None:
        return self.lib.streams.get(stream_id)

    def add_stream(self, stream: Stream) -> "StreamLibrary":
        """Insert a new stream, or grow the title/description history of a known one."""
        existing = self.lib.streams.get(stream.id)
        if existing is None:
            self.lib.streams[stream.id] = stream
            logger.debug(f"Stream with id {stream.id} added.")
            return self

        if stream.title:
            _add_unique_front(existing.title, stream.title[0])
        if stream.description:
            _add_unique_front(existing.description, stream.description[0])
        logger.debug(f"Stream with id {stream.id} updated.")
        return self

    def add_timestamps_to_stream(self, stream_id: str, timestamps: str) -> "StreamLibrary":
        stream = self.lib.streams.get(stream_id)
        if stream is None:
            logger.warning(f"Stream with id {stream_id} does not exist.")
            return self
        stream.timestamps = timestamps
        logger.debug(f"Timestamps for stream with id {stream_id} have been updated.")
        return self

    # ── Verticals ──

    def add_vertical_to_stream(self, stream_id: str, vertical: Vertical) -> "StreamLibrary":
        """
        Attach a vertical to a stream.

        A vertical already attached under the same name only gets its title
        and description replaced, and only by non-empty values.
        """
        stream = self.lib.streams.get(stream_id)
        if stream is None:
            logger.warning(f"Stream with id {stream_id} does not exist.")
            return self

        existing = stream.verticals.get(vertical.name)
        if existing is None:
            stream.verticals[vertical.name] = vertical
        else:
            if vertical.title:
                existing.title = vertical.title
            if vertical.description:
                existing.description = vertical.description
        logger.debug(f"Vertical {vertical.name} added to stream with id {stream_id}.")
        return self

    def find_last_vertical(self) -> str | None:
        """Name of the most recently modified file of the verticals folder."""
        folder = self.lib.verticals_options.path
        if not folder or not Path(folder).is_dir():
            logger.warning(f"Verticals folder not found: {folder!r}")
            return None
        newest = latest_file(folder)
        return newest.name if newest else None

    def get_unuploaded_verticals(self) -> list[Vertical]:
        """Every vertical not uploaded yet, stream by stream. Does not modify anything."""
        return [
            vertical
            for stream in self.lib.streams.values()
            for vertical in stream.verticals.values()
            if not vertical.uploaded
        ]

    def backfill_vertical_categories(self) -> int:
        """
        Copy each stream's category onto its verticals not uploaded yet.

        Returns:
            Number of verticals updated
        """
        count = 0
        for stream in self.lib.streams.values():
            for vertical in stream.verticals.values():
                if not vertical.uploaded:
                    vertical.category_id = stream.category_id
                    count += 1
        return count

    def find_parent_stream(self, vertical: Vertical) -> Stream | None:
        for stream in self.lib.streams.values():
            if stream.verticals.get(vertical.name) is vertical:
                return stream
        return None

    # ── Configuration ──

    def set_page_dock(self, page_dock: str) -> "StreamLibrary":
        self.lib.page_dock = page_dock
        return self

    def set_verticals_path(self, path: str) -> "StreamLibrary":
        self.lib.verticals_options.path = path
        return self

    def set_thumb_path(self, thumb_path: str) -> "StreamLibrary":
        self.lib.thumb_path = thumb_path
        return self

    def set_timestamps_path(self, timestamps_path: str) -> "StreamLibrary":
        self.lib.timestamps_path = timestamps_path
        return self

    def set_watch_url(self, watch_url: str) -> "StreamLibrary":
        self.lib.watch_url = watch_url
        return self
