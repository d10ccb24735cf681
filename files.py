"""
files.py — YTManager Local File Helpers
=========================================
Everything that touches the operator's disk besides the stream library:
  - picking the most recently modified file of a folder (thumbnails, verticals)
  - reading thumbnails, clips and the timestamps file
  - shrinking a thumbnail that is over the YouTube size limit
  - writing the OBS dock redirect page to the live chat popout
"""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger("ytmanager.files")

IMAGE_EXTENSIONS = ("png", "jpeg", "jpg")
VIDEO_EXTENSIONS = ("mkv", "mp4", "mov", "avi")

LIVE_CHAT_POPOUT_URL = "https://studio.youtube.com/live_chat?is_popout=1&v="


def latest_file(directory: str | Path, extensions: tuple[str, ...] | None = None) -> Path | None:
    """
    Return the most recently modified regular file of a directory.

    Not recursive. Sub-directories are ignored.

    Args:
        directory:  Folder to scan
        extensions: Allowed extensions without the dot, case-insensitive.
                    None accepts every file.

    Returns:
        Path of the newest file, or None if no file matches
    """
    latest: Path | None = None
    latest_mtime = 0.0

    for entry in Path(directory).iterdir():
        if not entry.is_file():
            continue
        if extensions and entry.suffix.lower().lstrip(".") not in extensions:
            continue
        mtime = entry.stat().st_mtime
        if latest is None or mtime > latest_mtime:
            latest, latest_mtime = entry, mtime

    return latest


def fetch_file(path: str | Path, extensions: tuple[str, ...], is_dir: bool = False) -> bytes:
    """
    Read a file, or the newest file with an allowed extension inside a folder.

    Raises:
        FileNotFoundError: If the folder holds no matching file
    """
    target = Path(path)
    if is_dir:
        newest = latest_file(target, extensions)
        if newest is None:
            raise FileNotFoundError(
                f"No {'/'.join(extensions)} file found in {target}"
            )
        target = newest

    logger.debug(f"Reading file: {target}")
    return target.read_bytes()


def fetch_image(path: str | Path, is_dir: bool = False) -> bytes:
    return fetch_file(path, IMAGE_EXTENSIONS, is_dir)


def fetch_video(path: str | Path, is_dir: bool = False) -> bytes:
    return fetch_file(path, VIDEO_EXTENSIONS, is_dir)


def read_text(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")


def recompress_image(data: bytes, colors: int = 256) -> bytes:
    """
    Recompress an image as a palette PNG.

    Reducing to 256 colors usually divides a screenshot-like thumbnail by
    three or more while staying visually close.
    """
    with Image.open(io.BytesIO(data)) as image:
        quantized = image.convert("RGB").quantize(colors=colors)
        output = io.BytesIO()
        quantized.save(output, format="PNG", optimize=True)
    return output.getvalue()


def render_dock_redirect(video_id: str, refresh_time: int = 15, waiting: bool = False) -> str:
    """
    Build the HTML page used as an OBS browser dock.

    The page refreshes every refresh_time seconds. Unless waiting is set, the
    refresh goes to the live chat popout of the video.
    """
    target = "" if waiting else f";URL={LIVE_CHAT_POPOUT_URL}{video_id}"
    return (
        f'<html><head><meta http-equiv="refresh" content="{refresh_time}{target}">'
        "</head></html>"
    )


def write_dock_redirect(path: str | Path, video_id: str, refresh_time: int = 15, waiting: bool = False) -> None:
    Path(path).write_text(render_dock_redirect(video_id, refresh_time, waiting), encoding="utf-8")
    logger.info(f"🔀 Dock redirect page written: {path}")
