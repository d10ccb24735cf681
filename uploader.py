"""
uploader.py — YTManager Verticals Upload
==========================================
Uploads every vertical of the stream library that is not on YouTube yet.

THE LOOP:
  1. Copy each stream's category onto its pending verticals
  2. For each pending vertical, one at a time:
       upload ──(video id)──▶ uploaded=True, id=<video id>, library saved
          │
       (error / no id) ──▶ logged, next vertical
  3. Report what was uploaded and what failed

The library is saved after every successful upload, so an interrupted batch
never uploads the same clip twice on the next run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from errors import PersistenceError
from models import Stream, Vertical, VerticalsOptions
from stream_library import StreamLibrary

logger = logging.getLogger("ytmanager.uploader")

SHORTS_HASHTAG = "#shorts"


@dataclass
class UploadReport:
    """Outcome of one upload batch."""
    uploaded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        return len(self.uploaded)

    def to_dict(self) -> dict:
        return {
            "uploadedCount": self.uploaded_count,
            "uploaded": self.uploaded,
            "failed": self.failed,
        }


def stream_link(watch_url: str, stream_id: str, start_time: int, offset: int = 0) -> str:
    """Link to the moment of the stream the vertical was cut from."""
    return f"{watch_url}{stream_id}&t={max(0, start_time + offset)}s"


def build_vertical_description(
    vertical: Vertical,
    options: VerticalsOptions,
    watch_url: str,
    parent: Stream | None = None,
) -> str:
    """
    Description sent for a vertical.

    Ends with #shorts unless the description already mentions it, and links
    back to the parent stream when the library asks for it.
    """
    description = vertical.description
    if SHORTS_HASHTAG not in description.lower():
        description = f"{description} {SHORTS_HASHTAG}"

    if options.add_link_to_video and parent is not None and parent.id:
        link = stream_link(watch_url, parent.id, vertical.start_time,
                           options.offset_link_to_video_in_seconds)
        description = f"{description}\n\nFull stream: {link}"

    return description


def upload_pending_verticals(
    library: StreamLibrary,
    uploader,
    default_category_id: str = "20",
    save_each: bool = True,
) -> UploadReport:
    """
    Upload every vertical of the library not uploaded yet.

    Args:
        library:             The loaded stream library
        uploader:            Object with upload_video(path, title, description,
                             tags, category_id, privacy_status) → video id | None
                             (YouTubeService)
        default_category_id: Category used when the stream has none
        save_each:           Save the library after each successful upload

    Returns:
        UploadReport listing uploaded and failed vertical names
    """
    options = library.lib.verticals_options
    library.backfill_vertical_categories()
    pending = library.get_unuploaded_verticals()
    report = UploadReport()

    if not pending:
        logger.info("📭 No vertical to upload")
        return report

    logger.info(f"📤 {len(pending)} vertical(s) to upload")

    for i, vertical in enumerate(pending):
        logger.info(f"📹 Vertical {i + 1}/{len(pending)}: {vertical.name}")
        parent = library.find_parent_stream(vertical)

        try:
            video_id = uploader.upload_video(
                path=Path(options.path) / vertical.name,
                title=vertical.title,
                description=build_vertical_description(vertical, options, library.lib.watch_url, parent),
                tags=vertical.tags,
                category_id=vertical.category_id or default_category_id,
                privacy_status=options.visibility,
            )
        except Exception as e:
            logger.error(f"   ❌ Error uploading vertical {vertical.name} — {e}")
            logger.debug(f"Full error: {type(e).__name__}: {e}", exc_info=True)
            report.failed.append(vertical.name)
            continue

        if not video_id:
            logger.error(f"   ❌ Failed to upload vertical {vertical.name}: no video id returned")
            report.failed.append(vertical.name)
            continue

        vertical.uploaded = True
        vertical.id = video_id
        report.uploaded.append(vertical.name)
        logger.info(f"   ✅ Uploaded vertical {vertical.name} with video ID: {video_id}")

        if save_each:
            try:
                library.save()
            except PersistenceError as e:
                logger.warning(f"   ⚠️  Upload recorded in memory only: {e}")

    logger.info(f"\n📊 Upload complete: {report.uploaded_count} succeeded, {len(report.failed)} failed")
    return report
