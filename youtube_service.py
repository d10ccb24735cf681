"""
youtube_service.py — YTManager YouTube Data API Client
========================================================
Thin wrapper around google-api-python-client for everything YTManager asks
YouTube to do:

  liveBroadcasts  → current broadcast, title/description of the broadcast
  videos          → read the stream's video, update its metadata, upload shorts
  videoCategories → "Gaming" → "20"
  playlists       → see playlist.py
  thumbnails      → set the stream thumbnail

Every call is synchronous: one request in flight at a time. Retries are left
to googleapiclient (num_retries on execute()).
"""

from __future__ import annotations

import copy
import io
import logging
import mimetypes
from pathlib import Path

from googleapiclient.discovery import build
from googleapiclient.http import MediaFileUpload, MediaIoBaseUpload

import playlist
from models import CurrentStreamSettings
from stream_settings import append_timestamps, compute_stream_settings

logger = logging.getLogger("ytmanager.youtube")

NUM_RETRIES = 3
UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024
MATURE_TAG = "mature"


def build_video_update(video: dict, css: CurrentStreamSettings) -> dict | None:
    """
    Build the videos.update request for the given settings.

    Title and description fall back to the video's current ones. A "mature"
    tag asks for an age restriction.

    Returns:
        {"part": ..., "body": ...}, or None when no setting touches the video
    """
    if not (
        css.category
        or css.language
        or css.playlists is not None
        or css.tags is not None
        or css.language_sub
        or css.title
        or css.description
    ):
        return None

    current = video.get("snippet") or {}
    snippet = copy.deepcopy(current)
    snippet["title"] = css.title or current.get("title")
    snippet["description"] = css.description or current.get("description")

    if css.language:
        snippet["defaultAudioLanguage"] = css.language
    if css.language_sub:
        snippet["defaultLanguage"] = css.language_sub
    if css.category:
        snippet["categoryId"] = css.category

    parts = ["id", "snippet"]
    body: dict = {"id": video.get("id"), "snippet": snippet}

    if css.tags is not None:
        snippet["tags"] = list(css.tags)
        if any(tag.lower() == MATURE_TAG for tag in css.tags):
            parts.append("contentDetails")
            body["contentDetails"] = {"contentRating": {"ytRating": "ytAgeRestricted"}}

    return {"part": ",".join(parts), "body": body}


def _image_mimetype(data: bytes) -> str:
    if data.startswith(b"\x89PNG"):
        return "image/png"
    return "image/jpeg"


class YouTubeService:
    """
    YouTube Data API v3 operations used by the actions.

    Usage:
        service = YouTubeService.from_credentials(get_credentials(...))
        broadcast = service.get_live_broadcast()
    """

    def __init__(self, youtube, category_region: str = "fr") -> None:
        self.youtube = youtube
        self.category_region = category_region

    @classmethod
    def from_credentials(cls, credentials, category_region: str = "fr") -> "YouTubeService":
        youtube = build("youtube", "v3", credentials=credentials, cache_discovery=False)
        return cls(youtube, category_region)

    # ══════════════════════════════════════════════════════════════
    # READ
    # ══════════════════════════════════════════════════════════════

    def get_live_broadcast(self) -> dict:
        """Most recent broadcast of the channel, or {} if there is none."""
        response = self.youtube.liveBroadcasts().list(
            part="id,snippet,status,contentDetails",
            mine=True,
            maxResults=1,
            broadcastType="all",
        ).execute(num_retries=NUM_RETRIES)
        logger.debug(f"Live broadcast list: {response}")
        items = response.get("items") or []
        return items[0] if items else {}

    def get_video(self, video_id: str) -> dict:
        response = self.youtube.videos().list(
            part="id,snippet,statistics,contentDetails",
            id=video_id,
        ).execute(num_retries=NUM_RETRIES)
        logger.debug(f"Video list: {response}")
        items = response.get("items") or []
        return items[0] if items else {}

    def get_category_id(self, category_name: str, region_code: str | None = None) -> str | None:
        response = self.youtube.videoCategories().list(
            part="snippet",
            regionCode=region_code or self.category_region,
        ).execute(num_retries=NUM_RETRIES)
        for category in response.get("items") or []:
            if (category.get("snippet") or {}).get("title") == category_name:
                return category.get("id")
        logger.warning(f"⚠️  Category not found: {category_name}")
        return None

    # ══════════════════════════════════════════════════════════════
    # PLAYLISTS
    # ══════════════════════════════════════════════════════════════

    def get_playlists(self, names: list[str]) -> list[dict]:
        return playlist.get_playlists(self.youtube, names)

    def get_playlist_ids(self, names: list[str], upsert: bool = False) -> list[str]:
        return playlist.get_playlist_ids(self.youtube, names, upsert)

    def add_video_to_playlist(self, playlist_id: str, video_id: str) -> bool:
        return playlist.add_video_to_playlist(self.youtube, playlist_id, video_id)

    # ══════════════════════════════════════════════════════════════
    # BROADCAST
    # ══════════════════════════════════════════════════════════════

    def set_title_stream(self, broadcast: dict, title: str) -> None:
        if not broadcast.get("id"):
            logger.warning("No live broadcast found")
            return

        snippet = broadcast.get("snippet") or {}
        monitor = (broadcast.get("contentDetails") or {}).get("monitorStream") or {}
        body = {
            "id": broadcast["id"],
            "snippet": {
                "title": title,
                "scheduledStartTime": snippet.get("scheduledStartTime"),
            },
            "status": {"privacyStatus": (broadcast.get("status") or {}).get("privacyStatus")},
            "contentDetails": {
                "monitorStream": {
                    "enableMonitorStream": monitor.get("enableMonitorStream"),
                    "broadcastStreamDelayMs": monitor.get("broadcastStreamDelayMs"),
                }
            },
        }
        logger.debug(f"Update live broadcast title: {body}")
        self.youtube.liveBroadcasts().update(
            part="id,snippet,status,contentDetails", body=body
        ).execute()
        logger.info(f"🎬 Broadcast title set: {title}")

    def set_live_stream_info(self, broadcast: dict, title: str | None = None,
                             description: str | None = None) -> bool:
        """
        Update the title and/or description of the live broadcast.

        Returns:
            True if an update was sent
        """
        if not (title or description):
            logger.info("No data to change in title or description")
            return False
        if not broadcast.get("id"):
            logger.warning("No live broadcast found")
            return False

        snippet = {"scheduledStartTime": (broadcast.get("snippet") or {}).get("scheduledStartTime")}
        if title:
            snippet["title"] = title
        if description:
            snippet["description"] = description

        response = self.youtube.liveBroadcasts().update(
            part="id,snippet,status",
            body={
                "id": broadcast["id"],
                "snippet": snippet,
                "status": {"privacyStatus": (broadcast.get("status") or {}).get("privacyStatus")},
            },
        ).execute()
        logger.debug(f"Live broadcast updated: {response}")
        return True

    # ══════════════════════════════════════════════════════════════
    # VIDEO
    # ══════════════════════════════════════════════════════════════

    def update_video(self, video: dict, css: CurrentStreamSettings) -> bool:
        request = build_video_update(video, css)
        if request is None:
            return False
        logger.debug(f"Update video: {request}")
        self.youtube.videos().update(part=request["part"], body=request["body"]).execute()
        return True

    def set_current_stream(self, broadcast: dict, video: dict,
                           css: CurrentStreamSettings) -> CurrentStreamSettings:
        """
        Apply "set current stream" settings to the stream's video.

        Category names become ids, playlist names become ids (missing
        playlists are created), then title/description/tags are computed,
        the video is updated and added to each playlist.

        Returns:
            The final settings that were sent
        """
        logger.debug(f"Raw current stream parameters: {css.model_dump(exclude_none=True)}")

        update: dict = {}
        if css.category:
            update["category"] = self.get_category_id(css.category)
        if css.playlists is not None:
            update["playlists"] = self.get_playlist_ids(css.playlists, upsert=True)
        final = compute_stream_settings(css.model_copy(update=update))

        self.update_video(video, final)

        video_id = video.get("id")
        if final.playlists and video_id:
            for playlist_id in final.playlists:
                self.add_video_to_playlist(playlist_id, video_id)

        logger.info(f"🎬 Current stream updated: {final.title or (video.get('snippet') or {}).get('title')}")
        return final

    def update_description(self, video: dict, css: CurrentStreamSettings) -> bool:
        """
        Append the timestamps block to the video description.

        Returns:
            True if the description changed
        """
        current = css.description or (video.get("snippet") or {}).get("description") or ""
        description = append_timestamps(current, css.timestamps, css.timestamps_title)
        if description is None:
            logger.info("Timestamps already in the description, nothing to do")
            return False
        self.update_video(video, css.model_copy(update={"description": description}))
        logger.info("🕒 Timestamps added to the description")
        return True

    def set_thumbnail(self, video_id: str, image: bytes) -> None:
        media = MediaIoBaseUpload(io.BytesIO(image), mimetype=_image_mimetype(image))
        self.youtube.thumbnails().set(videoId=video_id, media_body=media).execute()
        logger.info(f"🖼️  Thumbnail set ({len(image)} bytes)")

    def upload_video(self, path: str | Path, title: str, description: str, tags: list[str],
                     category_id: str, privacy_status: str = "public") -> str | None:
        """
        Upload a local video file.

        Returns:
            The new video id, or None if YouTube did not return one

        Raises:
            googleapiclient.errors.HttpError: On API errors (quota, auth, ...)
        """
        mimetype = mimetypes.guess_type(str(path))[0] or "application/octet-stream"
        media = MediaFileUpload(str(path), mimetype=mimetype, chunksize=UPLOAD_CHUNK_SIZE, resumable=True)
        request = self.youtube.videos().insert(
            part="snippet,status",
            body={
                "snippet": {
                    "title": title,
                    "description": description,
                    "tags": tags,
                    "categoryId": category_id,
                },
                "status": {"privacyStatus": privacy_status},
            },
            media_body=media,
        )

        response = None
        while response is None:
            status, response = request.next_chunk(num_retries=NUM_RETRIES)
            if status:
                logger.debug(f"Upload progress: {int(status.progress() * 100)}%")

        return response.get("id")
