"""
playlist.py — YTManager YouTube Playlist Handling
===================================================
Finds the channel's playlists by name, creates the missing ones, and adds a
video to a playlist only when it is not already there.

All functions take the googleapiclient YouTube resource built in
youtube_service.py.

USAGE:
    from playlist import get_playlist_ids, add_video_to_playlist

    for playlist_id in get_playlist_ids(youtube, ["Minecraft", "Lives"], upsert=True):
        add_video_to_playlist(youtube, playlist_id, video_id)
"""

from __future__ import annotations

import logging

logger = logging.getLogger("ytmanager.playlist")


def match_playlists(items: list[dict], names: list[str]) -> list[dict]:
    """
    Keep the playlist resources whose title is one of the given names.

    Args:
        items: Playlist resources as returned by playlists.list
        names: Exact playlist titles

    Returns:
        List of dicts, each with {id, name}, in the order of items
    """
    wanted = set(names)
    return [
        {"id": item.get("id") or "", "name": (item.get("snippet") or {}).get("title") or ""}
        for item in items
        if (item.get("snippet") or {}).get("title") in wanted
    ]


def _list_my_playlists(youtube) -> list[dict]:
    items: list[dict] = []
    request = youtube.playlists().list(part="id,snippet", mine=True, maxResults=50)
    while request is not None:
        response = request.execute()
        items.extend(response.get("items", []))
        request = youtube.playlists().list_next(request, response)
    logger.debug(f"Found {len(items)} playlists on the channel")
    return items


def get_playlists(youtube, names: list[str]) -> list[dict]:
    """Playlists of the authenticated channel whose title is in names."""
    return match_playlists(_list_my_playlists(youtube), names)


def upsert_playlist(youtube, name: str) -> dict:
    """Return the playlist called name, creating it (private by default) if needed."""
    existing = get_playlists(youtube, [name])
    if existing:
        return existing[0]

    response = youtube.playlists().insert(
        part="snippet",
        body={"snippet": {"title": name}},
    ).execute()
    logger.info(f"🎵 Playlist created: {name}")
    return {"id": response.get("id") or "", "name": name}


def get_playlist_ids(youtube, names: list[str], upsert: bool = False) -> list[str]:
    """
    Resolve playlist names into ids.

    Args:
        youtube: googleapiclient YouTube resource
        names:   Playlist titles
        upsert:  Create the playlists that do not exist yet

    Returns:
        Playlist ids, missing names are skipped unless upsert is set
    """
    playlists = get_playlists(youtube, names)
    if upsert:
        known = {playlist["name"] for playlist in playlists}
        for name in names:
            if name not in known:
                playlists.append(upsert_playlist(youtube, name))
                known.add(name)
    return [playlist["id"] for playlist in playlists]


def is_video_in_playlist(youtube, playlist_id: str, video_id: str) -> bool:
    response = youtube.playlistItems().list(
        part="id",
        playlistId=playlist_id,
        videoId=video_id,
    ).execute()
    return bool(response.get("items"))


def add_video_to_playlist(youtube, playlist_id: str, video_id: str) -> bool:
    """
    Add a video to a playlist unless it is already in it.

    Returns:
        True if the video was inserted
    """
    if is_video_in_playlist(youtube, playlist_id, video_id):
        logger.debug(f"Video {video_id} already in playlist {playlist_id}")
        return False

    youtube.playlistItems().insert(
        part="snippet",
        body={
            "snippet": {
                "playlistId": playlist_id,
                "resourceId": {"kind": "youtube#video", "videoId": video_id},
            }
        },
    ).execute()
    logger.info(f"🎵 Video {video_id} added to playlist {playlist_id}")
    return True
