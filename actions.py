"""
actions.py — YTManager Actions (shared by the CLI and the REST API)
=====================================================================
Every operation YTManager offers is declared once here: its parameters,
its handler, and where it lives in the REST API. manager.py turns the list
into argparse sub-commands, server.py turns it into FastAPI routes.

A handler receives:
  params: {parameter name → value}, already typed (int, bool, list[str], str)
  ctx:    Context holding the YouTube service and the stream library
and returns something JSON-serializable.

HISTORY:
  With ctx.record_history on, every action that fetches the current live
  stream records it in the stream library (title/description history).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from errors import ActionError
from files import fetch_image, read_text, recompress_image, write_dock_redirect
from models import CurrentStreamSettings, Vertical, Visibility
from stream_library import StreamLibrary, stream_from_video, vertical_from_stream
from stream_settings import settings_from_params
from uploader import upload_pending_verticals

logger = logging.getLogger("ytmanager.actions")


class ParamType(Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    STRING_LIST = "stringList"
    CHOICE = "choice"


@dataclass
class ParameterDefinition:
    name: str
    type: ParamType
    description: str
    required: bool = False
    default: Any = None
    choices: list[str] | None = None
    env_var: str | None = None
    argument_name: str | None = None

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "type": self.type.value,
            "description": self.description,
            "required": self.required,
        }
        if self.default is not None:
            data["defaultValue"] = self.default
        if self.choices:
            data["alternatives"] = self.choices
        if self.env_var:
            data["environmentVariable"] = self.env_var
        return data


@dataclass
class Context:
    """What every handler works with."""
    service: Any
    library: StreamLibrary
    record_history: bool = False
    default_category_id: str = "20"
    thumbnail_size_limit: int = 2097152


@dataclass
class ActionDefinition:
    name: str
    summary: str
    description: str
    handler: Callable[[dict, Context], Any]
    parameters: list[ParameterDefinition] = field(default_factory=list)
    method: str | None = None
    path: str | None = None


# ══════════════════════════════════════════════════════════════
# HELPERS
# ══════════════════════════════════════════════════════════════

def _record_history(ctx: Context, broadcast: dict, video: dict) -> None:
    if ctx.record_history and video.get("id"):
        ctx.library.add_stream(stream_from_video(video, broadcast)).save()


def _current_stream(ctx: Context, required: bool = True) -> tuple[dict, dict]:
    """
    Current live broadcast and its video ({} when nothing is live).

    Raises:
        ActionError: If required and nothing is live
    """
    broadcast = ctx.service.get_live_broadcast()
    if not broadcast.get("id"):
        if required:
            raise ActionError("No live broadcast found")
        return broadcast, {}
    video = ctx.service.get_video(broadcast["id"])
    _record_history(ctx, broadcast, video)
    return broadcast, video


def _current_broadcast(ctx: Context) -> dict:
    if ctx.record_history:
        return _current_stream(ctx)[0]
    broadcast = ctx.service.get_live_broadcast()
    if not broadcast.get("id"):
        raise ActionError("No live broadcast found")
    return broadcast


def _vertical_dict(vertical: Vertical) -> dict:
    return vertical.model_dump(by_alias=True, exclude_none=True)


# ══════════════════════════════════════════════════════════════
# HANDLERS
# ══════════════════════════════════════════════════════════════

def info(params: dict, ctx: Context) -> dict:
    broadcast, video = _current_stream(ctx, required=False)
    return {"liveBroadcast": broadcast, "video": video or None}


def set_title(params: dict, ctx: Context) -> dict:
    broadcast = _current_broadcast(ctx)
    ctx.service.set_title_stream(broadcast, params["title"])
    return {"success": True}


def set_live_stream(params: dict, ctx: Context) -> dict:
    broadcast = _current_broadcast(ctx)
    changed = ctx.service.set_live_stream_info(broadcast, params.get("title"), params.get("description"))
    return {"success": True, "updated": bool(changed)}


def get_playlists(params: dict, ctx: Context) -> list[dict]:
    return ctx.service.get_playlists(list(params["playlist"]))


def get_playlist(params: dict, ctx: Context) -> str | None:
    playlists = ctx.service.get_playlists([params["playlist"]])
    return playlists[0]["id"] if playlists else None


def vertical_saved(params: dict, ctx: Context) -> dict | None:
    broadcast, video = _current_stream(ctx)
    last_vertical = ctx.library.find_last_vertical()
    if not last_vertical:
        logger.info("📭 No vertical found in the verticals folder")
        return None

    if video.get("id"):
        ctx.library.add_stream(stream_from_video(video, broadcast))
    stream = ctx.library.get_stream(video.get("id") or broadcast["id"])
    if stream is None:
        raise ActionError(f"Stream {broadcast['id']} not found in library")

    vertical = vertical_from_stream(stream, last_vertical)
    ctx.library.add_vertical_to_stream(stream.id, vertical).save()
    logger.info(f"🎞️  Vertical {last_vertical} linked to stream {stream.id}")
    return _vertical_dict(stream.verticals[last_vertical])


def vertical_info(params: dict, ctx: Context) -> dict:
    broadcast = _current_broadcast(ctx)
    stream = ctx.library.get_stream(broadcast["id"])
    if stream is None:
        raise ActionError("Stream not found in library")
    if not stream.verticals:
        raise ActionError("No vertical found for stream")

    # Clip names carry their capture time: the greatest name is the latest clip
    last = max(stream.verticals)
    ctx.library.add_vertical_to_stream(stream.id, Vertical(
        name=last,
        title=params.get("title") or "",
        description=params.get("description") or "",
    )).save()
    return _vertical_dict(stream.verticals[last])


def verticals_upload(params: dict, ctx: Context) -> dict:
    report = upload_pending_verticals(ctx.library, ctx.service, ctx.default_category_id)
    ctx.library.save()
    return report.to_dict()


def stream_settings(params: dict, ctx: Context) -> dict:
    library = ctx.library
    options = library.lib.verticals_options

    if params.get("vertical-path"):
        library.set_verticals_path(params["vertical-path"])
    if params.get("vertical-add-link-to-video"):
        options.add_link_to_video = str(params["vertical-add-link-to-video"]).lower() == "true"
    if params.get("vertical-link-offset") is not None:
        options.offset_link_to_video_in_seconds = int(params["vertical-link-offset"])
    if params.get("vertical-visibility"):
        options.visibility = Visibility(params["vertical-visibility"]).value
    if params.get("thumb-path"):
        library.set_thumb_path(params["thumb-path"])
    if params.get("timestamps-path"):
        library.set_timestamps_path(params["timestamps-path"])
    if params.get("page-dock"):
        library.set_page_dock(params["page-dock"])
    if params.get("watch-url"):
        library.set_watch_url(params["watch-url"])

    library.save()
    return options.model_dump(by_alias=True)


def set_current_stream(params: dict, ctx: Context) -> dict:
    broadcast, video = _current_stream(ctx)
    final = ctx.service.set_current_stream(broadcast, video, settings_from_params(params))
    return {
        "success": True,
        "title": final.title,
        "description": final.description,
        "tags": final.tags,
    }


def set_timestamps(params: dict, ctx: Context) -> dict:
    path = params.get("timestamps-path") or ctx.library.lib.timestamps_path
    if not path:
        raise ActionError("No timestamps file configured (stream-settings --timestamps-path)")

    broadcast, video = _current_stream(ctx)
    if video.get("id"):
        ctx.library.add_stream(stream_from_video(video, broadcast))

    text = read_text(path)
    ctx.library.add_timestamps_to_stream(broadcast["id"], text).save()
    stream = ctx.library.get_stream(broadcast["id"])

    css = CurrentStreamSettings(
        timestamps=stream.timestamps if stream else text,
        timestamps_title=params.get("timestamp-title"),
    )
    updated = ctx.service.update_description(video, css)
    return {"success": True, "updated": bool(updated)}


def set_current_thumbnail(params: dict, ctx: Context) -> dict:
    file = params.get("path-file")
    folder = params.get("path-dir") or (None if file else ctx.library.lib.thumb_path or None)
    if not (file or folder):
        return {"success": False, "message": "No file or dir specified"}

    broadcast, video = _current_stream(ctx)
    image = fetch_image(file or folder, is_dir=not file)

    limit = ctx.thumbnail_size_limit
    if len(image) > limit:
        logger.warning(f"⚠️  Thumbnail size {len(image)} is bigger than the YouTube limit ({limit})")
        if params.get("auto-recompress-on-limit"):
            image = recompress_image(image)
            logger.info(f"🗜️  Recompressed thumbnail to {len(image)} bytes")
        else:
            logger.info("Auto recompression disabled")

    ctx.service.set_thumbnail(video.get("id") or broadcast["id"], image)
    return {"success": True, "size": len(image)}


def update_dock_redirect(params: dict, ctx: Context) -> dict:
    file = params.get("path-file") or ctx.library.lib.page_dock
    if not file:
        return {"success": False, "message": "No path file specified"}

    waiting = bool(params.get("waiting-redirect"))
    refresh_time = params.get("refresh-time") or 15
    video_id = ""
    if not waiting:
        video_id = _current_broadcast(ctx)["id"]

    write_dock_redirect(file, video_id, refresh_time, waiting)
    return {"success": True}


def serve(params: dict, ctx: Context) -> dict:
    # Lazy import: server imports this module
    from server import run_server

    run_server(ctx, params.get("host") or "localhost", params.get("port") or 3001)
    return {"success": True, "message": "Server stopped"}


# ══════════════════════════════════════════════════════════════
# REGISTRY
# ══════════════════════════════════════════════════════════════

P = ParameterDefinition
T = ParamType

ACTIONS: list[ActionDefinition] = [
    ActionDefinition(
        name="info",
        summary="Get current stream info",
        description="Will return broadcast and video info",
        handler=info,
        method="GET", path="/stream/info",
    ),
    ActionDefinition(
        name="set-title",
        summary="Set stream title",
        description="Set your stream title",
        handler=set_title,
        parameters=[P("title", T.STRING, "Title to set", required=True, argument_name="TITLE")],
        method="PUT", path="/stream/title",
    ),
    ActionDefinition(
        name="set-live-stream",
        summary="Set live stream info",
        description="Set your live stream title and/or description",
        handler=set_live_stream,
        parameters=[
            P("title", T.STRING, "Title to set", argument_name="TITLE"),
            P("description", T.STRING, "Description to set", argument_name="DESCRIPTION"),
        ],
        method="PUT", path="/stream/live",
    ),
    ActionDefinition(
        name="get-playlists",
        summary="Get playlists",
        description="Get playlists by name",
        handler=get_playlists,
        parameters=[P("playlist", T.STRING_LIST, "Playlist name", required=True, argument_name="PLAYLIST")],
        method="GET", path="/playlists",
    ),
    ActionDefinition(
        name="get-playlist",
        summary="Get playlist id",
        description="Get playlist id by name",
        handler=get_playlist,
        parameters=[P("playlist", T.STRING, "Playlist name", required=True, argument_name="PLAYLIST")],
        method="GET", path="/playlist",
    ),
    ActionDefinition(
        name="vertical-saved",
        summary="Lookup and link saved vertical to current stream",
        description="Look for the last vertical saved in the verticals folder and link it to current stream",
        handler=vertical_saved,
        method="GET", path="/verticals/saved",
    ),
    ActionDefinition(
        name="vertical-info",
        summary="Update last vertical linked to current stream",
        description=(
            "Update title/description of the last vertical linked to current stream: "
            "the clip with the greatest file name, i.e. the latest capture time"
        ),
        handler=vertical_info,
        parameters=[
            P("title", T.STRING, "Title to set", argument_name="TITLE"),
            P("description", T.STRING, "Description to set", argument_name="DESCRIPTION"),
        ],
        method="PUT", path="/verticals/info",
    ),
    ActionDefinition(
        name="verticals-upload",
        summary="Upload your verticals to YouTube",
        description="Upload every vertical of the library not uploaded yet",
        handler=verticals_upload,
        method="POST", path="/verticals/upload",
    ),
    ActionDefinition(
        name="stream-settings",
        summary="Change stream settings",
        description="Change verticals options and library paths",
        handler=stream_settings,
        parameters=[
            P("vertical-path", T.STRING, "Change the lookup path for verticals", argument_name="VERTICAL_PATH"),
            P("vertical-visibility", T.CHOICE, "Set the visibility of the verticals",
              choices=[v.value for v in Visibility], env_var="VERTICAL_VISIBILITY"),
            P("vertical-add-link-to-video", T.CHOICE, "Add a link to the stream in vertical descriptions",
              choices=["true", "false"], env_var="ADD_LINK_TO_VIDEO"),
            P("vertical-link-offset", T.INTEGER, "Offset in seconds of the link to the stream",
              env_var="VERTICAL_LINK_OFFSET", argument_name="VERTICAL_LINK_OFFSET"),
            P("thumb-path", T.STRING, "Default thumbnail folder", argument_name="THUMB_PATH"),
            P("timestamps-path", T.STRING, "Timestamps file", argument_name="TIMESTAMPS_PATH"),
            P("page-dock", T.STRING, "Dock redirect page file", argument_name="PAGE_DOCK"),
            P("watch-url", T.STRING, "Base watch URL used in links", argument_name="WATCH_URL"),
        ],
        method="PUT", path="/settings",
    ),
    ActionDefinition(
        name="set-current-stream",
        summary="Set current stream",
        description="Set title, description, tags, category, languages and playlists of the current stream",
        handler=set_current_stream,
        parameters=[
            P("playlist", T.STRING_LIST, "Playlist name", env_var="PLAYLIST", argument_name="PLAYLIST"),
            P("language", T.STRING, "Language name", env_var="LG", argument_name="LANG"),
            P("language-sub", T.STRING, "Language subtitle name", env_var="LGSUB", argument_name="LANGSUB"),
            P("tag", T.STRING_LIST, "Tag", env_var="TAG", argument_name="TAG"),
            P("category", T.STRING, "Category name", env_var="CATEGORY", argument_name="CATEGORY"),
            P("subject", T.STRING, "Subject to use at different place", env_var="SUBJECT", argument_name="SUBJECT"),
            P("subject-before-title", T.BOOLEAN, "Add subject before title", env_var="SUBJECT_BEFORE_TITLE"),
            P("subject-after-title", T.BOOLEAN, "Add subject after title", env_var="SUBJECT_AFTER_TITLE"),
            P("subject-separator", T.STRING, "Subject separator", env_var="SUBJECT_SEPARATOR", argument_name="SEPARATOR"),
            P("subject-add-to-tags", T.BOOLEAN, "Add subject to tags", env_var="SUBJECT_ADD_TAGS"),
            P("tags-add-description", T.BOOLEAN, "Add tags to description", env_var="TAGS_ADD_DESCRIPTION"),
            P("tags-description-with-hashtag", T.BOOLEAN, "Add # to tags in description",
              env_var="TAGS_DESCRIPTION_WITH_HASHTAG"),
            P("tags-description-new-line", T.BOOLEAN, "Tags in description on new line",
              env_var="TAGS_DESCRIPTION_NEW_LINE"),
            P("tags-description-white-space", T.STRING, "Tags space replacement in description",
              env_var="TAGS_DESCRIPTION_WHITE_SPACE", argument_name="WHITE_SPACE"),
            P("title", T.STRING, "Title to set", env_var="TITLE", argument_name="TITLE"),
            P("description", T.STRING, "Description to set", env_var="DESCRIPTION", argument_name="DESCRIPTION"),
        ],
        method="PUT", path="/stream/current",
    ),
    ActionDefinition(
        name="set-timestamps",
        summary="Set timestamps",
        description="Read the timestamps file, save it on the stream and add it to the video description",
        handler=set_timestamps,
        parameters=[
            P("timestamp-title", T.STRING, "Title of the timestamps block in description",
              env_var="TIMESTAMP_TITLE", argument_name="TIMESTAMP_TITLE"),
            P("timestamps-path", T.STRING, "Timestamps file (defaults to the library setting)",
              argument_name="TIMESTAMPS_PATH"),
        ],
        method="PUT", path="/stream/timestamps",
    ),
    ActionDefinition(
        name="set-current-thumbnail",
        summary="Set current thumbnail",
        description="Set thumbnail of current stream from a file or the newest image of a folder",
        handler=set_current_thumbnail,
        parameters=[
            P("path-file", T.STRING, "File path of the thumbnail", env_var="PATH_FILE", argument_name="PATH_FILE"),
            P("path-dir", T.STRING, "Dir path of the thumbnail", env_var="PATH_DIR", argument_name="PATH_DIR"),
            P("auto-recompress-on-limit", T.BOOLEAN, "Auto recompress image over the size limit",
              env_var="AUTO_RECOMPRESS_ON_LIMIT"),
        ],
        method="PUT", path="/stream/thumbnail",
    ),
    ActionDefinition(
        name="update-dock-redirect",
        summary="Update html redirect page dock to youtube chat",
        description="Write an html page redirecting to the live chat of current stream",
        handler=update_dock_redirect,
        parameters=[
            P("path-file", T.STRING, "File path of the page dock", env_var="PATH_FILE", argument_name="PATH_FILE"),
            P("waiting-redirect", T.BOOLEAN, "Generate a html page redirecting to itself",
              env_var="WAITING_REDIRECT"),
            P("refresh-time", T.INTEGER, "Refresh page after X seconds", default=15,
              env_var="REFRESH_TIME", argument_name="REFRESH_TIME"),
        ],
        method="PUT", path="/dock-redirect",
    ),
    ActionDefinition(
        name="serve",
        summary="Start REST API server",
        description="Start a local REST API server exposing these actions over HTTP",
        handler=serve,
        parameters=[
            P("port", T.INTEGER, "Port to run the API server on (default: API_PORT)", argument_name="PORT"),
            P("host", T.STRING, "Host to bind the API server to (default: API_HOST)", argument_name="HOST"),
        ],
    ),
]


def get_action(name: str) -> ActionDefinition:
    for action in ACTIONS:
        if action.name == name:
            return action
    raise KeyError(name)
