"""
stream_settings.py — YTManager "Set Current Stream" Computation
=================================================================
Derives the final title, description and tags of the current stream from
the raw parameters given on the command line or through the REST API.

THE RULES (order matters):
  1. Snapshot   title/description are copied to title_original/description_original
  2. Subject    when a subject is given:
                  - "subject<sep>title"  if subject_before_title
                  - "title<sep>subject"  if subject_after_title (after rule above)
                  - subject lower-cased appended to tags if subject_add_to_tags
  3. Tags       when tags_add_description and tags is a list (even empty):
                  description += "\\n" (+ "\\n" if tags_description_new_line)
                  then " #tag" for each tag, spaces replaced

Rule 2 runs before rule 3 so that a subject added to the tags also lands in
the description. Each stage returns a new CurrentStreamSettings; the input
is never modified.

USAGE:
    from stream_settings import compute_stream_settings, settings_from_params

    css = settings_from_params({"title": "My Stream", "subject": "Gaming",
                                "subject-before-title": True})
    final = compute_stream_settings(css)
    final.title  # "Gaming - My Stream"
"""

from __future__ import annotations

import re
from typing import Any

from models import CurrentStreamSettings


DEFAULT_SUBJECT_SEPARATOR = " - "
DEFAULT_TIMESTAMPS_TITLE = "Timestamps :\n"


# ══════════════════════════════════════════════════════════════
# RULE STAGES
# ══════════════════════════════════════════════════════════════

def snapshot_original(css: CurrentStreamSettings) -> CurrentStreamSettings:
    """Copy title and description into the *_original fields, None included."""
    return css.model_copy(update={
        "title_original": css.title,
        "description_original": css.description,
    }, deep=True)


def apply_subject(css: CurrentStreamSettings) -> CurrentStreamSettings:
    """Merge the subject into the title and the tags."""
    if not css.subject:
        return css.model_copy(deep=True)

    separator = css.subject_separator or DEFAULT_SUBJECT_SEPARATOR
    title = css.title or ""
    tags = list(css.tags) if css.tags is not None else None

    if css.subject_before_title:
        title = f"{css.subject}{separator}{title}"

    # Not exclusive with the rule above: both may apply
    if css.subject_after_title:
        title = f"{title}{separator}{css.subject}"

    if css.subject_add_to_tags:
        if tags is None:
            tags = []
        tags.append(css.subject.lower())

    update: dict[str, Any] = {"tags": tags}
    if css.subject_before_title or css.subject_after_title:
        update["title"] = title
    return css.model_copy(update=update, deep=True)


def append_tags_to_description(css: CurrentStreamSettings) -> CurrentStreamSettings:
    """
    Append the tags to the description.

    An empty tag list still adds the leading newline: only a missing list
    (None) skips the rule.
    """
    if not css.tags_add_description or css.tags is None:
        return css.model_copy(deep=True)

    description = (css.description or "") + "\n"
    if css.tags_description_new_line:
        description += "\n"

    hash_prefix = "#" if css.tags_description_with_hash_tag else ""
    white_space = css.tags_description_white_space or ""
    for tag in css.tags:
        description += f" {hash_prefix}{tag.replace(' ', white_space)}"

    return css.model_copy(update={"description": description}, deep=True)


def compute_stream_settings(css: CurrentStreamSettings) -> CurrentStreamSettings:
    """
    Apply every rule, in order, and return the final settings.

    Never fails: absent optional fields simply skip their rule.
    """
    css = snapshot_original(css)
    css = apply_subject(css)
    css = append_tags_to_description(css)
    return css


# ══════════════════════════════════════════════════════════════
# TIMESTAMPS BLOCK
# ══════════════════════════════════════════════════════════════

def append_timestamps(
    description: str,
    timestamps: str | None,
    timestamps_title: str | None = None,
) -> str | None:
    """
    Append a chapter timestamps block to a video description.

    The block is added after a blank line, only once: if the block title is
    already in the description (case-insensitive) nothing changes. The title
    line is written only when the first timestamps line holds a digit.

    Args:
        description:      Current description of the video
        timestamps:       Timestamps text ("00:00 Intro\\n12:30 Boss fight")
        timestamps_title: Heading of the block, defaults to "Timestamps :\\n"

    Returns:
        The new description, or None when there is nothing to change
    """
    if not timestamps:
        return None

    title = timestamps_title or DEFAULT_TIMESTAMPS_TITLE
    if re.search(re.escape(title), description, re.IGNORECASE):
        return None

    first_line = timestamps.split("\n")[0]
    description += "\n\n"
    if re.search(r"[0-9]+", first_line):
        description += title
    return description + timestamps


# ══════════════════════════════════════════════════════════════
# TRANSPORT MAPPING
# ══════════════════════════════════════════════════════════════
# CLI arguments and REST bodies both arrive as {parameter name → value}
# using the kebab-case names of the "set-current-stream" action.

_STRING_PARAMS = {
    "title": "title",
    "description": "description",
    "language": "language",
    "language-sub": "language_sub",
    "category": "category",
    "subject": "subject",
    "subject-separator": "subject_separator",
    "tags-description-white-space": "tags_description_white_space",
    "timestamp-title": "timestamps_title",
}

_LIST_PARAMS = {
    "playlist": "playlists",
    "tag": "tags",
}

_FLAG_PARAMS = {
    "subject-before-title": "subject_before_title",
    "subject-after-title": "subject_after_title",
    "subject-add-to-tags": "subject_add_to_tags",
    "tags-add-description": "tags_add_description",
    "tags-description-with-hashtag": "tags_description_with_hash_tag",
    "tags-description-new-line": "tags_description_new_line",
}


def settings_from_params(params: dict[str, Any]) -> CurrentStreamSettings:
    """Map raw action parameters onto a CurrentStreamSettings."""
    values: dict[str, Any] = {}

    for name, field in _STRING_PARAMS.items():
        if params.get(name) is not None:
            values[field] = str(params[name])

    for name, field in _LIST_PARAMS.items():
        value = params.get(name)
        if value is None:
            continue
        values[field] = [value] if isinstance(value, str) else [str(v) for v in value]

    for name, field in _FLAG_PARAMS.items():
        values[field] = bool(params.get(name))

    return CurrentStreamSettings(**values)
