#!/usr/bin/env python3
"""
manager.py — YTManager: Main Entry Point
==========================================
This is the file you run from the command line. Every action of actions.py
is a sub-command; the result is printed as JSON.

USAGE EXAMPLES:
  # What is live right now?
  ytmanager info

  # Title, subject, tags and playlists of the current stream
  ytmanager set-current-stream --title "Chill run" --subject Minecraft \\
      --subject-before-title --tag speedrun --tag "hard mode" \\
      --tags-add-description --tags-description-with-hashtag --playlist Lives

  # Record the stream in the library, then link the clip just saved by OBS
  ytmanager --history vertical-saved

  # Upload every vertical not uploaded yet
  ytmanager verticals-upload

  # REST API for stream decks / OBS docks
  ytmanager serve --port 3001

  # Check your configuration
  ytmanager --show-config

ENVIRONMENT FALLBACK:
  Most parameters can also come from an environment variable (shown in
  --help), e.g. SUBJECT=Minecraft ytmanager set-current-stream
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time

from logging_config import setup_logging, set_console_level
from config import Config
from actions import ACTIONS, ActionDefinition, Context, ParamType, get_action
from errors import ActionError, InvalidFormatError

# NOTE: The Google client libraries are imported LAZILY in build_context().
# "ytmanager --help" and "--show-config" do not need them.

logger = logging.getLogger("ytmanager.manager")

_TRUE_VALUES = ("1", "true", "yes", "on")


def _dest(param_name: str) -> str:
    return param_name.replace("-", "_")


def _env_value(param_type: ParamType, raw: str):
    """Convert an environment variable into the parameter's type."""
    if param_type == ParamType.BOOLEAN:
        return raw.strip().lower() in _TRUE_VALUES
    if param_type == ParamType.INTEGER:
        return int(raw)
    if param_type == ParamType.STRING_LIST:
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


def _add_action_parser(subparsers, action: ActionDefinition) -> None:
    sub = subparsers.add_parser(action.name, help=action.summary, description=action.description)

    for param in action.parameters:
        flag = f"--{param.name}"
        help_text = param.description
        if param.env_var:
            help_text += f" (env: {param.env_var})"
        # Required parameters backed by an env var are checked after the fallback
        required = param.required and not param.env_var

        if param.type == ParamType.BOOLEAN:
            sub.add_argument(flag, dest=_dest(param.name), action="store_true", default=None, help=help_text)
        elif param.type == ParamType.STRING_LIST:
            sub.add_argument(flag, dest=_dest(param.name), action="append", metavar=param.argument_name,
                             required=required, help=help_text + " (repeatable)")
        elif param.type == ParamType.INTEGER:
            sub.add_argument(flag, dest=_dest(param.name), type=int, metavar=param.argument_name,
                             required=required, help=help_text)
        elif param.type == ParamType.CHOICE:
            sub.add_argument(flag, dest=_dest(param.name), choices=param.choices,
                             required=required, help=help_text)
        else:
            sub.add_argument(flag, dest=_dest(param.name), metavar=param.argument_name,
                             required=required, help=help_text)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ytmanager",
        description="🎬 YTManager — Manage your YouTube live streams and their vertical clips",
    )

    parser.add_argument(
        "--history", "-H",
        action="store_true",
        help="Record the current live stream in the stream library",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show debug logs on the console",
    )

    parser.add_argument(
        "--pretty", "-p",
        type=int,
        default=None,
        metavar="N",
        help="Pretty print the JSON result with an indent of N spaces",
    )

    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration and exit",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="ACTION")
    for action in ACTIONS:
        _add_action_parser(subparsers, action)

    return parser


def collect_params(action: ActionDefinition, args: argparse.Namespace, environ=None) -> dict:
    """
    Build the parameter dict of an action from parsed arguments.

    Missing values fall back to the parameter's environment variable, then
    to its default.

    Raises:
        ActionError: If a required parameter is still missing
    """
    environ = os.environ if environ is None else environ
    params = {}

    for param in action.parameters:
        value = getattr(args, _dest(param.name), None)
        if value is None and param.env_var and environ.get(param.env_var):
            value = _env_value(param.type, environ[param.env_var])
        if value is None:
            value = param.default
        if value is None:
            if param.required:
                raise ActionError(f"Missing required parameter: --{param.name}")
            continue
        params[param.name] = value

    return params


def build_context(record_history: bool):
    """Authorize against YouTube and load the stream library."""
    # ── Lazy imports: only load the Google stack when an action runs ──
    from auth import get_credentials
    from stream_library import StreamLibrary
    from youtube_service import YouTubeService

    library = StreamLibrary.load(Config.STREAM_LIB_FILE)
    credentials = get_credentials(Config.CREDS_FILE, Config.TOKEN_FILE, Config.YOUTUBE_SCOPES)
    service = YouTubeService.from_credentials(credentials, Config.CATEGORY_REGION)

    return Context(
        service=service,
        library=library,
        record_history=record_history,
        default_category_id=Config.DEFAULT_CATEGORY_ID,
        thumbnail_size_limit=Config.THUMBNAIL_SIZE_LIMIT,
    )


def print_result(result, indent: int | None = None) -> None:
    if result is None:
        result = {"success": True}
    print(json.dumps(result, indent=indent, ensure_ascii=False, default=str))


def main() -> None:
    """
    Main function — the entry point of YTManager.

    Handles:
    - Configuration display
    - Every action of the registry (one sub-command each)
    - The REST server (serve)
    """
    parser = build_parser()
    args = parser.parse_args()

    # ══════════════════════════════════════════════
    # STARTUP
    # ══════════════════════════════════════════════

    setup_logging(level=Config.LOG_LEVEL, log_file=Config.LOG_FILE_PATH)
    if args.verbose:
        set_console_level("DEBUG")

    if args.show_config:
        Config.print_config()
        return

    if not args.command:
        parser.print_help()
        print("\n❌ Please provide an action.")
        print("   Example: ytmanager info")
        sys.exit(1)

    action = get_action(args.command)

    try:
        params = collect_params(action, args)
    except (ActionError, ValueError) as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    if action.name == "serve":
        params.setdefault("host", Config.API_HOST)
        params.setdefault("port", Config.API_PORT)

    # ══════════════════════════════════════════════
    # CONFIGURATION VALIDATION
    # ══════════════════════════════════════════════

    errors = Config.validate()
    if errors:
        logger.error("❌ Configuration errors:")
        for error in errors:
            logger.error(f"   • {error}")
        logger.error("\n📝 Copy .env.example to ~/.ytmanager/.env and fill in your values.")
        sys.exit(1)

    start_time = time.time()

    try:
        ctx = build_context(args.history or Config.RECORD_HISTORY)
        result = action.handler(params, ctx)
        print_result(result, args.pretty)
        logger.debug(f"⏱️  {action.name} took {time.time() - start_time:.1f} seconds")

    except KeyboardInterrupt:
        print("\n\n⚠️  Cancelled by user.")
        sys.exit(0)

    except (ActionError, InvalidFormatError) as e:
        logger.error(f"❌ {e}")
        sys.exit(1)

    except Exception as e:
        logger.error(f"\n❌ Error: {e}")
        logger.error("\n💡 Tips:")
        logger.error("   • Delete the token file to authorize YTManager again")
        logger.error("   • Check that the YouTube Data API v3 is enabled for your OAuth client")
        logger.error("   • Check your daily API quota in Google Cloud Console")
        logger.debug(f"Full error: {type(e).__name__}: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
