"""
config.py — YTManager Configuration Loader & Validator
=======================================================
Central configuration for YTManager. Reads settings from a .env file and
exposes them through the Config class.

WHY THIS EXISTS:
- Keeps file locations (OAuth client secrets, tokens, stream library) out of code
- One place to change settings without touching multiple files
- Validates everything upfront so you get clear errors before any API call

.env FILE LOCATION:
YTManager looks for .env in this order:
  1. ~/.ytmanager/.env  (recommended — works from anywhere)
  2. ./.env             (current directory — fallback for development)

NOTE:
The stream library and the stream settings computation never import Config.
The CLI and the REST server read it once and inject paths into them.
"""

from __future__ import annotations

import os
from pathlib import Path
from dotenv import load_dotenv  # Reads .env file and loads values into environment

# ──────────────────────────────────────────────────────────────────
# LOAD .env FILE
# ──────────────────────────────────────────────────────────────────
# The first file found wins. Once ~/.ytmanager/.env is set up,
# 'ytmanager' can be run from any folder.
# ──────────────────────────────────────────────────────────────────

YTMANAGER_DIR = Path.home() / ".ytmanager"

_home_env = YTMANAGER_DIR / ".env"
if _home_env.exists():
    load_dotenv(_home_env, override=True)
else:
    _project_env = Path(__file__).parent / ".env"
    if _project_env.exists():
        load_dotenv(_project_env, override=True)
    else:
        load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    Central configuration for YTManager.

    All settings are class-level variables, so you can access them anywhere like:
        Config.STREAM_LIB_FILE
        Config.CREDS_FILE
    """

    # ══════════════════════════════════════════════════════════════
    # GOOGLE / YOUTUBE SETTINGS
    # ══════════════════════════════════════════════════════════════

    # CREDS_FILE: OAuth client secrets downloaded from Google Cloud Console
    # (APIs & Services → Credentials → OAuth client ID → "Desktop app").
    # The file has an "installed" section holding client_id, client_secret
    # and redirect_uris.
    CREDS_FILE: str = os.getenv("CREDS_FILE", "creds.json")

    # TOKEN_FILE: Where the authorized user tokens are stored after the first
    # consent screen. Delete it to force a new authorization.
    TOKEN_FILE: str = os.getenv("TOKEN_FILE", "token.json")

    # force-ssl covers broadcasts, videos, playlists, thumbnails and uploads
    YOUTUBE_SCOPES: list[str] = ["https://www.googleapis.com/auth/youtube.force-ssl"]

    # CATEGORY_REGION: Region used to resolve category names ("Gaming") into ids
    CATEGORY_REGION: str = os.getenv("CATEGORY_REGION", "fr")

    # DEFAULT_CATEGORY_ID: Category used for verticals whose stream has none.
    # 20 = Gaming
    DEFAULT_CATEGORY_ID: str = os.getenv("DEFAULT_CATEGORY_ID", "20")

    # THUMBNAIL_SIZE_LIMIT: YouTube rejects thumbnails above 2 MB
    THUMBNAIL_SIZE_LIMIT: int = int(os.getenv("THUMBNAIL_SIZE_LIMIT", "2097152"))

    # ══════════════════════════════════════════════════════════════
    # STREAM LIBRARY
    # ══════════════════════════════════════════════════════════════

    # STREAM_LIB_FILE: JSON document holding observed streams and verticals
    STREAM_LIB_FILE: str = os.getenv("STREAM_LIB_FILE", "streamLib.json")

    # RECORD_HISTORY: Record every observed live stream in the library
    # (same as passing --history on the command line)
    RECORD_HISTORY: bool = _env_flag("RECORD_HISTORY")

    # ══════════════════════════════════════════════════════════════
    # REST API
    # ══════════════════════════════════════════════════════════════

    API_HOST: str = os.getenv("API_HOST", "localhost")
    API_PORT: int = int(os.getenv("API_PORT", "3001"))

    # ══════════════════════════════════════════════════════════════
    # LOGGING
    # ══════════════════════════════════════════════════════════════

    LOG_FILE_PATH: str = os.getenv(
        "LOG_FILE_PATH", str(YTMANAGER_DIR / "ytmanager.log")
    )

    # Log level for console output (DEBUG, INFO, WARNING, ERROR)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> list[str]:
        """
        Validate that everything needed to talk to YouTube is present.

        Returns:
            List of error messages. Empty list means everything is configured correctly.
        """
        errors = []

        if not cls.CREDS_FILE:
            errors.append("CREDS_FILE is not set")
        elif not Path(cls.CREDS_FILE).exists():
            errors.append(
                f"OAuth client secrets not found at {cls.CREDS_FILE}. "
                "Download them from Google Cloud Console → Credentials"
            )

        if not cls.TOKEN_FILE:
            errors.append("TOKEN_FILE is not set")

        if not cls.STREAM_LIB_FILE:
            errors.append("STREAM_LIB_FILE is not set")

        return errors

    @classmethod
    def print_config(cls):
        """
        Print current configuration.

        Run with: ytmanager --show-config
        """
        print("\n📋 Current Configuration:")
        _project_env = Path(__file__).parent / ".env"
        if _home_env.exists():
            print(f"   Config file:     {_home_env}")
        elif _project_env.exists():
            print(f"   Config file:     {_project_env}")
        else:
            print(f"   Config file:     ⚠️  No .env found! Expected at {_home_env}")
        print(f"   Client secrets:  {'✅' if Path(cls.CREDS_FILE).exists() else '❌'} {cls.CREDS_FILE}")
        print(f"   Token file:      {'✅' if Path(cls.TOKEN_FILE).exists() else '❌'} {cls.TOKEN_FILE}")
        print(f"   Stream library:  {cls.STREAM_LIB_FILE}")
        print(f"   Record history:  {'on' if cls.RECORD_HISTORY else 'off'}")
        print(f"   Category region: {cls.CATEGORY_REGION}")
        print(f"   REST API:        http://{cls.API_HOST}:{cls.API_PORT}")
        print()
