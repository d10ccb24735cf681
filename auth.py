"""
auth.py — YTManager Google OAuth2
===================================
Gets authorized credentials for the YouTube Data API.

FIRST RUN:
  No token file yet → a local HTTP server is started on the port of the
  first redirect URI of creds.json, and the consent URL is printed/opened.
  Once you accept, tokens are saved to the token file.

NEXT RUNS:
  Tokens are read back and refreshed when expired. No browser needed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from urllib.parse import urlparse

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

logger = logging.getLogger("ytmanager.auth")


def load_client_config(creds_file: str | Path) -> dict:
    """
    Read the "installed" section of an OAuth client secrets file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError:        If the file has no "installed" client
    """
    data = json.loads(Path(creds_file).read_text(encoding="utf-8"))
    installed = data.get("installed")
    if not installed:
        raise ValueError(
            f"{creds_file} is not a desktop OAuth client "
            "(expected an \"installed\" section)"
        )
    return installed


def extract_path_callback(redirect_uri: str) -> str:
    """Path part of a redirect URI ("/" when there is none)."""
    return urlparse(redirect_uri).path or "/"


def extract_port(redirect_uri: str) -> int:
    """Explicit port of a redirect URI, 80 when none is given."""
    port = urlparse(redirect_uri).port
    return port if port is not None else 80


def _save_token(credentials: Credentials, token_file: str | Path) -> None:
    path = Path(token_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(credentials.to_json(), encoding="utf-8")
    logger.debug(f"OAuth tokens saved to {path}")


def authorize(creds_file: str | Path, token_file: str | Path, scopes: list[str]) -> Credentials:
    """
    Run the browser consent flow and store the resulting tokens.

    The local callback server listens on the port of the first redirect URI.
    """
    client = load_client_config(creds_file)
    redirect_uris = client.get("redirect_uris") or ["http://localhost"]
    port = extract_port(redirect_uris[0])
    callback = extract_path_callback(redirect_uris[0])

    flow = InstalledAppFlow.from_client_secrets_file(str(creds_file), scopes)
    logger.info(f"🔐 Authorize YTManager in your browser (callback on http://localhost:{port}{callback})")
    credentials = flow.run_local_server(
        host="localhost",
        port=port,
        access_type="offline",
        authorization_prompt_message="Please open this url to authorize the application: {url}",
        success_message="Authorized successfully! You can close this window.",
    )
    _save_token(credentials, token_file)
    logger.info("✅ Authorization saved")
    return credentials


def get_credentials(creds_file: str | Path, token_file: str | Path, scopes: list[str]) -> Credentials:
    """
    Return valid credentials, refreshing or re-authorizing as needed.

    Args:
        creds_file: OAuth client secrets (creds.json)
        token_file: Stored authorized-user tokens
        scopes:     OAuth scopes to request
    """
    credentials = None
    if Path(token_file).exists():
        try:
            credentials = Credentials.from_authorized_user_file(str(token_file), scopes)
        except ValueError as e:
            logger.warning(f"⚠️  Stored tokens unreadable ({e}), authorizing again")

    if credentials and credentials.valid:
        return credentials

    if credentials and credentials.expired and credentials.refresh_token:
        logger.debug("Refreshing expired access token")
        credentials.refresh(Request())
        _save_token(credentials, token_file)
        return credentials

    return authorize(creds_file, token_file, scopes)
