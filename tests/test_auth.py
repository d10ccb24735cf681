"""
test_auth.py — Unit tests for auth.py (redirect URI helpers and token handling)
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

import auth
from auth import extract_path_callback, extract_port, get_credentials, load_client_config


class TestExtractPathCallback:
    """Test the callback path taken from a redirect URI."""

    @pytest.mark.parametrize("uri, expected", [
        ("http://localhost:3000/callback", "/callback"),
        ("http://localhost:8080/oauth/callback", "/oauth/callback"),
        ("http://localhost:3000", "/"),
        ("https://example.com:443/auth/google/callback", "/auth/google/callback"),
        ("https://example.com/callback", "/callback"),
        ("http://localhost:3000/callback/", "/callback/"),
    ])
    def test_path(self, uri, expected):
        assert extract_path_callback(uri) == expected


class TestExtractPort:
    """Test the callback port taken from a redirect URI."""

    @pytest.mark.parametrize("uri, expected", [
        ("http://localhost:3000/callback", 3000),
        ("http://localhost:8080/oauth", 8080),
        ("http://localhost/callback", 80),
        ("https://example.com/callback", 80),
        ("http://example.com:443/callback", 443),
        ("http://localhost:65535/callback", 65535),
        ("http://localhost:80/callback", 80),
    ])
    def test_port(self, uri, expected):
        assert extract_port(uri) == expected


class TestLoadClientConfig:

    def test_reads_installed_section(self, tmp_path):
        creds = tmp_path / "creds.json"
        creds.write_text(json.dumps({"installed": {
            "client_id": "id", "client_secret": "secret",
            "redirect_uris": ["http://localhost:3000/callback"],
        }}), encoding="utf-8")
        assert load_client_config(creds)["client_id"] == "id"

    def test_web_client_is_rejected(self, tmp_path):
        creds = tmp_path / "creds.json"
        creds.write_text(json.dumps({"web": {"client_id": "id"}}), encoding="utf-8")
        with pytest.raises(ValueError, match="installed"):
            load_client_config(creds)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_client_config(tmp_path / "missing.json")


class TestGetCredentials:

    def test_valid_stored_token(self, tmp_path, monkeypatch):
        token = tmp_path / "token.json"
        token.write_text("{}", encoding="utf-8")
        stored = MagicMock(valid=True)
        monkeypatch.setattr(auth.Credentials, "from_authorized_user_file", MagicMock(return_value=stored))
        authorize = MagicMock()
        monkeypatch.setattr(auth, "authorize", authorize)

        assert get_credentials(tmp_path / "creds.json", token, ["scope"]) is stored
        authorize.assert_not_called()

    def test_expired_token_is_refreshed_and_saved(self, tmp_path, monkeypatch):
        token = tmp_path / "token.json"
        token.write_text("{}", encoding="utf-8")
        stored = MagicMock(valid=False, expired=True, refresh_token="r")
        stored.to_json.return_value = '{"token": "fresh"}'
        monkeypatch.setattr(auth.Credentials, "from_authorized_user_file", MagicMock(return_value=stored))

        assert get_credentials(tmp_path / "creds.json", token, ["scope"]) is stored
        stored.refresh.assert_called_once()
        assert token.read_text(encoding="utf-8") == '{"token": "fresh"}'

    def test_no_token_runs_consent_flow(self, tmp_path, monkeypatch):
        authorize = MagicMock(return_value="fresh-credentials")
        monkeypatch.setattr(auth, "authorize", authorize)

        assert get_credentials(tmp_path / "creds.json", tmp_path / "token.json", ["scope"]) == "fresh-credentials"
        authorize.assert_called_once()
