"""
test_config.py — Unit tests for config.py validation
"""

from __future__ import annotations

from config import Config


class TestConfigValidate:
    """Test Config.validate() method."""

    def test_validate_passes_when_all_set(self, monkeypatch, tmp_path):
        creds = tmp_path / "creds.json"
        creds.write_text("{}", encoding="utf-8")
        monkeypatch.setattr(Config, "CREDS_FILE", str(creds))
        monkeypatch.setattr(Config, "TOKEN_FILE", str(tmp_path / "token.json"))
        monkeypatch.setattr(Config, "STREAM_LIB_FILE", str(tmp_path / "streamLib.json"))
        assert Config.validate() == []

    def test_validate_fails_missing_creds_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(Config, "CREDS_FILE", str(tmp_path / "missing.json"))
        monkeypatch.setattr(Config, "TOKEN_FILE", "token.json")
        monkeypatch.setattr(Config, "STREAM_LIB_FILE", "streamLib.json")
        errors = Config.validate()
        assert len(errors) == 1
        assert "OAuth client secrets not found" in errors[0]

    def test_validate_multiple_errors(self, monkeypatch):
        monkeypatch.setattr(Config, "CREDS_FILE", "")
        monkeypatch.setattr(Config, "TOKEN_FILE", "")
        monkeypatch.setattr(Config, "STREAM_LIB_FILE", "")
        errors = Config.validate()
        assert len(errors) == 3
        assert any("CREDS_FILE" in e for e in errors)
        assert any("STREAM_LIB_FILE" in e for e in errors)


class TestConfigDefaults:

    def test_scopes_allow_uploads_and_broadcasts(self):
        assert Config.YOUTUBE_SCOPES == ["https://www.googleapis.com/auth/youtube.force-ssl"]

    def test_thumbnail_limit_is_an_int(self):
        assert isinstance(Config.THUMBNAIL_SIZE_LIMIT, int)

    def test_api_port_is_an_int(self):
        assert isinstance(Config.API_PORT, int)
