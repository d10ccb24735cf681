"""
test_server.py — Unit tests for server.py (REST API over a mocked YouTube service)
"""

from __future__ import annotations

import json
import threading
import time

import pytest
from fastapi.testclient import TestClient

from server import create_app


@pytest.fixture
def client(ctx) -> TestClient:
    return TestClient(create_app(ctx))


class TestDiscovery:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()

    def test_endpoints(self, client):
        data = client.get("/api/endpoints").json()
        paths = {(e["method"], e["path"]) for e in data["endpoints"]}
        assert ("GET", "/api/stream/info") in paths
        assert ("PUT", "/api/stream/current") in paths
        assert ("POST", "/api/verticals/upload") in paths
        assert "methodOverride" in data["usage"]

    def test_cli_only_actions_are_not_exposed(self, client):
        names = {e.get("name") for e in client.get("/api/endpoints").json()["endpoints"]}
        assert "serve" not in names


class TestStreamRoutes:

    def test_info(self, client):
        response = client.get("/api/stream/info")
        assert response.status_code == 200
        assert response.json()["liveBroadcast"]["id"] == "broadcast-123"
        assert response.json()["video"]["snippet"]["title"] == "Test Video"

    def test_set_title(self, client, service, sample_broadcast):
        response = client.put("/api/stream/title", json={"title": "New title"})
        assert response.status_code == 200
        service.set_title_stream.assert_called_once_with(sample_broadcast, "New title")

    def test_set_title_missing_parameter(self, client, service):
        response = client.put("/api/stream/title", json={})
        assert response.status_code == 400
        assert response.json()["success"] is False
        service.set_title_stream.assert_not_called()

    def test_set_live_stream(self, client, service, sample_broadcast):
        response = client.put("/api/stream/live", json={"title": "T", "description": "D"})
        assert response.status_code == 200
        service.set_live_stream_info.assert_called_once_with(sample_broadcast, "T", "D")

    def test_camel_case_body(self, client, service):
        response = client.put("/api/stream/current", json={
            "description": "Welcome",
            "tag": ["gaming"],
            "tagsAddDescription": True,
            "subjectSeparator": " | ",
        })
        assert response.status_code == 200
        css = service.set_current_stream.call_args.args[2]
        assert css.tags_add_description is True
        assert css.tags == ["gaming"]
        assert css.subject_separator == " | "

    def test_no_live_broadcast(self, client, service):
        service.get_live_broadcast.return_value = {}
        response = client.put("/api/stream/title", json={"title": "T"})
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "No live broadcast found"}

    def test_unexpected_error(self, client, service):
        service.get_video.side_effect = RuntimeError("quota exceeded")
        response = client.get("/api/stream/info")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "quota exceeded"}

    def test_invalid_json_body(self, client):
        response = client.put("/api/stream/title", content=b"{not json",
                              headers={"Content-Type": "application/json"})
        assert response.status_code == 400


class TestQueryParameters:

    def test_repeated_keys_make_a_list(self, client, service):
        response = client.get("/api/playlists", params=[("playlist", "Gaming"), ("playlist", "Live")])
        assert response.status_code == 200
        service.get_playlists.assert_called_once_with(["Gaming", "Live"])
        assert response.json() == [
            {"id": "playlist-1", "name": "Gaming"},
            {"id": "playlist-2", "name": "Live"},
        ]

    def test_single_playlist(self, client):
        assert client.get("/api/playlist", params={"playlist": "Gaming"}).json() == "playlist-1"

    def test_invalid_integer(self, client, tmp_path):
        response = client.get("/api/dock-redirect", params={
            "_method": "PUT", "path-file": str(tmp_path / "dock.html"), "refresh-time": "soon",
        })
        assert response.status_code == 400


class TestMethodOverride:
    """GET + ?_method=<METHOD> reaches PUT/POST routes, nothing else does."""

    def test_override_put(self, client, service, sample_broadcast):
        response = client.get("/api/stream/live", params={
            "_method": "PUT", "title": "T", "description": "D",
        })
        assert response.status_code == 200
        service.set_live_stream_info.assert_called_once_with(sample_broadcast, "T", "D")

    def test_override_is_case_insensitive(self, client, service):
        response = client.get("/api/stream/title", params={"_method": "put", "title": "T"})
        assert response.status_code == 200

    def test_override_post(self, client):
        response = client.get("/api/verticals/upload", params={"_method": "POST"})
        assert response.status_code == 200
        assert response.json()["uploadedCount"] == 1

    def test_get_without_override(self, client, service):
        response = client.get("/api/stream/live", params={"title": "T"})
        assert response.status_code == 404
        service.set_live_stream_info.assert_not_called()

    def test_wrong_override(self, client, service):
        response = client.get("/api/stream/live", params={"_method": "POST", "title": "T"})
        assert response.status_code == 404
        service.set_live_stream_info.assert_not_called()

    def test_query_booleans_and_defaults(self, client, tmp_path):
        page = tmp_path / "dock.html"
        response = client.get("/api/dock-redirect", params={
            "_method": "PUT", "path-file": str(page), "waiting-redirect": "true",
        })
        assert response.status_code == 200
        assert 'content="15"' in page.read_text(encoding="utf-8")


class TestLibraryRoutes:

    def test_verticals_upload(self, client, service, library):
        response = client.post("/api/verticals/upload")
        assert response.status_code == 200
        assert response.json() == {
            "uploadedCount": 1,
            "uploaded": ["Replay_2024-03-24_13-38-36.mkv"],
            "failed": [],
        }
        saved = json.loads(library.path.read_text(encoding="utf-8"))
        assert saved["streams"]["broadcast-123"]["verticals"]["Replay_2024-03-24_13-38-36.mkv"]["uploaded"] is True

    def test_stream_settings(self, client, library):
        response = client.put("/api/settings", json={
            "verticalVisibility": "unlisted",
            "verticalLinkOffset": -30,
            "vertical-add-link-to-video": "false",
        })
        assert response.status_code == 200
        assert response.json() == {
            "path": library.lib.verticals_options.path,
            "addLinkToVideo": False,
            "offsetLinkToVideoInSeconds": -30,
            "visibility": "unlisted",
        }
        assert library.path.exists()

    def test_vertical_info_updates_latest(self, client, library):
        response = client.put("/api/verticals/info", json={"title": "Best moment"})
        assert response.status_code == 200
        assert response.json()["title"] == "Best moment"
        assert response.json()["description"] == "Desc"

    def test_overlapping_uploads_send_each_clip_once(self, client, service):
        def slow_upload(*args, **kwargs):
            time.sleep(0.3)
            return "uploaded-id"

        service.upload_video.side_effect = slow_upload
        responses = []

        def post_upload():
            responses.append(client.post("/api/verticals/upload"))

        threads = [threading.Thread(target=post_upload) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert service.upload_video.call_count == 1
        assert sorted(r.json()["uploadedCount"] for r in responses) == [0, 1]


class TestBodyValues:
    """JSON bodies are typed like query strings before reaching the handler."""

    def test_non_numeric_integer_is_a_bad_request(self, client, library):
        response = client.put("/api/settings", json={"vertical-link-offset": "abc"})
        assert response.status_code == 400
        assert response.json()["success"] is False
        assert library.lib.verticals_options.offset_link_to_video_in_seconds == 0

    def test_numeric_string_becomes_integer(self, client, library):
        response = client.put("/api/settings", json={"verticalLinkOffset": "-45"})
        assert response.status_code == 200
        assert library.lib.verticals_options.offset_link_to_video_in_seconds == -45

    def test_json_boolean_for_choice(self, client, library):
        response = client.put("/api/settings", json={"verticalAddLinkToVideo": False})
        assert response.status_code == 200
        assert response.json()["addLinkToVideo"] is False

    def test_value_outside_choices(self, client):
        response = client.put("/api/settings", json={"verticalVisibility": "friends"})
        assert response.status_code == 400

    def test_list_for_single_value(self, client, service):
        response = client.put("/api/stream/title", json={"title": ["a", "b"]})
        assert response.status_code == 400
        service.set_title_stream.assert_not_called()
