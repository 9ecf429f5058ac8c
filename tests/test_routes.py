import pytest
from fastapi.testclient import TestClient

import titulky_subtitles.app as app_module

pytestmark = pytest.mark.service


def _fake_results(n=2):
    base = [
        {"id": "titulky:1", "url": "https://example.org/1", "lang": "cze", "name": "🎯 Inception [BLURAY]", "score": 91.0},
        {"id": "titulky:2", "url": "https://example.org/2", "lang": "cze", "name": "⚠️ Inception", "score": 30.2},
    ]
    return base[:n]


@pytest.fixture
def client():
    return TestClient(app_module.app)


def test_manifest(client):
    resp = client.get("/manifest.json")
    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == "com.titulky.subtitles"
    assert data["resources"][0]["name"] == "subtitles"
    assert "series" in data["types"]


def test_ping_and_healthz(client):
    ping = client.get("/ping").json()
    assert ping["status"] == "alive"
    assert isinstance(ping["providers"], list)
    assert client.get("/healthz").json()["status"] == "ok"


def test_metrics(client):
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "titulky_search_total" in resp.text


def test_plain_route(monkeypatch, client):
    calls = []

    def stub(media_type, item_id, hints=None, limit=None):
        calls.append((media_type, item_id, hints))
        return _fake_results(2)

    monkeypatch.setattr(app_module, "search_subtitles", stub)

    resp = client.get("/subtitles/movie/tt1375666.json")
    assert resp.status_code == 200
    assert resp.json() == {"subtitles": _fake_results(2)}
    assert resp.headers.get("X-Request-ID")
    assert calls == [("movie", "tt1375666", {})]


def test_extra_route_passes_hints(monkeypatch, client):
    calls = []

    def stub(media_type, item_id, hints=None, limit=None):
        calls.append(hints)
        return _fake_results(1)

    monkeypatch.setattr(app_module, "search_subtitles", stub)

    resp = client.get("/subtitles/series/tt0369179:1:2/filename=Show.S01E02.720p.WEBRip.mkv&videoSize=123.json")
    assert resp.status_code == 200
    assert len(resp.json()["subtitles"]) == 1
    assert calls == [{"filename": "Show.S01E02.720p.WEBRip.mkv", "videoSize": "123"}]


def test_unsupported_type(client):
    resp = client.get("/subtitles/channel/tt1375666.json")
    assert resp.status_code == 404
