import pytest
import requests

from titulky_subtitles import debrid
from titulky_subtitles.debrid import DebridFile, RealDebridClient, detect_source

pytestmark = pytest.mark.service


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self):
        return self._payload


def test_active_stream(monkeypatch):
    seen = {}

    def fake_get(url, headers=None, timeout=None):
        seen["url"] = url
        seen["headers"] = headers
        return FakeResponse([{"filename": "Inception.2010.1080p.BluRay.x264-SPARKS.mkv", "filesize": "9000", "link": "l"}])

    monkeypatch.setattr(debrid.requests, "get", fake_get)
    active = RealDebridClient("secret", timeout=1).get_current_stream()

    assert active == DebridFile(
        filename="Inception.2010.1080p.BluRay.x264-SPARKS.mkv",
        size=9000,
        link="l",
        detected_source="bluray",
    )
    assert seen["url"].endswith("/streaming/active")
    assert seen["headers"] == {"Authorization": "Bearer secret"}


def test_single_object_payload(monkeypatch):
    monkeypatch.setattr(debrid.requests, "get", lambda *a, **kw: FakeResponse({"filename": "A.mkv"}))
    assert RealDebridClient("secret", timeout=1).get_current_stream() == DebridFile(filename="A.mkv")


@pytest.mark.parametrize("response", [FakeResponse([]), FakeResponse({}, status_code=401), FakeResponse([{"filesize": 5}])])
def test_no_active_stream(monkeypatch, response):
    monkeypatch.setattr(debrid.requests, "get", lambda *a, **kw: response)
    assert RealDebridClient("secret", timeout=1).get_current_stream() is None


def test_network_error(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.Timeout("slow")

    monkeypatch.setattr(debrid.requests, "get", boom)
    assert RealDebridClient("secret", timeout=1).get_current_stream() is None


@pytest.mark.parametrize(
    ("filename", "source"),
    [
        ("Movie.2019.1080p.BRRip.x264.mkv", "bluray"),
        ("Movie.2019.Blu-ray.mkv", "bluray"),
        ("Movie.2019.web.dl.mkv", "web-dl"),
        ("Movie.2019.Web-Rip.mkv", "webrip"),
        ("Movie.2019.HD-CAM.mkv", "cam"),
        ("Movie.2019.Telesync.mkv", "ts"),
        ("Movie.2019.2160p.mkv", "bluray"),
        ("Movie.2019.1080p.x264.mkv", "web-dl"),
        ("Movie.2019.720p.mkv", "webrip"),
        ("Movie.mkv", "unknown"),
    ],
)
def test_detect_source(filename, source):
    assert detect_source(filename) == source
