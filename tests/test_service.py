import pytest

from titulky_subtitles import service
from titulky_subtitles.constants import EXPLICIT_METADATA, SIZE_ESTIMATE
from titulky_subtitles.debrid import DebridFile, detect_source
from titulky_subtitles.metadata import TitleInfo
from titulky_subtitles.ranking import CandidateSubtitle

pytestmark = pytest.mark.service

GB = 1024 ** 3
FILENAME = "Inception.2010.1080p.WEB-DL.x264-GRP.mkv"


def _results():
    return [
        {"id": "1", "title": "Inception 1080p WEB-DL", "downloads": 10, "url": "https://example.org/1"},
        {"id": "2", "title": "Inception CAM", "downloads": 9000, "url": "https://example.org/2"},
        {"id": "3", "title": "Inception BluRay", "downloads": 5},
    ]


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    for name in service.registered_providers():
        service.unregister_provider(name)
    service.RESULT_CACHE.clear()
    monkeypatch.setattr(service.settings, "rd_token", None)
    monkeypatch.setattr(service.settings, "realdebrid_token", None)
    monkeypatch.setattr(service, "lookup_title", lambda media_type, imdb_id: TitleInfo("Inception", "2010", 148))
    yield
    for name in service.registered_providers():
        service.unregister_provider(name)


def test_search_ranks_and_labels():
    queries = []

    def provider(query):
        queries.append(query)
        return _results()

    service.register_provider("stub", provider)
    entries = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME})

    assert queries[0].title == "Inception"
    assert queries[0].year == "2010"
    assert [entry["id"] for entry in entries] == ["stub:1", "stub:2"]
    top = entries[0]
    assert top["url"] == "https://example.org/1"
    assert top["lang"] == "cze"
    assert top["name"] == "📝 Inception 1080p WEB-DL"
    assert top["score"] == pytest.approx(76.75, abs=0.1)
    assert entries[1]["name"].startswith("⚠️")


def test_filename_from_encoded_id_tail():
    service.register_provider("stub", lambda query: _results())
    raw_id = f"tt1375666/filename%3D{FILENAME}"
    assert service.search_subtitles("movie", raw_id) == service.search_subtitles(
        "movie", "tt1375666", hints={"filename": FILENAME}
    )


def test_failing_provider_is_skipped():
    def broken(query):
        raise RuntimeError("site down")

    service.register_provider("broken", broken)
    service.register_provider("stub", lambda query: _results())

    entries = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME})
    assert [entry["id"] for entry in entries] == ["stub:1", "stub:2"]


def test_candidate_objects_keep_their_provider():
    service.register_provider(
        "stub",
        lambda query: [CandidateSubtitle(id="9", title="Inception", url="u", provider="titulky", language_tag="slo")],
    )
    entries = service.search_subtitles("movie", "tt1375666")
    assert entries[0]["id"] == "titulky:9"
    assert entries[0]["lang"] == "slo"


def test_results_are_cached():
    calls = []

    def provider(query):
        calls.append(query)
        return _results()

    service.register_provider("stub", provider)
    first = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME})
    second = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME})

    assert first == second
    assert len(calls) == 1


def test_no_candidates():
    assert service.search_subtitles("movie", "tt1375666") == []


def test_limit():
    service.register_provider("stub", lambda query: _results())
    entries = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME}, limit=1)
    assert [entry["id"] for entry in entries] == ["stub:1"]


def test_series_query():
    queries = []
    service.register_provider("stub", lambda query: queries.append(query) or [])
    service.search_subtitles("series", "tt0369179:1:2")
    assert (queries[0].imdb_id, queries[0].season, queries[0].episode) == ("tt0369179", "1", "2")


def test_target_from_size_hint():
    target = service.resolve_target({"videoSize": str(60 * GB)}, runtime_minutes=120)
    assert target.data_source == SIZE_ESTIMATE
    assert target.source == "remux"


def test_target_from_real_debrid(monkeypatch):
    tokens = []

    class FakeClient:
        def __init__(self, token):
            tokens.append(token)

        def get_current_stream(self):
            return DebridFile(filename="Inception.2010.1080p.BluRay.x264-SPARKS.mkv", size=9 * GB)

    monkeypatch.setattr(service.settings, "rd_token", "tok")
    monkeypatch.setattr(service, "RealDebridClient", FakeClient)

    target = service.resolve_target({})
    assert tokens == ["tok"]
    assert target.data_source == EXPLICIT_METADATA
    assert target.source == "bluray"
    assert target.release_group == "SPARKS"


def test_filename_hint_skips_real_debrid(monkeypatch):
    class ExplodingClient:
        def __init__(self, token):
            raise AssertionError("Real-Debrid must not be queried")

    monkeypatch.setattr(service.settings, "rd_token", "tok")
    monkeypatch.setattr(service, "RealDebridClient", ExplodingClient)

    assert service.resolve_target({"filename": FILENAME}).source == "web-dl"


def test_window_counts_only_downloadable_entries():
    release = "Inception.2010.1080p.WEB-DL.x264-GRP"
    without_url = [{"id": f"n{i}", "title": release, "downloads": 1000} for i in range(6)]
    with_url = [{"id": f"u{i}", "title": release, "downloads": 1, "url": f"https://example.org/{i}"} for i in range(6)]
    service.register_provider("stub", lambda query: without_url + with_url)

    entries = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME})

    assert [entry["id"] for entry in entries] == [f"stub:u{i}" for i in range(6)]
    assert entries[0]["name"].startswith("🏆")
    assert not entries[1]["name"].startswith("🏆")


def test_mixed_id_types_are_ranked():
    service.register_provider(
        "stub",
        lambda query: [
            CandidateSubtitle(id=7, title="Inception 1080p WEB-DL", url="u7"),
            CandidateSubtitle(id="a", title="Inception 1080p WEB-DL", url="ua"),
        ],
    )
    entries = service.search_subtitles("movie", "tt1375666", hints={"filename": FILENAME})
    assert [entry["id"] for entry in entries] == ["stub:7", "stub:a"]


def test_target_from_real_debrid_detected_source(monkeypatch):
    filename = "Movie.2019.1080p.BRRip.x264.mkv"

    class FakeClient:
        def __init__(self, token):
            pass

        def get_current_stream(self):
            return DebridFile(filename=filename, size=60 * GB, detected_source=detect_source(filename))

    monkeypatch.setattr(service.settings, "rd_token", "tok")
    monkeypatch.setattr(service, "RealDebridClient", FakeClient)

    target = service.resolve_target({}, runtime_minutes=120)
    assert target.source == "bluray"
    assert target.data_source == EXPLICIT_METADATA
    assert target.confidence == 80
