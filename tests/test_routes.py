"""Integration tests for Flask routes."""
from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Iterator

import pytest
from PIL import Image

from max_chronicles import create_app
from max_chronicles.cache import MetadataCache
from max_chronicles.scanner import ContentType

from conftest import touch


@pytest.fixture
def app(content_root: Path) -> Iterator:
    """Create a Flask app serving the sample content root."""

    application = create_app(content_root, thumbnails=False)
    yield application


@pytest.fixture
def client(app) -> Iterator:
    """Provide a Flask test client."""

    with app.test_client() as client:
        yield client


def test_api_comics_returns_series(client) -> None:
    response = client.get("/api/comics")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    names = [series["name"] for series in payload["data"]["series"]]
    assert names == ["Series A", "Series B"]
    numbers = [comic["number"] for comic in payload["data"]["series"][1]["comics"]]
    assert numbers == sorted(numbers)


def test_api_stories_returns_newest_first(client) -> None:
    payload = client.get("/api/stories").get_json()
    stories = payload["data"]["stories"]
    assert [story["filename"] for story in stories] == ["coffee-incident.txt", "old_note.md"]
    assert stories[0]["author"] == "A. Maynard"
    assert stories[0]["date"] >= stories[1]["date"]


def test_api_artwork_returns_both_galleries(client) -> None:
    payload = client.get("/api/artwork").get_json()
    artwork = payload["data"]["artwork"]
    assert artwork["official"][0]["author"] == "Jane Doe"
    assert artwork["fanart"][0]["title"] == "Max"


def test_repeated_reads_share_last_updated(client) -> None:
    first = client.get("/api/comics").get_json()["data"]["lastUpdated"]
    second = client.get("/api/comics").get_json()["data"]["lastUpdated"]
    assert first == second


def test_force_scan_picks_up_new_files(client, content_root: Path) -> None:
    before = client.get("/api/comics").get_json()["data"]
    touch(content_root / "comics" / "Series C" / "01 - New.png")

    cached = client.get("/api/comics").get_json()["data"]
    assert [s["name"] for s in cached["series"]] == [s["name"] for s in before["series"]]

    response = client.post("/api/comics/scan")
    assert response.status_code == 200
    rescanned = response.get_json()["data"]
    assert "Series C" in [s["name"] for s in rescanned["series"]]
    assert client.get("/api/comics").get_json()["data"] == rescanned


@pytest.mark.parametrize("content_type", ["comics", "stories", "artwork"])
def test_scan_endpoints_require_post(client, content_type: str) -> None:
    assert client.post(f"/api/{content_type}/scan").status_code == 200
    assert client.get(f"/api/{content_type}/scan").status_code == 405


def test_expired_cache_is_refreshed_on_read(content_root: Path) -> None:
    app = create_app(content_root, refresh_interval=timedelta(seconds=-1), thumbnails=False)
    cache: MetadataCache = app.config["METADATA_CACHE"]
    with app.test_client() as client:
        client.get("/api/stories")
        first = cache.peek(ContentType.STORIES)
        client.get("/api/stories")
    assert cache.peek(ContentType.STORIES) is not first


def test_missing_roots_serve_sample_data(tmp_path: Path) -> None:
    app = create_app(tmp_path / "empty", thumbnails=False)
    with app.test_client() as client:
        comics = client.get("/api/comics").get_json()
        stories = client.get("/api/stories").get_json()
        artwork = client.get("/api/artwork").get_json()

    assert comics["data"]["series"][0]["name"] == "Series 1"
    assert stories["data"]["stories"][0]["title"] == "The Great Fire of London"
    assert artwork["data"]["artwork"] == {"official": [], "fanart": []}


def test_unexpected_errors_return_500(app, monkeypatch: pytest.MonkeyPatch) -> None:
    cache: MetadataCache = app.config["METADATA_CACHE"]

    def _fail(*_, **__):
        raise RuntimeError("boom")

    monkeypatch.setattr(cache, "get_or_refresh", _fail)
    monkeypatch.setattr(cache, "force_refresh", _fail)
    with app.test_client() as client:
        read = client.get("/api/artwork")
        scan = client.post("/api/artwork/scan")

    assert read.status_code == 500
    assert read.get_json() == {"success": False, "error": "boom"}
    assert scan.status_code == 500


def test_oversized_comic_page_does_not_break_comics_api(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    series = tmp_path / "comics" / "Series 1"
    series.mkdir(parents=True)
    Image.new("RGB", (10, 10)).save(series / "01 - Good.png", "PNG")
    Image.new("RGB", (100, 100)).save(series / "02 - Huge.png", "PNG")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    app = create_app(tmp_path)
    with app.test_client() as client:
        response = client.get("/api/comics")

    assert response.status_code == 200
    comics = response.get_json()["data"]["series"][0]["comics"]
    assert [comic["filename"] for comic in comics] == ["01 - Good.png", "02 - Huge.png"]
    assert comics[0]["thumbnail"] == "/thumbnails/Series 1/01 - Good_thumb.jpg"
    assert comics[1]["thumbnail"] is None


def test_static_routes_stream_original_files(client, content_root: Path) -> None:
    touch(content_root / "thumbnails" / "Series B" / "01 - First_thumb.jpg", b"THUMB")
    touch(content_root / "comics" / "Series B" / "01 - First.gif", b"GIF89a")

    paths = {
        "/comics/Series B/01 - First.gif": b"GIF89a",
        "/artwork/official/Sunset Over Ruins - Jane Doe.png": b"data",
        "/stories/coffee-incident.txt": None,
        "/thumbnails/Series B/01 - First_thumb.jpg": b"THUMB",
    }
    for path, expected in paths.items():
        response = client.get(path)
        assert response.status_code == 200, path
        if expected is not None:
            assert response.data == expected
        response.close()


def test_static_routes_404_for_missing_files(client) -> None:
    assert client.get("/comics/Series B/99 - Missing.png").status_code == 404
    assert client.get("/artwork/nowhere/x.png").status_code == 404
    assert client.get("/stories/missing.txt").status_code == 404
