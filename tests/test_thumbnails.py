"""Tests for thumbnail rendering and reuse."""
from __future__ import annotations

import io
import os
from pathlib import Path

import pytest
from PIL import Image

from max_chronicles.thumbnails import (
    ThumbnailError,
    ThumbnailStore,
    render_thumbnail,
    thumbnail_filename,
)


def _write_png(path: Path, size: tuple[int, int]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", size, (200, 40, 40, 255)).save(path, "PNG")
    return path


def test_render_thumbnail_fits_bounding_box(tmp_path: Path) -> None:
    source = _write_png(tmp_path / "page.png", (900, 600))
    data = render_thumbnail(source, max_dim=300)
    with Image.open(io.BytesIO(data)) as thumb:
        assert thumb.format == "JPEG"
        assert thumb.size == (300, 200)


def test_render_thumbnail_does_not_enlarge(tmp_path: Path) -> None:
    source = _write_png(tmp_path / "tiny.png", (40, 20))
    with Image.open(io.BytesIO(render_thumbnail(source, max_dim=300))) as thumb:
        assert thumb.size == (40, 20)


def test_render_thumbnail_rejects_non_images(tmp_path: Path) -> None:
    source = tmp_path / "fake.png"
    source.write_bytes(b"not an image")
    with pytest.raises(ThumbnailError):
        render_thumbnail(source)


def test_render_thumbnail_rejects_oversized_images(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = _write_png(tmp_path / "huge.png", (100, 100))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(ThumbnailError):
        render_thumbnail(source)


def test_store_writes_thumbnail_and_returns_url(tmp_path: Path) -> None:
    source = _write_png(tmp_path / "comics" / "Series 1" / "01 - Pilot.png", (600, 600))
    store = ThumbnailStore(tmp_path / "thumbnails", max_dim=100)

    url = store.ensure("Series 1", source)

    assert url == "/thumbnails/Series 1/01 - Pilot_thumb.jpg"
    assert store.path_for("Series 1", source.name).exists()


def test_store_reuses_newer_thumbnail(tmp_path: Path) -> None:
    source = _write_png(tmp_path / "01 - Pilot.png", (50, 50))
    store = ThumbnailStore(tmp_path / "thumbnails")
    target = store.path_for("S", source.name)
    target.parent.mkdir(parents=True)
    target.write_bytes(b"cached")
    source_mtime = source.stat().st_mtime
    os.utime(target, (source_mtime + 10, source_mtime + 10))

    assert store.ensure("S", source) == "/thumbnails/S/01 - Pilot_thumb.jpg"
    assert target.read_bytes() == b"cached"


def test_store_regenerates_stale_thumbnail(tmp_path: Path) -> None:
    source = _write_png(tmp_path / "01 - Pilot.png", (50, 50))
    store = ThumbnailStore(tmp_path / "thumbnails")
    target = store.path_for("S", source.name)
    target.parent.mkdir(parents=True)
    target.write_bytes(b"stale")
    source_mtime = source.stat().st_mtime
    os.utime(target, (source_mtime - 10, source_mtime - 10))

    store.ensure("S", source)
    assert target.read_bytes() != b"stale"


def test_store_returns_none_for_unrenderable_source(tmp_path: Path) -> None:
    source = tmp_path / "vector.svg"
    source.write_text("<svg xmlns='http://www.w3.org/2000/svg'/>")
    store = ThumbnailStore(tmp_path / "thumbnails")
    assert store.ensure("S", source) is None


def test_thumbnail_filename() -> None:
    assert thumbnail_filename("E02 - Night.webp") == "E02 - Night_thumb.jpg"
