"""Shared fixtures building a content root on disk."""
from __future__ import annotations

import os
from pathlib import Path

import pytest

TEMPLATED_STORY = """Chronicles of Max
A Short Story
Author: A. Maynard
https://docs.example/story
The Coffee Incident
Max knocked the mug off the table.
Nobody was surprised.
"""


def touch(path: Path, content: bytes | str = b"data", *, mtime: float | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, str):
        path.write_text(content, encoding="utf-8")
    else:
        path.write_bytes(content)
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def content_root(tmp_path: Path) -> Path:
    """Return a content root with a couple of series, stories and artwork."""

    root = tmp_path / "site"
    comics = root / "comics"
    touch(comics / "Series B" / "10 - Later.png")
    touch(comics / "Series B" / "E02 - Second.png")
    touch(comics / "Series B" / "01 - First.gif")
    touch(comics / "Series B" / "notes.txt")
    touch(comics / "Series A" / "01 - Pilot.svg")
    touch(comics / "Empty Series" / "readme.md")

    stories = root / "literature"
    touch(stories / "coffee-incident.txt", TEMPLATED_STORY, mtime=1_700_000_000)
    touch(stories / "old_note.md", "Just a note.\nSecond line.", mtime=1_600_000_000)
    touch(stories / "cover.png", mtime=1_800_000_000)

    artwork = root / "artwork"
    touch(artwork / "official" / "Sunset Over Ruins - Jane Doe.png")
    touch(artwork / "official" / "Sketch.svg")
    touch(artwork / "fanart" / "Max.jpg")
    return root
