"""Filename conventions used by content authors.

Comic episodes are named ``"<N|EN> - <Title>.<ext>"`` and artwork pieces
``"<Title> - <Author>.<ext>"``. Both parsers are total: a filename that
does not follow the convention still yields a best-effort result.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

DEFAULT_EPISODE_NUMBER = 0
UNKNOWN_AUTHOR = "Unknown"

_EPISODE_PATTERN = re.compile(r"^(E?)(\d+)\s*[-–]\s*(.+)\.\w+$", re.IGNORECASE)
_ARTWORK_SEPARATOR = " - "
_TITLE_PUNCTUATION = re.compile(r"[-_]")


@dataclass(frozen=True)
class EpisodeName:
    """Episode number and title recovered from a comic filename."""

    number: int
    title: str
    matched: bool


@dataclass(frozen=True)
class ArtworkName:
    """Title and author recovered from an artwork filename."""

    title: str
    author: str


def parse_episode_filename(filename: str, default_number: int = DEFAULT_EPISODE_NUMBER) -> EpisodeName:
    """Extract the episode number and title from *filename*.

    Examples
    --------
    >>> parse_episode_filename("05 - Gravity is My Friend.gif")
    EpisodeName(number=5, title='Gravity is My Friend', matched=True)
    >>> parse_episode_filename("E12-Night Shift.png").number
    12
    >>> parse_episode_filename("cover.png")
    EpisodeName(number=0, title='cover', matched=False)
    """

    match = _EPISODE_PATTERN.match(filename)
    if match is None:
        return EpisodeName(number=default_number, title=PurePath(filename).stem, matched=False)
    return EpisodeName(number=int(match.group(2)), title=match.group(3).strip(), matched=True)


def parse_artwork_filename(filename: str) -> ArtworkName:
    """Split an artwork filename into title and author.

    Only the first ``" - "`` separates the two, so authors may contain the
    separator themselves.

    Examples
    --------
    >>> parse_artwork_filename("Sunset Over Ruins - Jane Doe.png")
    ArtworkName(title='Sunset Over Ruins', author='Jane Doe')
    >>> parse_artwork_filename("Untitled.jpg")
    ArtworkName(title='Untitled', author='Unknown')
    """

    stem = PurePath(filename).stem
    title, separator, author = stem.partition(_ARTWORK_SEPARATOR)
    if not separator:
        return ArtworkName(title=stem, author=UNKNOWN_AUTHOR)
    return ArtworkName(title=title.strip() or stem, author=author.strip() or UNKNOWN_AUTHOR)


def fallback_story_title(filename: str) -> str:
    """Return a readable title derived from a story's filename.

    Examples
    --------
    >>> fallback_story_title("the-great_fire.txt")
    'the great fire'
    """

    return _TITLE_PUNCTUATION.sub(" ", PurePath(filename).stem)
