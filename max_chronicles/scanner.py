"""Scan the content directories and assemble comic, story and artwork metadata."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from logging import Logger
from pathlib import Path
from typing import Dict, List, Tuple, Union

from .extractors import ExtractionError, extract_text
from .filenames import UNKNOWN_AUTHOR, fallback_story_title, parse_artwork_filename, parse_episode_filename
from .formats import is_artwork_image, is_comic_image, is_story_document
from .story_parser import PLACEHOLDER_DESCRIPTION, parse_story_text
from .thumbnails import ThumbnailStore

ARTWORK_CATEGORIES = ("official", "fanart")


class ScanError(RuntimeError):
    """Raised when a content directory cannot be scanned."""


class ContentRootMissing(ScanError):
    """Raised when a top-level content directory does not exist."""


class ContentType(str, Enum):
    COMICS = "comics"
    STORIES = "stories"
    ARTWORK = "artwork"


def isoformat(moment: datetime) -> str:
    """Return *moment* as an ISO-8601 UTC string with millisecond precision.

    Examples
    --------
    >>> isoformat(datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc))
    '2024-05-01T12:30:00.000Z'
    """

    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _modified_at(stat_result) -> datetime:
    return datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)


@dataclass(frozen=True)
class Comic:
    """A single comic page belonging to a series."""

    episode_number: int
    title: str
    filename: str
    serving_path: str
    series: str
    file_size: int
    last_modified: datetime
    thumbnail: str | None = None
    author: str = UNKNOWN_AUTHOR

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()

    def to_dict(self) -> Dict[str, object]:
        return {
            "number": self.episode_number,
            "title": self.title,
            "author": self.author,
            "filename": self.filename,
            "path": self.serving_path,
            "thumbnail": self.thumbnail,
            "extension": self.extension,
            "fileSize": self.file_size,
            "lastModified": isoformat(self.last_modified),
            "series": self.series,
        }


@dataclass(frozen=True)
class Series:
    """Named group of comics ordered by episode number."""

    name: str
    comics: Tuple[Comic, ...]
    last_updated: datetime

    @property
    def total_count(self) -> int:
        return len(self.comics)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "path": f"comics/{self.name}/",
            "comics": [comic.to_dict() for comic in self.comics],
            "totalComics": self.total_count,
            "lastUpdated": isoformat(self.last_updated),
        }


@dataclass(frozen=True)
class Story:
    title: str
    author: str
    filename: str
    serving_path: str
    description: str
    file_size: int
    last_modified: datetime
    published_date: datetime

    def to_dict(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "author": self.author,
            "filename": self.filename,
            "path": self.serving_path,
            "description": self.description,
            "fileSize": self.file_size,
            "lastModified": isoformat(self.last_modified),
            "date": isoformat(self.published_date),
        }


@dataclass(frozen=True)
class MediaAsset:
    """An artwork piece from either the official or the fan art gallery."""

    title: str
    author: str
    filename: str
    serving_path: str
    category: str
    file_size: int
    last_modified: datetime

    def to_dict(self) -> Dict[str, object]:
        return {
            "title": self.title,
            "author": self.author,
            "filename": self.filename,
            "path": self.serving_path,
            "category": self.category,
            "fileSize": self.file_size,
            "lastModified": isoformat(self.last_modified),
            "date": isoformat(self.last_modified),
        }


@dataclass(frozen=True)
class ArtworkCollection:
    official: Tuple[MediaAsset, ...] = ()
    fanart: Tuple[MediaAsset, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "official": [asset.to_dict() for asset in self.official],
            "fanart": [asset.to_dict() for asset in self.fanart],
        }


Payload = Union[Tuple[Series, ...], Tuple[Story, ...], ArtworkCollection]


@dataclass(frozen=True)
class ScanSnapshot:
    """Immutable result of one complete scan of a single content type."""

    content_type: ContentType
    last_updated: datetime
    payload: Payload

    def to_dict(self) -> Dict[str, object]:
        data: Dict[str, object] = {"lastUpdated": isoformat(self.last_updated)}
        if self.content_type is ContentType.ARTWORK:
            data["artwork"] = self.payload.to_dict()
        elif self.content_type is ContentType.COMICS:
            data["series"] = [series.to_dict() for series in self.payload]
        else:
            data["stories"] = [story.to_dict() for story in self.payload]
        return data


@dataclass(frozen=True)
class ContentLayout:
    """Directory names below the content root."""

    comics: str = "comics"
    stories: str = "literature"
    artwork: str = "artwork"
    thumbnails: str = "thumbnails"


class ContentScanner:
    """Walk the content root and build :class:`ScanSnapshot` objects.

    Parameters
    ----------
    content_root:
        Directory holding the ``comics``, ``literature`` and ``artwork``
        folders.
    layout:
        Optional override of the folder names.
    thumbnails:
        When provided, a thumbnail is rendered for every comic page.
    logger:
        Destination for scan diagnostics. Defaults to the module logger.
    """

    def __init__(
        self,
        content_root: Path,
        *,
        layout: ContentLayout | None = None,
        thumbnails: ThumbnailStore | None = None,
        logger: Logger | None = None,
    ):
        self.content_root = content_root
        self.layout = layout or ContentLayout()
        self.thumbnails = thumbnails
        self.logger = logger or logging.getLogger(__name__)

    @property
    def comics_path(self) -> Path:
        return self.content_root / self.layout.comics

    @property
    def stories_path(self) -> Path:
        return self.content_root / self.layout.stories

    @property
    def artwork_path(self) -> Path:
        return self.content_root / self.layout.artwork

    def scan(self, content_type: ContentType) -> ScanSnapshot:
        """Run the scan for *content_type*."""

        if content_type is ContentType.COMICS:
            return self.scan_comics()
        if content_type is ContentType.STORIES:
            return self.scan_stories()
        return self.scan_artwork()

    def scan_comics(self) -> ScanSnapshot:
        """Scan every series directory below ``comics/``.

        Raises
        ------
        ContentRootMissing
            When the comics directory does not exist.
        """

        if not self.comics_path.is_dir():
            raise ContentRootMissing(f"Comics directory not found: {self.comics_path}")

        started = utcnow()
        series_list: List[Series] = []
        for series_dir in _list_directories(self.comics_path):
            try:
                comics = self._scan_series(series_dir)
            except OSError as exc:
                self.logger.warning("Skipping series %s: %s", series_dir.name, exc)
                continue
            if comics:
                series_list.append(Series(name=series_dir.name, comics=tuple(comics), last_updated=started))

        self.logger.info("Scanned %d comic series in %s", len(series_list), self.comics_path)
        return ScanSnapshot(ContentType.COMICS, started, tuple(series_list))

    def _scan_series(self, series_dir: Path) -> List[Comic]:
        comics: List[Comic] = []
        for path in _list_files(series_dir):
            if not is_comic_image(path.name):
                continue
            try:
                comics.append(self._parse_comic(path, series_dir.name))
            except Exception as exc:
                self.logger.warning("Skipping comic %s/%s: %s", series_dir.name, path.name, exc)

        comics.sort(key=lambda comic: comic.episode_number)
        return comics

    def _parse_comic(self, path: Path, series: str) -> Comic:
        stat_result = path.stat()
        episode = parse_episode_filename(path.name)
        thumbnail = self.thumbnails.ensure(series, path) if self.thumbnails else None
        return Comic(
            episode_number=episode.number,
            title=episode.title,
            filename=path.name,
            serving_path=f"/comics/{series}/{path.name}",
            series=series,
            file_size=stat_result.st_size,
            last_modified=_modified_at(stat_result),
            thumbnail=thumbnail,
        )

    def scan_stories(self) -> ScanSnapshot:
        """Scan story documents, newest first.

        Raises
        ------
        ContentRootMissing
            When the stories directory does not exist.
        """

        if not self.stories_path.is_dir():
            raise ContentRootMissing(f"Stories directory not found: {self.stories_path}")

        started = utcnow()
        stories: List[Story] = []
        for path in _list_files(self.stories_path):
            if not is_story_document(path.name):
                continue
            try:
                stories.append(self._parse_story(path))
            except Exception as exc:
                self.logger.warning("Skipping story %s: %s", path.name, exc)

        stories.sort(key=lambda story: story.published_date, reverse=True)
        self.logger.info("Scanned %d stories in %s", len(stories), self.stories_path)
        return ScanSnapshot(ContentType.STORIES, started, tuple(stories))

    def _parse_story(self, path: Path) -> Story:
        stat_result = path.stat()
        fallback_title = fallback_story_title(path.name)
        try:
            metadata = parse_story_text(extract_text(path), fallback_title)
            title, author, description = metadata.title, metadata.author, metadata.description
        except ExtractionError as exc:
            self.logger.warning("Could not read story %s: %s", path.name, exc)
            title, author, description = fallback_title, UNKNOWN_AUTHOR, PLACEHOLDER_DESCRIPTION

        modified = _modified_at(stat_result)
        return Story(
            title=title,
            author=author,
            filename=path.name,
            serving_path=f"/stories/{path.name}",
            description=description,
            file_size=stat_result.st_size,
            last_modified=modified,
            published_date=modified,
        )

    def scan_artwork(self) -> ScanSnapshot:
        """Scan the official and fan art galleries.

        A missing gallery is reported as empty rather than as an error.
        """

        started = utcnow()
        galleries: Dict[str, Tuple[MediaAsset, ...]] = {}
        for category in ARTWORK_CATEGORIES:
            galleries[category] = tuple(self._scan_gallery(category))

        self.logger.info(
            "Scanned %d official artwork and %d fan art pieces",
            len(galleries["official"]),
            len(galleries["fanart"]),
        )
        return ScanSnapshot(ContentType.ARTWORK, started, ArtworkCollection(**galleries))

    def _scan_gallery(self, category: str) -> List[MediaAsset]:
        gallery_dir = self.artwork_path / category
        if not gallery_dir.is_dir():
            self.logger.info("Artwork folder %s not found, treating as empty", category)
            return []

        assets: List[MediaAsset] = []
        for path in _list_files(gallery_dir):
            if not is_artwork_image(path.name):
                continue
            try:
                assets.append(self._parse_artwork(path, category))
            except Exception as exc:
                self.logger.warning("Skipping artwork %s/%s: %s", category, path.name, exc)
        return assets

    def _parse_artwork(self, path: Path, category: str) -> MediaAsset:
        stat_result = path.stat()
        name = parse_artwork_filename(path.name)
        return MediaAsset(
            title=name.title,
            author=name.author,
            filename=path.name,
            serving_path=f"/artwork/{category}/{path.name}",
            category=category,
            file_size=stat_result.st_size,
            last_modified=_modified_at(stat_result),
        )


def _list_directories(root: Path) -> List[Path]:
    """Return the immediate subdirectories of *root* sorted by name."""

    return sorted((entry for entry in root.iterdir() if entry.is_dir()), key=lambda entry: entry.name)


def _list_files(root: Path) -> List[Path]:
    """Return the regular files directly inside *root* sorted by name."""

    return sorted((entry for entry in root.iterdir() if entry.is_file()), key=lambda entry: entry.name)


def sample_comics() -> ScanSnapshot:
    """Built-in comic data served when no comics directory exists."""

    now = utcnow()
    series = "Series 1"
    comics = (
        Comic(1, "The Coffee Incident", "01 - The Coffee Incident.jpg",
              f"/comics/{series}/01 - The Coffee Incident.jpg", series, 1024000, now),
        Comic(2, "3 AM Serenade", "02 - 3 AM Serenade.png",
              f"/comics/{series}/02 - 3 AM Serenade.png", series, 800000, now),
    )
    return ScanSnapshot(ContentType.COMICS, now, (Series(name=series, comics=comics, last_updated=now),))


def sample_stories() -> ScanSnapshot:
    """Built-in story data served when no stories directory exists."""

    now = utcnow()
    story = Story(
        title="The Great Fire of London",
        author="Max the Demon Cat",
        filename="great-fire-london.txt",
        serving_path="/stories/great-fire-london.txt",
        description=(
            "Max's perspective on the 1666 disaster. Spoiler: he didn't start it, "
            "but he definitely made it worse..."
        ),
        file_size=5000,
        last_modified=now,
        published_date=datetime(1666, 9, 2, tzinfo=timezone.utc),
    )
    return ScanSnapshot(ContentType.STORIES, now, (story,))


def sample_artwork() -> ScanSnapshot:
    return ScanSnapshot(ContentType.ARTWORK, utcnow(), ArtworkCollection())


SAMPLE_DATA = {
    ContentType.COMICS: sample_comics,
    ContentType.STORIES: sample_stories,
    ContentType.ARTWORK: sample_artwork,
}
