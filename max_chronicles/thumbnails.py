"""Thumbnail generation for comic pages."""
from __future__ import annotations

import io
import logging
from logging import Logger
from pathlib import Path

from PIL import Image, UnidentifiedImageError

DEFAULT_THUMBNAIL_SIZE = 300
THUMBNAIL_URL_PATH = "/thumbnails"


class ThumbnailError(RuntimeError):
    """Raised when an image cannot be turned into a thumbnail."""


def render_thumbnail(path: Path, max_dim: int = DEFAULT_THUMBNAIL_SIZE) -> bytes:
    """Return JPEG bytes of *path* scaled to fit inside ``max_dim`` pixels.

    Images smaller than the bounding box are never enlarged.
    """

    try:
        with Image.open(path) as image:
            image.thumbnail((max_dim, max_dim))
            buffer = io.BytesIO()
            image.convert("RGB").save(buffer, "JPEG", quality=85)
    except (OSError, UnidentifiedImageError, ValueError, Image.DecompressionBombError) as exc:
        raise ThumbnailError(f"Unable to render thumbnail for {path.name}: {exc}") from exc
    return buffer.getvalue()


def thumbnail_filename(filename: str) -> str:
    """Return the stored thumbnail name for a comic *filename*.

    Examples
    --------
    >>> thumbnail_filename("01 - Pilot.png")
    '01 - Pilot_thumb.jpg'
    """

    return f"{Path(filename).stem}_thumb.jpg"


class ThumbnailStore:
    """Writes thumbnails below ``root/<series>/`` and reports their URLs."""

    def __init__(self, root: Path, max_dim: int = DEFAULT_THUMBNAIL_SIZE, logger: Logger | None = None):
        self.root = root
        self.max_dim = max_dim
        self.logger = logger or logging.getLogger(__name__)

    def path_for(self, series: str, filename: str) -> Path:
        return self.root / series / thumbnail_filename(filename)

    def ensure(self, series: str, source: Path) -> str | None:
        """Return the serving path of *source*'s thumbnail, rendering it if stale.

        An existing thumbnail newer than its source is reused. Rendering
        failures are logged and reported as ``None``.
        """

        target = self.path_for(series, source.name)
        url = f"{THUMBNAIL_URL_PATH}/{series}/{target.name}"

        try:
            if target.exists() and target.stat().st_mtime > source.stat().st_mtime:
                return url
        except OSError:
            pass

        try:
            data = render_thumbnail(source, self.max_dim)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except (ThumbnailError, OSError) as exc:
            self.logger.warning("Thumbnail skipped for %s/%s: %s", series, source.name, exc)
            return None
        return url
