"""Flask application factory for The Chronicles of Max content server.

The module exposes :func:`create_app` which is used both by ``app.py`` and
the test-suite to instantiate a fully configured Flask application. The
application reads comics, stories and artwork from a content root on disk,
caches the scanned metadata and serves it as JSON alongside the original
files.
"""
from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path

from flask import Flask, abort, jsonify, render_template, request, send_from_directory
from werkzeug.security import safe_join

from .cache import CacheState, MetadataCache
from .filenames import parse_artwork_filename, parse_episode_filename
from .formats import ContentCategory, classify
from .scanner import ContentLayout, ContentScanner, ContentType, ScanSnapshot
from .story_parser import parse_story_text
from .thumbnails import DEFAULT_THUMBNAIL_SIZE, ThumbnailStore

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    content_root: Path | None = None,
    *,
    refresh_interval: timedelta | None = None,
    eager_scan: bool = False,
    thumbnails: bool = True,
) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    content_root:
        Directory containing the ``comics``, ``literature``, ``artwork`` and
        ``thumbnails`` folders. Defaults to ``CHRONICLES_CONTENT_ROOT`` or
        the current working directory.
    refresh_interval:
        Age after which cached metadata is rescanned on read. Defaults to
        ``CHRONICLES_REFRESH_DAYS`` days (7 when unset).
    eager_scan:
        When ``True`` every content type is scanned before the application
        is returned.
    thumbnails:
        Render a thumbnail for every comic page during scans.

    Returns
    -------
    flask.Flask
        A ready-to-use Flask application. The metadata cache is available as
        ``app.config["METADATA_CACHE"]``.

    Examples
    --------
    >>> from max_chronicles import create_app
    >>> app = create_app()
    >>> app.test_client().get('/health').status_code
    200
    """

    app = Flask(__name__, template_folder="templates")
    app.config.setdefault(
        "REFRESH_INTERVAL_DAYS", float(os.environ.get("CHRONICLES_REFRESH_DAYS", "7"))
    )
    app.config.setdefault(
        "THUMBNAIL_SIZE", int(os.environ.get("CHRONICLES_THUMBNAIL_SIZE", str(DEFAULT_THUMBNAIL_SIZE)))
    )

    content_root = _resolve_content_root(content_root)
    app.config["CONTENT_ROOT"] = content_root
    app.logger.info("Content root: %s", content_root)

    if refresh_interval is None:
        refresh_interval = timedelta(days=app.config["REFRESH_INTERVAL_DAYS"])

    layout = ContentLayout()
    thumbnail_store = None
    if thumbnails:
        thumbnail_store = ThumbnailStore(
            content_root / layout.thumbnails,
            max_dim=app.config["THUMBNAIL_SIZE"],
            logger=app.logger,
        )

    scanner = ContentScanner(content_root, layout=layout, thumbnails=thumbnail_store, logger=app.logger)
    cache = MetadataCache(scanner, ttl=refresh_interval, logger=app.logger)
    app.config["METADATA_CACHE"] = cache

    if eager_scan:
        cache.init()

    @app.before_request
    def short_circuit_preflight():
        """Answer CORS preflight requests before routing."""
        if request.method == "OPTIONS":
            return app.response_class(status=200)
        return None

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(_CORS_HEADERS)
        return response

    def _snapshot_response(content_type: ContentType, *, force: bool):
        """Return the JSON envelope for *content_type*.

        Any unexpected error is reported as a 500 response with the
        exception message.
        """
        try:
            if force:
                snapshot = cache.force_refresh(content_type)
            else:
                snapshot = cache.get_or_refresh(content_type)
            data = snapshot.to_dict()
        except Exception as exc:
            app.logger.exception("Error getting %s data", content_type.value)
            return jsonify({"success": False, "error": str(exc)}), 500
        return jsonify({"success": True, "data": data})

    @app.route("/api/comics")
    def comics_data():
        """Return cached comic series, rescanning when stale."""
        return _snapshot_response(ContentType.COMICS, force=False)

    @app.route("/api/stories")
    def stories_data():
        return _snapshot_response(ContentType.STORIES, force=False)

    @app.route("/api/artwork")
    def artwork_data():
        return _snapshot_response(ContentType.ARTWORK, force=False)

    @app.route("/api/comics/scan", methods=["POST"])
    def scan_comics():
        """Force a rescan of the comics directory."""
        return _snapshot_response(ContentType.COMICS, force=True)

    @app.route("/api/stories/scan", methods=["POST"])
    def scan_stories():
        return _snapshot_response(ContentType.STORIES, force=True)

    @app.route("/api/artwork/scan", methods=["POST"])
    def scan_artwork():
        return _snapshot_response(ContentType.ARTWORK, force=True)

    @app.route("/health")
    def health():
        """Lightweight health check used by monitoring and dev tooling."""
        return jsonify({
            "status": "ok",
            "cache": {content_type.value: cache.state(content_type).value for content_type in ContentType},
        })

    @app.route("/comics/<series>/<path:filename>")
    def comic_file(series: str, filename: str):
        """Stream an original comic page.

        Parameters
        ----------
        series:
            Name of the series directory.
        filename:
            Name of the image inside the series directory.
        """
        return _send_content(content_root / layout.comics, series, filename)

    @app.route("/artwork/<category>/<path:filename>")
    def artwork_file(category: str, filename: str):
        return _send_content(content_root / layout.artwork, category, filename)

    @app.route("/stories/<path:filename>")
    def story_file(filename: str):
        return _send_content(content_root / layout.stories, "", filename)

    @app.route("/thumbnails/<series>/<path:filename>")
    def thumbnail_file(series: str, filename: str):
        return _send_content(content_root / layout.thumbnails, series, filename)

    @app.route("/")
    @app.route("/<path:path>")
    def index(path: str = ""):
        """Render the single-page front-end shell for every other route."""
        return render_template("index.html")

    return app


__all__ = [
    "CacheState",
    "ContentCategory",
    "ContentType",
    "MetadataCache",
    "ScanSnapshot",
    "classify",
    "create_app",
    "parse_artwork_filename",
    "parse_episode_filename",
    "parse_story_text",
]


def _resolve_content_root(content_root: Path | None) -> Path:
    """Return an absolute content root, falling back to the environment.

    Examples
    --------
    >>> _resolve_content_root(Path("/srv/max")).as_posix()
    '/srv/max'
    """

    if content_root is None:
        raw = os.environ.get("CHRONICLES_CONTENT_ROOT")
        content_root = Path(raw) if raw else Path.cwd()
    return content_root.expanduser().resolve()


def _send_content(base: Path, folder: str, filename: str):
    """Stream *filename* from ``base/folder``.

    *folder* is a single URL segment naming a series or gallery; it may not
    escape *base*. Missing files are reported as 404 by
    :func:`flask.send_from_directory`.
    """

    directory = safe_join(str(base), folder) if folder else str(base)
    if directory is None:
        abort(404)
    return send_from_directory(directory, filename)
