"""Utilities for classifying content files by their extension.

The helpers are pure and only look at the filename, so they can be used
before a file is ever opened. Unknown extensions are never an error; they
simply classify as :attr:`ContentCategory.IGNORED`.
"""
from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import AbstractSet

COMIC_IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg"})
ARTWORK_IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp"})
STORY_EXTENSIONS = frozenset({"txt", "md", "html", "pdf", "rtf"})


class ContentCategory(str, Enum):
    """Broad category a file falls into for scanning purposes."""

    IMAGE = "image"
    TEXT_DOCUMENT = "text"
    IGNORED = "ignored"


def file_extension(filename: str) -> str:
    """Return the lower-cased extension of *filename* without the dot.

    Examples
    --------
    >>> file_extension("01 - Pilot.PNG")
    'png'
    >>> file_extension("README")
    ''
    """

    return PurePath(filename).suffix.lower().lstrip(".")


def classify(
    filename: str,
    *,
    images: AbstractSet[str] = COMIC_IMAGE_EXTENSIONS,
    documents: AbstractSet[str] = STORY_EXTENSIONS,
) -> ContentCategory:
    """Determine the content category of *filename*.

    Parameters
    ----------
    filename:
        Name of the file to classify. Only the extension is inspected.
    images:
        Extensions (lower-case, without the dot) treated as images. Comics
        accept SVG while artwork does not, so callers pick the set.
    documents:
        Extensions treated as story documents.

    Returns
    -------
    ContentCategory
        ``IMAGE`` or ``TEXT_DOCUMENT`` on a match, otherwise ``IGNORED``.

    Examples
    --------
    >>> classify("05 - Gravity is My Friend.gif")
    <ContentCategory.IMAGE: 'image'>
    >>> classify("tale.RTF")
    <ContentCategory.TEXT_DOCUMENT: 'text'>
    >>> classify("sketch.svg", images=ARTWORK_IMAGE_EXTENSIONS)
    <ContentCategory.IGNORED: 'ignored'>
    """

    extension = file_extension(filename)
    if not extension:
        return ContentCategory.IGNORED
    if extension in images:
        return ContentCategory.IMAGE
    if extension in documents:
        return ContentCategory.TEXT_DOCUMENT
    return ContentCategory.IGNORED


def is_comic_image(filename: str) -> bool:
    return classify(filename, images=COMIC_IMAGE_EXTENSIONS) is ContentCategory.IMAGE


def is_artwork_image(filename: str) -> bool:
    return classify(filename, images=ARTWORK_IMAGE_EXTENSIONS) is ContentCategory.IMAGE


def is_story_document(filename: str) -> bool:
    return classify(filename, documents=STORY_EXTENSIONS) is ContentCategory.TEXT_DOCUMENT
