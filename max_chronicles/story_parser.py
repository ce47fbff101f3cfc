"""Recover story metadata from the decoded text of a story document.

Stories exported from the shared Google Docs template start with two fixed
header lines followed by an ``Author:`` line. When that template is
detected the author, title and opening paragraph are extracted; any other
document falls back to the filename-derived title and its first lines.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .filenames import UNKNOWN_AUTHOR

TEMPLATE_HEADER = "Chronicles of Max"
TEMPLATE_SUBTITLE = "A Short Story"
PLACEHOLDER_DESCRIPTION = "Story content could not be parsed."

DESCRIPTION_LIMIT = 200
ELLIPSIS = "..."

_AUTHOR_PREFIX = "author: "
_TITLE_SEARCH_START = 4
_FALLBACK_LINE_COUNT = 3


@dataclass(frozen=True)
class StoryMetadata:
    title: str
    author: str
    description: str
    templated: bool = False


def split_lines(text: str) -> List[str]:
    """Return the trimmed, non-empty lines of *text*.

    Examples
    --------
    >>> split_lines("  one \\n\\n two\\r\\n")
    ['one', 'two']
    """

    return [line.strip() for line in text.splitlines() if line.strip()]


def truncate_description(text: str, limit: int = DESCRIPTION_LIMIT) -> str:
    """Cut *text* to *limit* characters, marking truncation with an ellipsis.

    Examples
    --------
    >>> truncate_description("short")
    'short'
    >>> truncate_description("abcdef", limit=3)
    'abc...'
    """

    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def is_template(lines: List[str]) -> bool:
    return len(lines) >= 4 and lines[0] == TEMPLATE_HEADER and lines[1] == TEMPLATE_SUBTITLE


def parse_story_text(text: str, fallback_title: str) -> StoryMetadata:
    """Extract title, author and description from a story's plain text.

    Parameters
    ----------
    text:
        Decoded document text, one paragraph per line.
    fallback_title:
        Title used when the document does not name one, normally derived
        from the filename.

    Returns
    -------
    StoryMetadata
        Parsed metadata. Parsing never fails; unrecognised documents yield
        the fallback title, an unknown author and their first lines as the
        description.

    Examples
    --------
    >>> doc = "Chronicles of Max\\nA Short Story\\nAuthor: A. Maynard\\nlink\\nThe Fire\\nIt began."
    >>> parse_story_text(doc, "fire")
    StoryMetadata(title='The Fire', author='A. Maynard', description='It began.', templated=True)
    >>> parse_story_text("Just a note.", "note").description
    'Just a note.'
    """

    lines = split_lines(text)
    if not is_template(lines):
        summary = " ".join(lines[:_FALLBACK_LINE_COUNT])
        return StoryMetadata(
            title=fallback_title,
            author=UNKNOWN_AUTHOR,
            description=truncate_description(summary),
        )

    author = UNKNOWN_AUTHOR
    if lines[2].lower().startswith(_AUTHOR_PREFIX):
        author = lines[2][lines[2].index(": ") + 2:]

    title = fallback_title
    body_start = _TITLE_SEARCH_START
    for index in range(_TITLE_SEARCH_START, len(lines)):
        if not lines[index].startswith("http"):
            title = lines[index]
            body_start = index + 1
            break

    body = " ".join(lines[body_start:])
    return StoryMetadata(
        title=title,
        author=author,
        description=truncate_description(body),
        templated=True,
    )
