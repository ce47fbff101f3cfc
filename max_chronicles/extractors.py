"""Format-specific text extraction for story documents.

Each supported format has a small extractor exposing ``extract(path)``.
Extractors turn a document into plain text with one paragraph per line;
every failure is reported as :class:`ExtractionError` so callers only have
to handle a single exception type.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Protocol

from bs4 import BeautifulSoup
from pdfminer.high_level import extract_text as pdf_extract_text
from striprtf.striprtf import rtf_to_text

from .formats import file_extension


class ExtractionError(RuntimeError):
    """Raised when a document's text cannot be extracted."""


class TextExtractor(Protocol):
    def extract(self, path: Path) -> str:
        ...


def _read_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8", errors="replace")
    except OSError as exc:
        raise ExtractionError(f"Unable to read {path.name}: {exc}") from exc


class PlainTextExtractor:
    """Plain text and Markdown are used as-is."""

    def extract(self, path: Path) -> str:
        return _read_text(path)


class HtmlTextExtractor:
    """Strip markup from HTML documents such as Google Docs exports.

    Line breaks are emitted only after block elements and ``<br>`` so text
    split across inline ``<span>`` runs stays on one line.
    """

    _DROPPED_TAGS = ["script", "style", "head"]
    _BLOCK_TAGS = [
        "p", "div", "li", "tr", "blockquote", "pre",
        "h1", "h2", "h3", "h4", "h5", "h6",
    ]

    def extract(self, path: Path) -> str:
        markup = _read_text(path)
        try:
            soup = BeautifulSoup(markup, "html.parser")
            for tag in soup(self._DROPPED_TAGS):
                tag.decompose()
            for br in soup.find_all("br"):
                br.replace_with("\n")
            for block in soup.find_all(self._BLOCK_TAGS):
                block.append("\n")
            return soup.get_text()
        except Exception as exc:
            raise ExtractionError(f"Unable to parse HTML in {path.name}: {exc}") from exc


class RtfTextExtractor:
    def extract(self, path: Path) -> str:
        raw = _read_text(path)
        try:
            return rtf_to_text(raw)
        except Exception as exc:
            raise ExtractionError(f"Unable to parse RTF in {path.name}: {exc}") from exc


class PdfTextExtractor:
    """Extract text from the first pages of a PDF with pdfminer."""

    def __init__(self, max_pages: int = 10):
        self.max_pages = max_pages

    def extract(self, path: Path) -> str:
        try:
            return pdf_extract_text(str(path), maxpages=self.max_pages) or ""
        except Exception as exc:
            raise ExtractionError(f"Unable to extract PDF text from {path.name}: {exc}") from exc


_PLAIN = PlainTextExtractor()

EXTRACTORS: Dict[str, TextExtractor] = {
    "txt": _PLAIN,
    "md": _PLAIN,
    "html": HtmlTextExtractor(),
    "rtf": RtfTextExtractor(),
    "pdf": PdfTextExtractor(),
}


def extractor_for(filename: str) -> TextExtractor:
    """Return the extractor registered for *filename*'s extension.

    Raises
    ------
    ExtractionError
        When no extractor handles the extension.
    """

    extension = file_extension(filename)
    try:
        return EXTRACTORS[extension]
    except KeyError:
        raise ExtractionError(f"No text extractor for '.{extension}' files") from None


def extract_text(path: Path) -> str:
    """Extract the plain text of the document at *path*."""

    return extractor_for(path.name).extract(path)
