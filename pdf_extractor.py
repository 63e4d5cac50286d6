"""
pdf_extractor.py - Extract positioned text runs from a PDF.

Uses pdfminer.six for text with per-character font and geometry, and pikepdf
for the encryption pre-check and page count. Pages are extracted in parallel
by contiguous page ranges and sorted back into page order.
"""
import logging
import math
from concurrent.futures import ProcessPoolExecutor
from typing import Optional

from pdfminer.high_level import extract_pages
from pdfminer.layout import LAParams, LTAnno, LTChar, LTContainer, LTTextLine
import pikepdf

from models import Document, TextFragment
import config

logger = logging.getLogger(__name__)


def extract_document(pdf_path: str, workers: Optional[int] = None) -> Document:
    """Main entry point: extract every page's text runs into a Document.

    Raises pikepdf.PasswordError for encrypted PDFs.
    """
    page_count = _page_count(pdf_path)
    workers = max(1, workers or config.DEFAULT_WORKERS)

    if page_count is None:
        # Pre-check failed; let pdfminer find the pages itself.
        pages = _extract_range(pdf_path, None)
    else:
        ranges = page_ranges(page_count, workers)
        if len(ranges) <= 1:
            pages = [p for r in ranges for p in _extract_range(pdf_path, r)]
        else:
            logger.debug("Extracting %d pages with %d workers (%d chunks)",
                         page_count, workers, len(ranges))
            pages = []
            with ProcessPoolExecutor(max_workers=min(workers, len(ranges))) as executor:
                for chunk in executor.map(_extract_range, [pdf_path] * len(ranges), ranges):
                    pages.extend(chunk)

    pages.sort(key=lambda p: p[0])
    return Document.from_fragments([frags for _, frags in pages], source_path=pdf_path)


def page_ranges(page_count: int, workers: int) -> list:
    """Split page indices into at most `workers` contiguous (start, end) ranges."""
    if page_count <= 0:
        return []
    chunk = math.ceil(page_count / max(1, workers))
    return [(start, min(start + chunk, page_count)) for start in range(0, page_count, chunk)]


def _page_count(pdf_path: str) -> Optional[int]:
    try:
        pdf = pikepdf.Pdf.open(pdf_path)
    except pikepdf.PasswordError:
        logger.error("PDF is encrypted/password-protected: %s", pdf_path)
        raise
    except Exception as e:
        logger.warning("PDF pre-check warning: %s", e)
        return None
    try:
        return len(pdf.pages)
    finally:
        pdf.close()


def _extract_range(pdf_path: str, page_range) -> list:
    """Extract (page_index, fragments) pairs for one page range, or all pages."""
    laparams = LAParams(**config.LAPARAMS)
    if page_range is None:
        indices = None
        start = 0
    else:
        start, end = page_range
        indices = range(start, end)

    pages = []
    layouts = extract_pages(pdf_path, page_numbers=indices, laparams=laparams)
    for offset, page_layout in enumerate(layouts):
        fragments = []
        try:
            _walk(page_layout, fragments)
        except Exception as e:
            logger.warning("Partial extraction on page %d: %s", start + offset, e)
        pages.append((start + offset, fragments))
    return pages


def _walk(element, fragments: list) -> None:
    """Recursively collect text runs from text lines, boxes and figures."""
    if isinstance(element, LTTextLine):
        fragments.extend(text_runs(element))
        return
    if not isinstance(element, LTContainer):
        return
    loose_chars = []
    for child in element:
        if isinstance(child, LTChar):
            # Figures hold characters directly, without text lines.
            loose_chars.append(child)
            continue
        if loose_chars:
            fragments.extend(text_runs(loose_chars))
            loose_chars = []
        _walk(child, fragments)
    if loose_chars:
        fragments.extend(text_runs(loose_chars))


def text_runs(chars) -> list:
    """Split a character sequence into fragments of uniform font and size.

    A run ends only where the font name or size changes. Spaces, including
    the ones layout analysis inserts between words (LTAnno), stay in the run
    text; line breaks and leading spaces are dropped. Geometry comes from the
    glyphs alone.
    """
    runs = []
    glyphs = []
    pieces = []
    for item in chars:
        text = item.get_text()
        if isinstance(item, LTAnno) or text.isspace():
            if glyphs and "\n" not in text:
                pieces.append(text)
            continue
        if glyphs and (item.fontname != glyphs[0].fontname or item.size != glyphs[0].size):
            _flush(glyphs, pieces, runs)
            glyphs = []
            pieces = []
        glyphs.append(item)
        pieces.append(text)
    _flush(glyphs, pieces, runs)
    return runs


def _flush(glyphs: list, pieces: list, runs: list) -> None:
    if not glyphs:
        return
    text = "".join(pieces)
    if not text.strip():
        return
    x0 = min(c.x0 for c in glyphs)
    x1 = max(c.x1 for c in glyphs)
    runs.append(TextFragment(
        text=text,
        x=x0,
        y=max(c.y1 for c in glyphs),
        width=x1 - x0,
        height=max(c.height for c in glyphs),
        font=glyphs[0].fontname or "unknown",
        font_size=glyphs[0].size,
    ))
