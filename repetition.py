"""
repetition.py - Remove running headers and footers.

A page's top band (maximum y) and bottom band (minimum y) are fingerprinted
with digits and whitespace stripped, so "Page 12" and "Page 13" collide. Bands
whose fingerprint recurs on most pages are dropped.
"""
import hashlib
import logging
import math
from collections import Counter
from typing import Optional

from models import Document
import config

logger = logging.getLogger(__name__)


def fingerprint(text: str) -> Optional[str]:
    """Digest of text lowercased with digits and whitespace removed.

    Returns None for blank text so empty bands never count as repeated.
    """
    if not text.strip():
        return None
    normalized = "".join(
        c.lower() for c in text if not c.isspace() and not ("0" <= c <= "9")
    )
    return hashlib.sha1(normalized.encode("utf-8")).hexdigest()


def band_fingerprints(fragments: list) -> tuple:
    """Return (bottom_fingerprint, top_fingerprint) for one page's fragments."""
    if not fragments:
        return None, None
    min_y = min(f.y for f in fragments)
    max_y = max(f.y for f in fragments)
    bottom_text = "".join(f.text for f in fragments if abs(f.y - min_y) < config.Y_EPSILON)
    top_text = "".join(f.text for f in fragments if abs(f.y - max_y) < config.Y_EPSILON)
    return fingerprint(bottom_text), fingerprint(top_text)


def repetition_threshold(page_count: int) -> int:
    return max(config.REPETITION_MIN_PAGES,
               math.ceil(page_count * config.REPETITION_PAGE_RATIO))


def remove_repetitive_elements(document: Document) -> None:
    """Drop fragments in top/bottom bands that repeat across most pages."""
    page_count = len(document.pages)
    if page_count < config.REPETITION_MIN_PAGES:
        return

    bands = [band_fingerprints(page.fragments()) for page in document.pages]
    bottom_counts = Counter(b for b, _ in bands if b is not None)
    top_counts = Counter(t for _, t in bands if t is not None)
    threshold = repetition_threshold(page_count)

    removed_bottom = 0
    removed_top = 0
    for page, (bottom, top) in zip(document.pages, bands):
        drop_bottom = bottom is not None and bottom_counts[bottom] >= threshold
        drop_top = top is not None and top_counts[top] >= threshold
        if not (drop_bottom or drop_top):
            continue

        fragments = page.fragments()
        min_y = min(f.y for f in fragments)
        max_y = max(f.y for f in fragments)
        kept = []
        for frag in fragments:
            if drop_bottom and abs(frag.y - min_y) < config.Y_EPSILON:
                removed_bottom += 1
            elif drop_top and abs(frag.y - max_y) < config.Y_EPSILON:
                removed_top += 1
            else:
                kept.append(frag)
        page.items = kept

    logger.debug("Removed %d bottom-band and %d top-band fragments across %d pages",
                 removed_bottom, removed_top, page_count)
