"""
line_compactor.py - Group text fragments into visual lines.

Fragments are grouped by vertical proximity in their existing order, sorted by
x within each line, merged into words by horizontal gap, and wrapped in the
Markdown emphasis their font maps to.
"""
import logging
from dataclasses import replace

from models import Document, GlobalStats, Line, TextFragment
import config

logger = logging.getLogger(__name__)


def compact_lines(document: Document) -> None:
    """Replace every page's fragments with Line items.

    Pages are independent: compact_page reads only the page and the shared
    read-only stats.
    """
    stats = document.stats
    for page in document.pages:
        page.items = compact_page(page.fragments(), stats)
    logger.debug("Compacted %d pages into lines", len(document.pages))


def compact_page(fragments: list, stats: GlobalStats) -> list:
    lines = []
    for group in group_into_lines(fragments, stats.line_pitch):
        merged = merge_fragments(group)
        for frag in merged:
            apply_emphasis(frag, stats)
        lines.append(Line.from_fragments(merged))
    return lines


def group_into_lines(fragments: list, line_pitch: float) -> list:
    """Split fragments into lines, each sorted by ascending x.

    A new line starts when a fragment's y is further from the current line's
    first fragment than 0.8x that fragment's font size.
    """
    lines = []
    current = []
    for frag in fragments:
        if current:
            first = current[0]
            if first.font_size > 0:
                tolerance = first.font_size * config.LINE_GROUP_FONT_RATIO
            else:
                tolerance = line_pitch
            if abs(first.y - frag.y) > tolerance:
                lines.append(sorted(current, key=lambda f: f.x))
                current = []
        current.append(frag)
    if current:
        lines.append(sorted(current, key=lambda f: f.x))
    return lines


def merge_fragments(fragments: list) -> list:
    """Merge horizontally adjacent same-font fragments of one line."""
    if not fragments:
        return []

    merged = []
    current = replace(fragments[0])
    for frag in fragments[1:]:
        gap = frag.x - current.right
        same_font = frag.font == current.font
        space_limit = max(current.font_size * config.SPACE_GAP_FONT_RATIO, config.SPACE_GAP_MIN)

        if same_font and gap <= config.GLUE_GAP:
            _extend(current, frag, "")
        elif same_font and gap <= space_limit:
            _extend(current, frag, "" if _suppress_space(current.text, frag.text) else " ")
        else:
            merged.append(current)
            current = replace(frag)
    merged.append(current)
    return merged


def apply_emphasis(frag: TextFragment, stats: GlobalStats) -> None:
    """Wrap a fragment's trimmed text in its font's emphasis markup."""
    emphasis = stats.emphasis_for(frag.font)
    if emphasis is None:
        return
    inner = frag.text.strip()
    if not inner:
        return
    leading = " " if frag.text.startswith(" ") else ""
    trailing = " " if frag.text.endswith(" ") else ""
    frag.text = f"{leading}{emphasis.wrap(inner)}{trailing}"
    frag.emphasis = emphasis


def _extend(current: TextFragment, frag: TextFragment, separator: str) -> None:
    current.text = f"{current.text}{separator}{frag.text}"
    current.width = frag.right - current.x
    current.height = max(current.height, frag.height)


def _suppress_space(left: str, right: str) -> bool:
    if right and right[0] in config.CLOSING_PUNCTUATION:
        return True
    return bool(left) and left[-1] in config.OPENING_PUNCTUATION
