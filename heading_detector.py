"""
heading_detector.py - Classify plain lines as headings or list items.

Heading levels come from title-page detection and a document-wide ladder of
font sizes above body size, followed by bold, all-caps and isolation
heuristics for headings set at body size. Remaining lines starting with a
bullet glyph become list items.
"""
import logging
import re

from models import BlockType, Document, GlobalStats
import config

logger = logging.getLogger(__name__)

_LIST_SHAPED = re.compile(r"^(?:[-*•·]\s|\d+[.)]\s)")
_BULLET = re.compile(r"^\s*[•▪◦●‣∙·–]\s*")


def detect_headings(document: Document) -> None:
    stats = document.stats
    title_pages = {i for i, page in enumerate(document.pages) if _is_title_page(page.lines(), stats)}
    ladder = heading_ladder(document)
    logger.debug("Title pages %s, heading size ladder %s", sorted(title_pages), ladder)

    count = 0
    for i, page in enumerate(document.pages):
        count += _apply_size_levels(page.lines(), stats, ladder, i in title_pages)
    for page in document.pages:
        count += _apply_style_heuristics(page.lines(), stats)
    for page in document.pages:
        _mark_list_items(page.lines())
    logger.debug("Detected %d headings", count)


def heading_ladder(document: Document) -> list:
    """Distinct above-body font sizes, largest first.

    Sizes at the document maximum are left out: those lines are titles and
    always become H1 on their title page.
    """
    stats = document.stats
    min_size = stats.dominant_size * config.HEADING_SIZE_RATIO
    sizes = []
    for page in document.pages:
        for line in page.lines():
            size = line.font_size
            if size <= min_size or _is_list_shaped(line.text):
                continue
            if abs(size - stats.max_size) < config.TITLE_PAGE_TOLERANCE:
                continue
            if not any(abs(s - size) < config.HEADING_SIZE_TOLERANCE for s in sizes):
                sizes.append(size)
    return sorted(sizes, reverse=True)


def _is_list_shaped(text: str) -> bool:
    plain = text.strip().lstrip("*_")
    return bool(_LIST_SHAPED.match(text.strip()) or _LIST_SHAPED.match(plain))


def _is_title_page(lines: list, stats: GlobalStats) -> bool:
    if stats.max_size <= stats.dominant_size * config.HEADING_SIZE_RATIO:
        return False
    return any(abs(line.font_size - stats.max_size) < config.TITLE_PAGE_TOLERANCE for line in lines)


def _apply_size_levels(lines: list, stats: GlobalStats, ladder: list, title_page: bool) -> int:
    second_level = stats.dominant_size + (stats.max_size - stats.dominant_size) * config.SECOND_LEVEL_FRACTION
    min_size = stats.dominant_size * config.HEADING_SIZE_RATIO
    count = 0
    for line in lines:
        if line.block_type != BlockType.PARAGRAPH:
            continue
        size = line.font_size
        if title_page:
            if abs(size - stats.max_size) < config.TITLE_SIZE_TOLERANCE:
                line.block_type = BlockType.H1
                count += 1
                continue
            if size >= second_level:
                line.block_type = BlockType.H2
                count += 1
                continue
        if size > min_size:
            for pos, step in enumerate(ladder):
                if abs(step - size) < config.HEADING_SIZE_TOLERANCE:
                    line.block_type = BlockType.heading(pos + 2)
                    count += 1
                    break
    return count


def _apply_style_heuristics(lines: list, stats: GlobalStats) -> int:
    isolation = stats.line_pitch * config.ISOLATION_PITCH_RATIO
    count = 0
    for idx, line in enumerate(lines):
        if line.block_type != BlockType.PARAGRAPH:
            continue
        text = line.text
        stripped = text.strip()

        if len(stripped) >= 4 and stripped.startswith("**") and stripped.endswith("**") \
                and len(text) < config.BOLD_HEADING_MAX_LEN:
            _strip_bold_wrapper(line)
            if not line.text.strip():
                continue
            if abs(line.font_size - stats.max_size) < config.TITLE_SIZE_TOLERANCE:
                line.block_type = BlockType.H1
            else:
                line.block_type = BlockType.H2
            count += 1
            continue

        above_clear = idx == 0 or abs(lines[idx - 1].y - line.y) >= isolation
        below_clear = idx == len(lines) - 1 or abs(line.y - lines[idx + 1].y) >= isolation
        is_short = len(text) < config.SHORT_HEADING_MAX_LEN

        if line.is_all_bold and is_short and above_clear:
            line.block_type = BlockType.H2
            count += 1
            continue

        letters = [c for c in text if c.isalpha()]
        all_caps = bool(letters) and all(c.isupper() for c in letters)
        font_differs = bool(line.fragments) and line.fragments[0].font != stats.dominant_font
        if all_caps and is_short and above_clear and below_clear and font_differs:
            line.block_type = BlockType.H6
            count += 1
    return count


def _strip_bold_wrapper(line) -> None:
    first = line.fragments[0]
    head = first.text.lstrip()
    if head.startswith("**"):
        first.text = first.text[:len(first.text) - len(head)] + head[2:]
    last = line.fragments[-1]
    tail = last.text.rstrip()
    if tail.endswith("**"):
        last.text = tail[:-2] + last.text[len(tail):]


def _mark_list_items(lines: list) -> None:
    for line in lines:
        if line.block_type != BlockType.PARAGRAPH or not line.fragments:
            continue
        first = line.fragments[0]
        match = _BULLET.match(first.text)
        if match is None:
            continue
        rest = first.text[match.end():]
        if not rest and len(line.fragments) == 1:
            continue
        first.text = rest
        line.block_type = BlockType.LIST_ITEM
