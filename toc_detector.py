"""
toc_detector.py - Detect table-of-contents pages among the first pages.

A page whose lines overwhelmingly end in page numbers is a TOC page. Its
numbered lines become TOC entries (with wrapped titles rejoined), nesting
levels come from left-margin or font clustering, and repeated running titles
on follow-up TOC pages are dropped.
"""
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Optional

from models import Document, Line
import config

logger = logging.getLogger(__name__)

_TRAILING_NUMBER = re.compile(r"[0-9]+$")
_TRAILING_MARKUP = "*_ "


@dataclass
class TocEntry:
    line: Line
    index: int
    level: int = 0


@dataclass
class _PageScan:
    entries: list = field(default_factory=list)
    unknown: set = field(default_factory=set)


def detect_toc(document: Document) -> None:
    candidates = []
    for page in document.pages[:config.TOC_MAX_PAGES]:
        scan = scan_toc_page(page.lines(), document.stats.line_pitch)
        if scan is not None:
            candidates.append((page, scan))
    if not candidates:
        return

    method = assign_levels([e for _, scan in candidates for e in scan.entries])
    logger.debug("TOC pages %s, leveled by %s",
                 [page.number for page, _ in candidates], method)

    learned_titles = set()
    for seq, (page, scan) in enumerate(candidates):
        page.items = _rebuild_page(page.lines(), scan, learned_titles, first=seq == 0)


def is_dot_fill(text: str) -> bool:
    return set(text.replace(" ", "")) <= {"."}


def ends_with_page_number(line: Line) -> bool:
    words = [f for f in line.fragments if not is_dot_fill(f.text)]
    if not words:
        return False
    return bool(_TRAILING_NUMBER.search(words[-1].text.rstrip(_TRAILING_MARKUP)))


def strip_page_number(line: Line) -> list:
    """Copies of the line's fragments without dot fill and the trailing page number."""
    words = [replace(f) for f in line.fragments if not is_dot_fill(f.text)]
    if words:
        last = words[-1]
        match = _TRAILING_NUMBER.search(last.text.rstrip(_TRAILING_MARKUP))
        if match:
            digits = match.group()
            pos = last.text.rfind(digits)
            prefix = last.text[:pos].rstrip(". ")
            suffix = last.text[pos + len(digits):]
            last.text = prefix + suffix
    return [w for w in words if w.text]


def scan_toc_page(lines: list, line_pitch: float) -> Optional[_PageScan]:
    """Collect TOC entries for a page, or None when it is not a TOC page."""
    if not lines:
        return None

    scan = _PageScan()
    headline_seen = False
    pending = None  # (index, words, y) of the last unnumbered line
    merge_limit = line_pitch * config.TOC_MERGE_PITCH_RATIO

    for idx, line in enumerate(lines):
        words = strip_page_number(line)
        if ends_with_page_number(line):
            if pending is not None:
                pending_idx, pending_words, pending_y = pending
                pending = None
                if abs(pending_y - line.y) > merge_limit:
                    scan.unknown.add(pending_idx)
                else:
                    words = pending_words + words
            scan.entries.append(TocEntry(line=_entry_line(line, words), index=idx))
        elif not headline_seen:
            headline_seen = True
        else:
            if pending is not None:
                scan.unknown.add(pending[0])
            pending = (idx, words, line.y)
    if pending is not None:
        scan.unknown.add(pending[0])

    if len(scan.entries) * 100.0 / len(lines) <= config.TOC_MIN_DIGIT_PERCENT:
        return None
    return scan


def assign_levels(entries: list) -> str:
    """Set each entry's nesting level and return the method used."""
    clusters = x_clusters(entries)
    if len(clusters) > 1:
        for entry in entries:
            distances = [abs(cx - entry.line.x) for cx in clusters]
            entry.level = distances.index(min(distances))
        return "x-position"

    fonts = []
    for entry in entries:
        font = _first_font(entry)
        if font is not None and font not in fonts:
            fonts.append(font)
    if len(fonts) > 1:
        for entry in entries:
            font = _first_font(entry)
            entry.level = fonts.index(font) if font is not None else 0
        return "font"

    for entry in entries:
        entry.level = 0
    return "flat"


def x_clusters(entries: list) -> list:
    clusters = []
    for entry in entries:
        x = entry.line.x
        if not any(abs(cx - x) < config.TOC_X_TOLERANCE for cx in clusters):
            clusters.append(x)
    return sorted(clusters)


def _first_font(entry: TocEntry) -> Optional[str]:
    return entry.line.fragments[0].font if entry.line.fragments else None


def _entry_line(line: Line, words: list) -> Line:
    anchor = words[0] if words else line
    return Line(
        fragments=words,
        x=anchor.x,
        y=anchor.y,
        width=line.width,
        height=line.height,
    )


def _title_variants(text: str) -> tuple:
    return text, text.split("|")[0].strip()


def _learn_title(text: str, learned: set) -> None:
    learned.update(_title_variants(text))


def _is_repeated_title(text: str, learned: set) -> bool:
    if config.TOC_TITLE_PHRASE in text.lower():
        return True
    for variant in _title_variants(text):
        if variant in learned:
            return True
        if any(len(h) > config.TOC_HEADER_MIN_LEN and variant.startswith(h) for h in learned):
            return True
    return False


def _rebuild_page(lines: list, scan: _PageScan, learned: set, first: bool) -> list:
    entry_by_index = {e.index: e for e in scan.entries}
    entry_texts = [e.line.text for e in scan.entries]

    kept_unknown = set()
    for idx in sorted(scan.unknown):
        text = lines[idx].text.strip()
        if not text:
            kept_unknown.add(idx)
            continue
        if not first and _is_repeated_title(text, learned):
            continue
        if any(text in entry_text for entry_text in entry_texts):
            continue
        kept_unknown.add(idx)
        if first:
            _learn_title(text, learned)

    headline = None
    for idx, line in enumerate(lines):
        if idx in entry_by_index or ends_with_page_number(line):
            continue
        text = line.text.strip()
        if not first and _is_repeated_title(text, learned):
            continue
        headline = idx
        if first and text:
            _learn_title(text, learned)
        break

    items = []
    for idx, line in enumerate(lines):
        entry = entry_by_index.get(idx)
        if entry is not None:
            if entry.line.fragments:
                items.append(entry.line.as_toc(entry.level))
        elif idx in kept_unknown or idx == headline:
            items.append(line)
    return items
