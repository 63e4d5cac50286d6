"""
typography.py - Document-wide typography baselines.

Derives the dominant body size, font and line pitch, the title-size proxy and
the font -> emphasis table that every later stage reads.
"""
import logging
from collections import Counter
from typing import Optional

from models import Document, Emphasis, GlobalStats
import config

logger = logging.getLogger(__name__)


def compute_global_stats(document: Document) -> GlobalStats:
    """Scan every text fragment once and return the document's GlobalStats."""
    size_votes = Counter()
    font_votes = Counter()
    max_size = 0.0
    max_size_font = ""

    for page in document.pages:
        for frag in page.fragments():
            lower_font = frag.font.lower()
            if any(m in lower_font for m in config.SYMBOL_FONT_MARKERS):
                continue
            alpha_count = _alpha_count(frag.text.strip())
            if alpha_count < config.MIN_ALPHA_CHARS:
                continue

            # Styled fonts are heavily penalized so regular body text wins.
            weight = alpha_count
            if any(m in lower_font for m in config.STYLED_FONT_MARKERS):
                weight //= config.STYLED_FONT_WEIGHT_DIVISOR

            size_votes[round(frag.font_size, 2)] += weight
            font_votes[frag.font] += weight

            if frag.font_size > max_size:
                max_size = frag.font_size
                max_size_font = frag.font

    dominant_size = _mode(size_votes) or 0.0
    dominant_font = _mode(font_votes) or ""
    line_pitch = _dominant_line_pitch(document, dominant_size)

    stats = GlobalStats(
        dominant_size=dominant_size,
        line_pitch=line_pitch,
        dominant_font=dominant_font,
        max_size=max_size,
        font_emphasis=_classify_fonts(font_votes, dominant_font, max_size_font),
    )
    logger.debug(
        "Global stats: dominant_size=%s dominant_font=%r line_pitch=%s max_size=%s",
        stats.dominant_size, stats.dominant_font, stats.line_pitch, stats.max_size,
    )
    return stats


def font_emphasis(font_name: str) -> Optional[Emphasis]:
    """Classify a font by name tokens alone."""
    lower = font_name.lower()
    is_bold = any(m in lower for m in config.BOLD_FONT_MARKERS)
    is_italic = any(m in lower for m in config.ITALIC_FONT_MARKERS)
    if is_bold and is_italic:
        return Emphasis.BOLD_ITALIC
    if is_bold:
        return Emphasis.BOLD
    if is_italic:
        return Emphasis.ITALIC
    return None


def _classify_fonts(font_votes: Counter, dominant_font: str, max_size_font: str) -> dict:
    table = {}
    for font in font_votes:
        if font == dominant_font:
            continue
        emphasis = font_emphasis(font)
        if emphasis is None and font == max_size_font:
            emphasis = Emphasis.BOLD
        if emphasis is not None:
            table[font] = emphasis
    return table


def _dominant_line_pitch(document: Document, dominant_size: float) -> float:
    """Most common downward distance between consecutive body-size fragments."""
    distances = Counter()
    for page in document.pages:
        previous = None
        for frag in page.fragments():
            is_body = abs(frag.font_size - dominant_size) < config.SIZE_MATCH_EPSILON
            if is_body and _alpha_count(frag.text) >= config.MIN_ALPHA_CHARS:
                if previous is not None and abs(previous.y - frag.y) > config.PITCH_JITTER:
                    distance = previous.y - frag.y
                    if distance > 0:
                        distances[round(distance, 2)] += 1
                previous = frag
            elif frag.text.strip():
                previous = None
    return _mode(distances) or config.DEFAULT_LINE_PITCH


def _mode(counter: Counter):
    if not counter:
        return None
    return counter.most_common(1)[0][0]


def _alpha_count(text: str) -> int:
    return sum(1 for c in text if c.isalpha())
