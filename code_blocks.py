"""
code_blocks.py - Detect code listings among a page's lines.

Lines become code when they are indented past the page margin and look like
code or unstyled text, when they carry unmistakable code syntax, or when two
or more italic lines run together. Each code run's relative indentation is
then rebuilt as leading spaces.
"""
import logging
import math
import re

from models import BlockType, Document, GlobalStats
import config

logger = logging.getLogger(__name__)

# Cues that only count on indented lines.
WEAK_KEYWORDS = (
    "import ", "from ", "def ", "class ", "try:", "except", "return ",
    "print(", "if ", "for ", "while ", "with ",
)
WEAK_SYMBOLS = ("{", "}", ";", "=>", " = ", " (", " [", "] ", "):", " # ")

# Cues that mark a line as code wherever it sits.
_STRONG_LINE_START = re.compile(
    r"^(?:"
    r"(?:async\s+)?def\s+\w+\s*\("
    r"|class\s+\w+\s*[(:]"
    r"|import\s+[\w.]+(?:\s+as\s+\w+)?(?:\s*,\s*[\w.]+)*\s*$"
    r"|from\s+[\w.]+\s+import\s"
    r"|try\s*:"
    r"|except\b[^:]*:"
    r"|print\("
    r"|await\s+[\w.]+"
    r"|@[\w.]+"
    r"|if\s+__name__"
    r"|return\b(?!\s+(?:to|from|of|the|a|an|in|on|for|with|and|home)\b)"
    r")"
)
STRONG_SYMBOLS = ("{", "}", "=>", " = ", "):", "asyncio.")


def has_code_indicators(text: str) -> bool:
    """True when the text carries syntax that prose practically never has."""
    stripped = text.strip()
    if _STRONG_LINE_START.match(stripped):
        return True
    if stripped.endswith(";"):
        return True
    return any(s in text for s in STRONG_SYMBOLS)


def has_weak_code_cues(text: str) -> bool:
    lower = text.lower()
    return any(k in lower for k in WEAK_KEYWORDS) or any(s in text for s in WEAK_SYMBOLS)


def detect_code_blocks(document: Document) -> None:
    total = 0
    for page in document.pages:
        total += _detect_page(page.lines(), document.stats)
    logger.debug("Marked %d lines as code", total)


def _detect_page(lines: list, stats: GlobalStats) -> int:
    if not lines:
        return 0
    margin = min(line.x for line in lines)
    indent_threshold = margin + config.CODE_INDENT_BUFFER

    code_indices = set()
    run = []
    for idx, line in enumerate(lines):
        if _is_candidate(line, stats, indent_threshold):
            run.append(idx)
            continue
        code_indices.update(_confirm_run(run, lines))
        run = []
    code_indices.update(_confirm_run(run, lines))

    for idx in code_indices:
        lines[idx].block_type = BlockType.CODE

    code_indices.update(_mark_italic_runs(lines, stats))

    for block in _code_runs(lines):
        _normalize_indentation(block)
    return len(code_indices)


def _is_header_sized(line, stats: GlobalStats) -> bool:
    return line.height > stats.dominant_size + config.CODE_HEADER_HEIGHT_DELTA


def _is_candidate(line, stats: GlobalStats, indent_threshold: float) -> bool:
    text = line.text
    stripped = text.strip()
    if _is_header_sized(line, stats):
        return False
    if stripped.startswith("**") and stripped.endswith("**"):
        return False
    if has_code_indicators(text):
        return True
    if line.x > indent_threshold:
        return has_weak_code_cues(text) or (line.is_plain and stripped != "")
    return False


def _confirm_run(run: list, lines: list) -> list:
    # A lone candidate needs explicit syntax; indented prose is not a listing.
    if len(run) == 1 and not has_code_indicators(lines[run[0]].text):
        return []
    return run


def _is_italic_line(line) -> bool:
    if line.is_all_italic:
        return True
    s = line.text.strip()
    if len(s) < 3:
        return False
    if s[0] == "_" and s[-1] == "_":
        return True
    return s[0] == "*" and s[-1] == "*" and not s.startswith("**") and not s.endswith("**")


def _mark_italic_runs(lines: list, stats: GlobalStats) -> list:
    marked = []
    run = []
    for idx, line in enumerate(lines + [None]):
        if line is not None and line.block_type != BlockType.CODE \
                and not _is_header_sized(line, stats) and _is_italic_line(line):
            run.append(idx)
            continue
        if line is not None and line.block_type == BlockType.CODE:
            # Already-code lines are skipped over, not run breakers.
            continue
        if len(run) > 1:
            marked.extend(run)
        run = []
    for idx in marked:
        lines[idx].block_type = BlockType.CODE
    return marked


def _code_runs(lines: list) -> list:
    runs = []
    current = []
    for line in lines:
        if line.block_type == BlockType.CODE:
            current.append(line)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


def _normalize_indentation(block: list) -> None:
    base_x = min(line.x for line in block)
    for line in block:
        delta = line.x - base_x
        if delta <= config.CODE_INDENT_JITTER or not line.fragments:
            continue
        spaces = math.floor(delta / config.CODE_UNITS_PER_SPACE + 0.5)
        if spaces > 0:
            first = line.fragments[0]
            first.text = " " * spaces + first.text
