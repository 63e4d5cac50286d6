"""
config.py - Configuration constants for the PDF to Markdown pipeline.

The heuristic thresholds below were tuned empirically against real books and
papers. Stages read them from here; nothing re-derives them at runtime.
"""
import os

# Extraction
DEFAULT_WORKERS = os.cpu_count() or 1

# Typography profiling
MIN_ALPHA_CHARS = 3
STYLED_FONT_WEIGHT_DIVISOR = 10
STYLED_FONT_MARKERS = ("bold", "italic", "oblique")
SYMBOL_FONT_MARKERS = ("math", "symbol")
BOLD_FONT_MARKERS = ("bold", "-bd")
ITALIC_FONT_MARKERS = ("oblique", "italic", "-ital", "-it")
PITCH_JITTER = 5.0
DEFAULT_LINE_PITCH = 12.0
SIZE_MATCH_EPSILON = 0.01

# Running header/footer removal
REPETITION_MIN_PAGES = 3
REPETITION_PAGE_RATIO = 2.0 / 3.0
Y_EPSILON = 0.001

# Line grouping and word merging
LINE_GROUP_FONT_RATIO = 0.8
GLUE_GAP = 5.0
SPACE_GAP_FONT_RATIO = 2.0
SPACE_GAP_MIN = 30.0
CLOSING_PUNCTUATION = ".,:;?!)]}"
OPENING_PUNCTUATION = "([{"

# Code blocks
CODE_INDENT_BUFFER = 2.0
CODE_HEADER_HEIGHT_DELTA = 1.0
CODE_INDENT_JITTER = 2.0
CODE_UNITS_PER_SPACE = 4.0

# Table of contents
TOC_MAX_PAGES = 20
TOC_MIN_DIGIT_PERCENT = 75.0
TOC_MERGE_PITCH_RATIO = 1.5
TOC_X_TOLERANCE = 6.0
TOC_HEADER_MIN_LEN = 3
TOC_TITLE_PHRASE = "table of contents"

# Headings
TITLE_PAGE_TOLERANCE = 0.5
TITLE_SIZE_TOLERANCE = 1.0
HEADING_SIZE_RATIO = 1.01
HEADING_SIZE_TOLERANCE = 1.0
SECOND_LEVEL_FRACTION = 0.25
BOLD_HEADING_MAX_LEN = 150
SHORT_HEADING_MAX_LEN = 100
ISOLATION_PITCH_RATIO = 1.5

# Markdown output
PARAGRAPH_GAP_RATIO = 1.2
TOC_INDENT = "   "
CODE_FENCE = "```"
SENTENCE_TERMINATORS = ".?!\"”’"

# pdfminer layout analysis
LAPARAMS = {
    "line_margin": 0.5,
    "word_margin": 0.1,
    "char_margin": 2.0,
    "boxes_flow": 0.5,
    "detect_vertical": False,
}
