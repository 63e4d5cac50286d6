"""
converter.py - Run the PDF to Markdown pipeline.

Stages run strictly in order over one in-memory Document:
stats, header/footer removal, line grouping, code blocks, TOC, headings,
rendering. The rendered pages are then joined into one Markdown string.
"""
import logging
from pathlib import Path

from models import Document
from pdf_extractor import extract_document
from typography import compute_global_stats
from repetition import remove_repetitive_elements
from line_compactor import compact_lines
from code_blocks import detect_code_blocks
from toc_detector import detect_toc
from heading_detector import detect_headings
from markdown_renderer import render_markdown, assemble_markdown

logger = logging.getLogger(__name__)

PIPELINE = (
    remove_repetitive_elements,
    compact_lines,
    detect_code_blocks,
    detect_toc,
    detect_headings,
    render_markdown,
)


def run_pipeline(document: Document) -> Document:
    """Classify and render a fragment-only document in place."""
    document.stats = compute_global_stats(document)
    for stage in PIPELINE:
        logger.debug("Running %s", stage.__name__)
        stage(document)
    return document


def convert_document(document: Document) -> str:
    run_pipeline(document)
    return assemble_markdown([page.markdown() for page in document.pages])


def convert_file(pdf_path: str, workers: int = None) -> str:
    """Convert a PDF file to a Markdown string.

    Raises ValueError when the file does not start with a PDF header and
    pikepdf.PasswordError for encrypted input.
    """
    with open(pdf_path, "rb") as f:
        header = f.read(8)
    if not header.startswith(b"%PDF"):
        raise ValueError(f"Not a valid PDF file (header: {header[:8]})")

    document = extract_document(str(pdf_path), workers=workers)
    logger.debug("Extracted %d pages from %s", len(document.pages), Path(pdf_path).name)
    return convert_document(document)
