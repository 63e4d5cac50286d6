"""
markdown_renderer.py - Serialize classified lines into Markdown.

Each page's lines collapse into one RenderedMarkdown item. Paragraph breaks
come from vertical gaps wider than the body line pitch, code runs are fenced,
and TOC entries become nested list items. assemble_markdown joins the pages.
"""
import logging

from models import BlockType, Document, RenderedMarkdown
import config

logger = logging.getLogger(__name__)

_WRAPPERS = (("**_", "_**"), ("**", "**"), ("_", "_"), ("*", "*"))


def render_markdown(document: Document) -> None:
    line_pitch = document.stats.line_pitch
    for page in document.pages:
        page.items = [RenderedMarkdown(render_page(page.lines(), line_pitch))]
    logger.debug("Rendered %d pages to Markdown", len(document.pages))


def render_page(lines: list, line_pitch: float) -> str:
    out = []
    in_code = False
    last_y = None
    last_was_heading = False
    gap_limit = line_pitch * config.PARAGRAPH_GAP_RATIO

    for line in lines:
        is_code = line.block_type == BlockType.CODE and not line.is_all_bold

        if last_y is not None:
            if not last_was_heading and abs(last_y - line.y) > gap_limit:
                out.append("\n")
            if line.block_type.is_heading:
                _ensure_blank_line(out)
        last_y = line.y

        if is_code and not in_code:
            out.append(config.CODE_FENCE + "\n")
            in_code = True
        elif not is_code and in_code:
            out.append(config.CODE_FENCE + "\n\n")
            in_code = False

        out.append(render_line(line))
        last_was_heading = line.block_type.is_heading

    if in_code:
        out.append(config.CODE_FENCE + "\n\n")
    return "".join(out)


def render_line(line) -> str:
    """Markdown for a single line, newline-terminated."""
    block_type = line.block_type
    if block_type == BlockType.CODE and line.is_all_bold:
        # Bold "code" is a listing caption.
        block_type = BlockType.PARAGRAPH
    if block_type in (BlockType.CODE, BlockType.TOC_ITEM):
        text = " ".join(f.text for f in line.fragments)
    else:
        text = " ".join(word for f in line.fragments for word in f.text.split())

    if block_type.is_heading:
        return "#" * block_type.heading_level + " " + _strip_markup(text) + "\n\n"
    if block_type == BlockType.LIST_ITEM:
        return f"- {text}\n"
    if block_type == BlockType.TOC_ITEM:
        return _render_toc_entry(text, line.toc_level or 0)
    if block_type == BlockType.CODE:
        return "\t" + strip_wrapper(text) + "\n"
    return text + "\n"


def strip_wrapper(text: str) -> str:
    """Remove one emphasis wrapper around the whole text, keeping leading indentation."""
    body = text.lstrip(" ")
    indent = text[:len(text) - len(body)]
    body = body.rstrip()
    for opener, closer in _WRAPPERS:
        if len(body) > len(opener) + len(closer) and body.startswith(opener) and body.endswith(closer):
            return indent + body[len(opener):-len(closer)]
    return indent + body


def assemble_markdown(page_texts: list) -> str:
    """Join per-page Markdown, keeping sentences that cross a page break together."""
    parts = []
    for i, text in enumerate(page_texts):
        if i > 0:
            parts.append(_page_separator(page_texts[i - 1]))
        parts.append(text)
    return "".join(parts)


def _page_separator(prev: str) -> str:
    trimmed = prev.rstrip()
    if not trimmed:
        return "\n"
    if trimmed[-1] in config.SENTENCE_TERMINATORS:
        if prev.endswith("\n\n"):
            return ""
        return "\n" if prev.endswith("\n") else "\n\n"
    return "" if prev.endswith("\n") else "\n"


def _ensure_blank_line(out: list) -> None:
    tail = "".join(out[-2:])
    if tail.endswith("\n\n"):
        return
    out.append("\n" if tail.endswith("\n") else "\n\n")


def _strip_markup(text: str) -> str:
    return text.replace("**", "").replace("_", "")


def _render_toc_entry(text: str, level: int) -> str:
    normalized = " ".join(_strip_markup(text).split())
    words = normalized.split()
    numbered = bool(words) and "." in words[0] and all(c.isdigit() or c == "." for c in words[0])
    marker = "" if numbered else "- "
    return f"{config.TOC_INDENT * level}{marker}{normalized}\n"
