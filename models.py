"""
models.py - Shared data structures for the PDF to Markdown pipeline.

Defines the document model that flows between pipeline stages. Coordinates are
PDF user space: x grows to the right and y grows upward, so text further down
a page has a smaller y.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class PipelineOrderError(RuntimeError):
    """A stage received page items produced for a different stage."""


class Emphasis(Enum):
    BOLD = "bold"
    ITALIC = "italic"
    BOLD_ITALIC = "bold_italic"

    @property
    def is_bold(self) -> bool:
        return self in (Emphasis.BOLD, Emphasis.BOLD_ITALIC)

    @property
    def is_italic(self) -> bool:
        return self in (Emphasis.ITALIC, Emphasis.BOLD_ITALIC)

    def wrap(self, text: str) -> str:
        """Wrap already-trimmed text in the Markdown markup for this emphasis."""
        if self is Emphasis.BOLD:
            return f"**{text}**"
        if self is Emphasis.ITALIC:
            return f"_{text}_"
        return f"**_{text}_**"


class BlockType(Enum):
    PARAGRAPH = "paragraph"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    CODE = "code"
    LIST_ITEM = "list_item"
    FOOTNOTE = "footnote"
    TOC_ITEM = "toc_item"

    @classmethod
    def heading(cls, level: int) -> "BlockType":
        """Heading block type for a level, clamped to H1..H6."""
        return _HEADINGS[min(max(level, 1), 6) - 1]

    @property
    def heading_level(self) -> Optional[int]:
        if self in _HEADINGS:
            return _HEADINGS.index(self) + 1
        return None

    @property
    def is_heading(self) -> bool:
        return self in _HEADINGS


_HEADINGS = (BlockType.H1, BlockType.H2, BlockType.H3,
             BlockType.H4, BlockType.H5, BlockType.H6)


@dataclass
class TextFragment:
    """One positioned run of text with a uniform font, as extracted."""
    text: str
    x: float
    y: float
    width: float
    height: float
    font: str
    font_size: float
    emphasis: Optional[Emphasis] = None

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class Line:
    """Fragments sharing a visual line, ordered by ascending x."""
    fragments: list
    x: float
    y: float
    width: float
    height: float
    block_type: BlockType = BlockType.PARAGRAPH
    toc_level: Optional[int] = None

    def __post_init__(self):
        if (self.block_type == BlockType.TOC_ITEM) != (self.toc_level is not None):
            raise ValueError("toc_level must be set exactly for TOC_ITEM lines")

    def as_toc(self, level: int) -> "Line":
        """Tag the line as a TOC entry; the level is part of the tag."""
        if level < 0:
            raise ValueError(f"TOC level must be non-negative, got {level}")
        self.block_type = BlockType.TOC_ITEM
        self.toc_level = level
        return self

    @classmethod
    def from_fragments(cls, fragments: list,
                       block_type: BlockType = BlockType.PARAGRAPH) -> "Line":
        first, last = fragments[0], fragments[-1]
        return cls(
            fragments=fragments,
            x=first.x,
            y=first.y,
            width=last.right - first.x,
            height=max(f.height for f in fragments),
            block_type=block_type,
        )

    @property
    def text(self) -> str:
        return "".join(f.text for f in self.fragments)

    @property
    def font_size(self) -> float:
        """Largest font size on the line (0.0 for an empty line)."""
        return max((f.font_size for f in self.fragments), default=0.0)

    @property
    def is_plain(self) -> bool:
        return all(f.emphasis is None for f in self.fragments)

    @property
    def is_all_bold(self) -> bool:
        return bool(self.fragments) and all(
            f.emphasis is not None and f.emphasis.is_bold for f in self.fragments
        )

    @property
    def is_all_italic(self) -> bool:
        return bool(self.fragments) and all(
            f.emphasis is not None and f.emphasis.is_italic for f in self.fragments
        )


@dataclass
class RenderedMarkdown:
    """Terminal form of a page: its Markdown text."""
    text: str


@dataclass
class Page:
    """A page number and its items, already in reading order.

    Items are homogeneous per stage: all TextFragment before line grouping,
    all Line after it, and a single RenderedMarkdown once rendered.
    """
    number: int
    items: list = field(default_factory=list)

    def _expect(self, kind) -> list:
        for item in self.items:
            if not isinstance(item, kind):
                raise PipelineOrderError(
                    f"page {self.number}: expected {kind.__name__} items, "
                    f"found {type(item).__name__}"
                )
        return self.items

    def fragments(self) -> list:
        return self._expect(TextFragment)

    def lines(self) -> list:
        return self._expect(Line)

    def markdown(self) -> str:
        rendered = self._expect(RenderedMarkdown)
        return rendered[0].text if rendered else ""


@dataclass(frozen=True)
class GlobalStats:
    """Document-wide typography baselines, computed once before any transformation."""
    dominant_size: float = 0.0
    line_pitch: float = 12.0
    dominant_font: str = ""
    max_size: float = 0.0
    font_emphasis: Mapping = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        object.__setattr__(self, "font_emphasis", MappingProxyType(dict(self.font_emphasis)))

    def emphasis_for(self, font: str) -> Optional[Emphasis]:
        return self.font_emphasis.get(font)


@dataclass
class Document:
    """Complete page model for one PDF."""
    pages: list = field(default_factory=list)
    stats: GlobalStats = field(default_factory=GlobalStats)
    source_path: str = ""

    @classmethod
    def from_fragments(cls, pages: list, source_path: str = "") -> "Document":
        """Build a document from per-page fragment lists in page order."""
        return cls(
            pages=[Page(number=i, items=list(frags)) for i, frags in enumerate(pages)],
            source_path=source_path,
        )
