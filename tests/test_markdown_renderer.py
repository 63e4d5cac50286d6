import unittest

from markdown_renderer import (
    assemble_markdown, render_line, render_markdown, render_page, strip_wrapper,
)
from models import BlockType, Emphasis, Line, RenderedMarkdown
from tests.factories import frag, line, line_document


class TestRenderPage(unittest.TestCase):
    def test_paragraph_breaks_follow_vertical_gaps(self) -> None:
        lines = [
            line("Title", y=700.0, block_type=BlockType.H1),
            line("First line.", y=680.0),
            line("continues here.", y=666.0),
            line("New para.", y=630.0),
        ]
        self.assertEqual(render_page(lines, 14.0),
                         "# Title\n\nFirst line.\ncontinues here.\n\nNew para.\n")

    def test_heading_gets_blank_line_before(self) -> None:
        lines = [
            line("Intro text.", y=700.0),
            line("**Section**", y=686.0, block_type=BlockType.H2),
        ]
        self.assertEqual(render_page(lines, 14.0), "Intro text.\n\n## Section\n\n")

    def test_code_run_is_fenced(self) -> None:
        lines = [
            line("Example:", y=700.0),
            line("def foo():", y=686.0, block_type=BlockType.CODE),
            line("    return 1", y=672.0, block_type=BlockType.CODE),
            line("Done.", y=658.0),
        ]
        self.assertEqual(render_page(lines, 14.0),
                         "Example:\n```\n\tdef foo():\n\t    return 1\n```\n\nDone.\n")

    def test_open_fence_closed_at_page_end(self) -> None:
        lines = [line("x = 1", y=700.0, block_type=BlockType.CODE)]
        self.assertEqual(render_page(lines, 14.0), "```\n\tx = 1\n```\n\n")

    def test_bold_code_line_is_not_fenced(self) -> None:
        lines = [line("**Listing 1**", y=700.0, block_type=BlockType.CODE, emphasis=Emphasis.BOLD)]
        self.assertEqual(render_page(lines, 14.0), "**Listing 1**\n")

    def test_empty_page(self) -> None:
        self.assertEqual(render_page([], 14.0), "")


class TestRenderLine(unittest.TestCase):
    def test_heading_markup_is_stripped(self) -> None:
        heading = line("**_Deep_ Dive**", block_type=BlockType.H3)
        self.assertEqual(render_line(heading), "### Deep Dive\n\n")

    def test_list_item(self) -> None:
        self.assertEqual(render_line(line("First point", block_type=BlockType.LIST_ITEM)), "- First point\n")

    def test_toc_entries(self) -> None:
        numbered = Line.from_fragments([frag("1.2", x=90.0), frag("Scope  of  work", x=120.0)]).as_toc(1)
        self.assertEqual(render_line(numbered), "   1.2 Scope of work\n")

        plain = line("**Preface**").as_toc(0)
        self.assertEqual(render_line(plain), "- Preface\n")

    def test_paragraph_whitespace_is_collapsed(self) -> None:
        para = Line.from_fragments([frag("many    spaces", x=0.0), frag("here", x=100.0)])
        self.assertEqual(render_line(para), "many spaces here\n")

    def test_strip_wrapper_keeps_indent(self) -> None:
        self.assertEqual(strip_wrapper("    _note_"), "    note")
        self.assertEqual(strip_wrapper("**_both_**"), "both")
        self.assertEqual(strip_wrapper("*args"), "*args")
        self.assertEqual(strip_wrapper("a * b *"), "a * b *")


class TestRenderMarkdown(unittest.TestCase):
    def test_pages_collapse_to_rendered_markdown(self) -> None:
        document = line_document([[line("Hello.", y=700.0)], []])

        render_markdown(document)

        self.assertEqual(document.pages[0].items, [RenderedMarkdown("Hello.\n")])
        self.assertEqual(document.pages[0].markdown(), "Hello.\n")
        self.assertEqual(document.pages[1].markdown(), "")


class TestAssembleMarkdown(unittest.TestCase):
    def test_page_joins(self) -> None:
        self.assertEqual(assemble_markdown(["End.\n", "Next"]), "End.\n\nNext")
        self.assertEqual(assemble_markdown(["End.", "Next"]), "End.\n\nNext")
        self.assertEqual(assemble_markdown(["End.\n\n", "Next"]), "End.\n\nNext")
        self.assertEqual(assemble_markdown(["no end\n", "more"]), "no end\nmore")
        self.assertEqual(assemble_markdown(["no end", "more"]), "no end\nmore")
        self.assertEqual(assemble_markdown(["", "more"]), "\nmore")
        self.assertEqual(assemble_markdown(["“Quoted.”\n", "Next"]), "“Quoted.”\n\nNext")

    def test_empty_input(self) -> None:
        self.assertEqual(assemble_markdown([]), "")
        self.assertEqual(assemble_markdown(["only"]), "only")


if __name__ == "__main__":
    unittest.main()
