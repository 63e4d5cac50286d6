import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import pikepdf
from pdfminer.layout import LTAnno

from converter import convert_file
from pdf_extractor import extract_document, page_ranges, text_runs


def _fonts():
    return pikepdf.Dictionary(
        F1=pikepdf.Dictionary(Type=pikepdf.Name.Font, Subtype=pikepdf.Name.Type1,
                              BaseFont=pikepdf.Name.Helvetica),
        F2=pikepdf.Dictionary(Type=pikepdf.Name.Font, Subtype=pikepdf.Name.Type1,
                              BaseFont=pikepdf.Name("/Helvetica-Bold")),
    )


def _write_pdf(path, contents, xobjects=None):
    """Save a PDF with one page per content stream, using Helvetica as /F1 and /F2 bold."""
    pdf = pikepdf.Pdf.new()
    for data in contents:
        page = pdf.add_blank_page(page_size=(612, 792))
        resources = pikepdf.Dictionary(Font=_fonts())
        if xobjects:
            resources["/XObject"] = pikepdf.Dictionary({
                "/" + name: _form(pdf, body) for name, body in xobjects.items()
            })
        page.obj["/Resources"] = resources
        page.obj["/Contents"] = pdf.make_stream(data)
    pdf.save(str(path))
    pdf.close()


def _form(pdf, body):
    form = pdf.make_stream(body)
    form["/Type"] = pikepdf.Name.XObject
    form["/Subtype"] = pikepdf.Name.Form
    form["/BBox"] = pikepdf.Array([0, 0, 400, 50])
    form["/Resources"] = pikepdf.Dictionary(Font=_fonts())
    return form


def _texts(document):
    return [[f.text.strip() for f in page.fragments()] for page in document.pages]


class _Glyph:
    """Minimal stand-in for pdfminer's LTChar."""

    def __init__(self, text, x0, font="Body-Regular", size=11.0):
        self._text = text
        self.x0 = x0
        self.x1 = x0 + 5.0
        self.y1 = 710.0
        self.height = size
        self.fontname = font
        self.size = size

    def get_text(self):
        return self._text


def _glyphs(word, x0, **kwargs):
    return [_Glyph(ch, x0 + i * 5.0, **kwargs) for i, ch in enumerate(word)]


class TestPageRanges(unittest.TestCase):
    def test_no_pages(self) -> None:
        self.assertEqual(page_ranges(0, 4), [])

    def test_fewer_pages_than_workers(self) -> None:
        self.assertEqual(page_ranges(3, 8), [(0, 1), (1, 2), (2, 3)])

    def test_uneven_split_covers_every_page(self) -> None:
        self.assertEqual(page_ranges(10, 4), [(0, 3), (3, 6), (6, 9), (9, 10)])
        self.assertEqual(page_ranges(5, 1), [(0, 5)])


class TestTextRuns(unittest.TestCase):
    def test_layout_spaces_stay_inside_the_run(self) -> None:
        chars = _glyphs("quick", 72.0) + [LTAnno(" ")] + _glyphs("brown", 105.0) + [LTAnno("\n")]

        runs = text_runs(chars)

        self.assertEqual([r.text for r in runs], ["quick brown"])
        self.assertEqual(runs[0].x, 72.0)
        self.assertEqual(runs[0].width, 58.0)

    def test_run_ends_at_font_or_size_change(self) -> None:
        chars = (_glyphs("plain", 72.0) + [_Glyph(" ", 97.0)]
                 + _glyphs("bold", 102.0, font="Body-Bold")
                 + _glyphs("big", 130.0, font="Body-Bold", size=14.0))

        runs = text_runs(chars)

        self.assertEqual([(r.text, r.font, r.font_size) for r in runs],
                         [("plain ", "Body-Regular", 11.0),
                          ("bold", "Body-Bold", 11.0),
                          ("big", "Body-Bold", 14.0)])

    def test_leading_and_blank_input(self) -> None:
        self.assertEqual([r.text for r in text_runs([LTAnno(" ")] + _glyphs("word", 0.0))], ["word"])
        self.assertEqual(text_runs([LTAnno(" "), _Glyph(" ", 0.0)]), [])


class TestExtractDocument(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_words_keep_their_spaces(self) -> None:
        path = self.root / "sentence.pdf"
        _write_pdf(path, [b"BT /F1 11 Tf 72 700 Td (The quick brown fox jumps over the lazy dog.) Tj ET"])

        document = extract_document(str(path), workers=1)

        self.assertEqual(_texts(document), [["The quick brown fox jumps over the lazy dog."]])
        fragment = document.pages[0].fragments()[0]
        self.assertEqual(fragment.font, "Helvetica")
        self.assertAlmostEqual(fragment.font_size, 11.0, places=3)
        self.assertAlmostEqual(fragment.x, 72.0, places=1)

    def test_font_change_splits_runs(self) -> None:
        path = self.root / "mixed.pdf"
        _write_pdf(path, [b"BT /F1 11 Tf 72 700 Td (Plain words ) Tj /F2 11 Tf (bold words) Tj ET"])

        fragments = extract_document(str(path), workers=1).pages[0].fragments()

        self.assertEqual([(f.text.strip(), f.font) for f in fragments],
                         [("Plain words", "Helvetica"), ("bold words", "Helvetica-Bold")])
        self.assertLess(fragments[0].x, fragments[1].x)

    def test_figure_text_is_extracted(self) -> None:
        path = self.root / "figure.pdf"
        _write_pdf(
            path,
            [b"BT /F1 11 Tf 72 700 Td (Body text above.) Tj ET q 1 0 0 1 72 500 cm /Fm1 Do Q"],
            xobjects={"Fm1": b"BT /F1 11 Tf 0 10 Td (Figure caption text) Tj ET"},
        )

        texts = _texts(extract_document(str(path), workers=1))[0]

        self.assertIn("Body text above.", texts)
        self.assertIn("Figure caption text", texts)

    def test_parallel_extraction_keeps_page_order(self) -> None:
        path = self.root / "pages.pdf"
        _write_pdf(path, [
            b"BT /F1 11 Tf 72 700 Td (First page text.) Tj ET",
            b"BT /F1 11 Tf 72 700 Td (Second page text.) Tj ET",
            b"BT /F1 11 Tf 72 700 Td (Third page text.) Tj ET",
        ])

        document = extract_document(str(path), workers=2)

        self.assertEqual([page.number for page in document.pages], [0, 1, 2])
        self.assertEqual(_texts(document),
                         [["First page text."], ["Second page text."], ["Third page text."]])

    def test_failed_precheck_extracts_all_pages(self) -> None:
        path = self.root / "pages.pdf"
        _write_pdf(path, [
            b"BT /F1 11 Tf 72 700 Td (Alpha.) Tj ET",
            b"BT /F1 11 Tf 72 700 Td (Beta.) Tj ET",
        ])

        with patch("pdf_extractor._page_count", return_value=None):
            document = extract_document(str(path), workers=4)

        self.assertEqual(_texts(document), [["Alpha."], ["Beta."]])

    def test_encrypted_pdf_raises(self) -> None:
        path = self.root / "locked.pdf"
        pdf = pikepdf.Pdf.new()
        pdf.add_blank_page()
        pdf.save(str(path), encryption=pikepdf.Encryption(owner="owner", user="secret"))
        pdf.close()

        with self.assertRaises(pikepdf.PasswordError):
            extract_document(str(path))

    def test_convert_file_keeps_word_spacing(self) -> None:
        path = self.root / "sentence.pdf"
        _write_pdf(path, [b"BT /F1 11 Tf 72 700 Td (The quick brown fox jumps over the lazy dog.) Tj ET"])

        markdown = convert_file(str(path), workers=1)

        self.assertEqual(markdown.strip(), "The quick brown fox jumps over the lazy dog.")


if __name__ == "__main__":
    unittest.main()
