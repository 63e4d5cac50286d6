"""
main.py - PDF to Markdown command-line converter.

Usage:
    python main.py book.pdf                     # Writes book.md next to the PDF
    python main.py book.pdf -n notes            # Writes notes.md
    python main.py papers/ -o markdown/         # Converts every PDF under papers/
    python main.py book.pdf --stdout            # Prints the Markdown instead
    python main.py papers/ -v --log-file run.log
"""
import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from converter import convert_file
import config


@dataclass
class ConversionResult:
    input_path: str
    output_path: str = ""
    success: bool = False
    error: str = ""
    duration_seconds: float = 0.0


def collect_pdf_files(input_path: Path) -> list:
    """Return the PDF to convert, or every PDF under a directory, sorted."""
    if input_path.is_file():
        return [input_path] if input_path.suffix.lower() == ".pdf" else []
    return sorted(
        p for p in input_path.rglob("*")
        if p.is_file() and p.suffix.lower() == ".pdf"
    )


def output_path_for(pdf_file: Path, output_dir=None, name=None) -> Path:
    out_dir = Path(output_dir) if output_dir else pdf_file.parent
    return out_dir / f"{name or pdf_file.stem}.md"


def process_single_pdf(pdf_file: Path, args, total_files: int, status) -> ConversionResult:
    """Convert one PDF and write or print its Markdown."""
    result = ConversionResult(input_path=str(pdf_file))
    start_time = time.time()

    try:
        markdown = convert_file(str(pdf_file), workers=args.workers)

        if args.stdout:
            if total_files > 1:
                print(f"\n<!-- FILE: {pdf_file} -->\n")
            print(markdown)
        else:
            output_path = output_path_for(pdf_file, args.output_dir, args.name)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(markdown, encoding="utf-8")
            result.output_path = str(output_path)
            print(f"        Created: {output_path}", file=status)

        result.success = True

    except Exception as e:
        result.error = f"{type(e).__name__}: {e}"
        print(f"        ERROR: {result.error}", file=status)

    result.duration_seconds = time.time() - start_time
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pdf-to-md",
        description="Converts PDF files to Markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pdf-to-md book.pdf                      # book.md next to the PDF
  pdf-to-md papers/ --output-dir md/      # every PDF under papers/
  pdf-to-md book.pdf --stdout             # print instead of writing
        """,
    )
    parser.add_argument("input", metavar="INPUT",
                        help="PDF file or directory containing PDF files")
    parser.add_argument("--output-dir", "-o", metavar="DIR",
                        help="Output directory (default: next to each input file)")
    parser.add_argument("--name", "-n", metavar="NAME",
                        help="Output file name without extension (single file input only)")
    parser.add_argument("--stdout", "-s", action="store_true",
                        help="Print Markdown to stdout instead of writing files")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable verbose/debug logging")
    parser.add_argument("--log-file", metavar="PATH",
                        help="Write log messages to this file instead of stderr")
    parser.add_argument("--workers", "-j", type=int, default=config.DEFAULT_WORKERS,
                        help="Worker processes for page extraction (default: CPU count)")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s [%(name)s] %(message)s",
        filename=args.log_file,
    )

    input_path = Path(args.input)
    if args.name and input_path.is_dir():
        parser.error("--name can only be used when INPUT is a single file, not a directory")
    if args.name and args.stdout:
        parser.error("--name and --stdout cannot be used together")
    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    # Progress goes to stderr when stdout carries the Markdown.
    status = sys.stderr if args.stdout else sys.stdout

    if not input_path.exists():
        print(f"Error: {input_path} does not exist", file=sys.stderr)
        sys.exit(1)

    pdf_files = collect_pdf_files(input_path)
    if not pdf_files:
        print(f"No PDF files found in '{input_path}'", file=status)
        sys.exit(0)

    results = []
    for idx, pdf_file in enumerate(pdf_files, 1):
        print(f"[{idx}/{len(pdf_files)}] Converting: {pdf_file.name}", file=status)
        results.append(process_single_pdf(pdf_file, args, len(pdf_files), status))

    _print_summary(results, status)

    if any(not r.success for r in results):
        sys.exit(1)


def _print_summary(results: list, out):
    """Print a summary table of all results."""
    print("=" * 60, file=out)
    print("SUMMARY", file=out)
    print("=" * 60, file=out)

    success_count = sum(1 for r in results if r.success)
    for r in results:
        status = "OK" if r.success else "ERROR"
        name = Path(r.input_path).name
        print(f"  [{status:5s}] {name:40s} ({r.duration_seconds:.1f}s)", file=out)
        if r.error:
            print(f"          Error: {r.error}", file=out)

    print(file=out)
    print(f"Total: {len(results)} | "
          f"Converted: {success_count} | "
          f"Failed: {len(results) - success_count}", file=out)


if __name__ == "__main__":
    main()
