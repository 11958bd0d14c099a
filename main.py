"""
Entry point and compatibility facade for the pagekit document tools.

This module exposes a stable API and a CLI suitable for PyInstaller builds.

Packages:
- pagekit.ingest: Upload validation and per-tool limits
- pagekit.docs: Document handles, page sequences, assembly and export
- pagekit.image: Image decoding, background fill and fit geometry
- pagekit.render: Page rasterization and PDF -> PPTX conversion
- pagekit.markdown: Markdown -> HTML and the print-engine boundary
- pagekit.pipeline: Workflow state machine and high-level tools
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from pagekit.config import configure_dependencies
from pagekit.docs.assembly import PageSizePolicy
from pagekit.docs.buffer import ArtifactHandle, BufferManager
from pagekit.errors import PageKitError
from pagekit.ingest.validator import SourceFile, validate_batch, validate_markdown_text
from pagekit.ingest import limits
from pagekit.markdown.converter import markdown_to_full_document
from pagekit.markdown.printing import BrowserPrintService
from pagekit.pipeline.process import (
    PresentationJob,
    markdown_to_print,
    print_progress_bar,
    run_images,
    run_merge,
    run_presentation,
    run_reorder,
    run_split,
    save_artifacts,
)
from pagekit.render.raster import PopplerRasterizer

__all__ = [
    "run_merge",
    "run_reorder",
    "run_split",
    "run_images",
    "run_presentation",
    "markdown_to_print",
    "PresentationJob",
    "save_artifacts",
]

SCALE_CHOICES = (1.0, 1.5, 2.0, 3.0)


def _report(handles: List[ArtifactHandle], out_dir: str) -> None:
    if not handles:
        print("Nothing was produced.")
        return
    for path in save_artifacts(handles, out_dir):
        print(f"Saved: {path}")


def _markdown(args, buffer: BufferManager) -> None:
    (source,) = validate_batch([SourceFile.from_path(args.file)], limits.MARKDOWN)
    text = source.data.decode("utf-8", errors="replace")
    if args.html_only:
        stem = os.path.splitext(os.path.basename(args.file))[0]
        os.makedirs(args.out_dir, exist_ok=True)
        out_path = os.path.join(args.out_dir, f"{stem}.html")
        with open(out_path, "w", encoding="utf-8") as f:
            f.write(markdown_to_full_document(validate_markdown_text(text), title=stem))
        print(f"Saved: {out_path}")
        return

    # the browser reads the file after this process exits
    buffer.debug = True
    service = BrowserPrintService(buffer)
    request = markdown_to_print(text, service, filename=args.file)
    if request.error is not None:
        print(str(request.error))
        raise SystemExit(1)
    request.complete()
    print(f"Opened for printing: {service.last_path}")


def _cli(argv: Optional[List[str]] = None) -> None:
    """CLI for the document tools.

    Subcommands:
    merge FILE FILE...: Combine PDFs in the given order (merged.pdf)
    reorder FILE --order "3,1-2": Rebuild a PDF with pages in the given order; omitted pages are dropped
    split FILE [--ranges "1-3,5"] [--zip]: One PDF per page, or one PDF with the selected pages
    images FILE...: One PDF page per image (--page-size a4|letter|match, default: a4)
    pptx FILE [--scale 1|1.5|2|3]: One full-bleed slide per PDF page (default scale: 2)
    markdown FILE [--html-only]: Render Markdown and open it for printing to PDF

    Common options:
    --out-dir / -o: Directory for produced files (default: current directory)
    --debug-buffer: Keep the session buffer on disk
    --verbose / -v: Log progress to stderr
    """
    import argparse

    parser = argparse.ArgumentParser(description="Merge, split, reorder and convert PDFs, images and Markdown locally.")
    parser.add_argument("--out-dir", "-o", type=str, default=".", help="Directory for produced files (default: current directory)")
    parser.add_argument("--debug-buffer", action="store_true", help="Keep the session buffer directory on disk")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("merge", help="Combine several PDFs into one")
    p.add_argument("files", nargs="+", help="PDF files in output order")

    p = sub.add_parser("reorder", help="Reorder or drop pages of a PDF")
    p.add_argument("file", help="PDF file")
    p.add_argument("--order", required=True, help='New page order, e.g. "3, 1-2"')

    p = sub.add_parser("split", help="Split a PDF into pages or extract ranges")
    p.add_argument("file", help="PDF file")
    p.add_argument("--ranges", type=str, default=None, help='Pages to extract into one PDF, e.g. "1-3, 5"')
    p.add_argument("--zip", action="store_true", help="Also package every page into a ZIP archive")

    p = sub.add_parser("images", help="Turn images into a PDF, one page each")
    p.add_argument("files", nargs="+", help="JPEG, PNG or WebP images in output order")
    p.add_argument("--page-size", type=str, default="a4", choices=[pol.value for pol in PageSizePolicy], help="Page size (default: a4)")

    p = sub.add_parser("pptx", help="Convert a PDF to a PowerPoint deck")
    p.add_argument("file", help="PDF file")
    p.add_argument("--scale", type=float, default=2.0, choices=SCALE_CHOICES, help="Render quality (default: 2)")
    p.add_argument("--timeout", type=int, default=0, help="Per-page Poppler timeout in seconds (<=0 means no timeout)")

    p = sub.add_parser("markdown", help="Render Markdown and print it to PDF")
    p.add_argument("file", help="Markdown file (.md)")
    p.add_argument("--html-only", action="store_true", help="Only write the HTML document to --out-dir")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    buffer = BufferManager(debug=bool(args.debug_buffer))
    wf = None
    try:
        if args.command == "merge":
            wf = run_merge(args.files, buffer)
        elif args.command == "reorder":
            wf = run_reorder(args.file, args.order, buffer)
        elif args.command == "split":
            if args.zip and args.ranges:
                print("--zip only applies when splitting every page.")
                raise SystemExit(2)
            wf = run_split(args.file, buffer, ranges=args.ranges, archive=args.zip)
        elif args.command == "images":
            wf = run_images(args.files, buffer, PageSizePolicy(args.page_size))
        elif args.command == "pptx":
            timeout_value = args.timeout if args.timeout and args.timeout > 0 else None
            rasterizer = PopplerRasterizer(poppler_path=configure_dependencies(), timeout=timeout_value)
            job = PresentationJob(rasterizer, scale=args.scale, on_progress=print_progress_bar)
            try:
                wf = run_presentation(args.file, buffer, job)
            except KeyboardInterrupt:
                print("\nConversion cancelled.")
                raise SystemExit(130)
            print()
        elif args.command == "markdown":
            _markdown(args, buffer)
            return

        _report(wf.artifacts, args.out_dir)
    except (PageKitError, IndexError, OSError) as e:
        print(str(e))
        raise SystemExit(1)
    finally:
        if wf is not None:
            wf.close()
        buffer.cleanup()


if __name__ == "__main__":
    _cli()
