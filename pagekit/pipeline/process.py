"""High-level tools: the jobs behind merge, reorder, split, images, PPTX and Markdown.

Each ``*_job`` factory returns a callable for :meth:`Workflow.run`; the
``run_*`` helpers wire a fresh workflow, load the inputs and run the job in
one call, which is what the CLI uses.
"""

from __future__ import annotations

import logging
import os
import shutil
from typing import List, Optional, Sequence

from pagekit.docs.assembly import PageSizePolicy, assemble, images_to_pdf
from pagekit.docs.buffer import ArtifactHandle, BufferManager
from pagekit.docs.export import (
    archive_name,
    base_name,
    build_archive,
    split_by_ranges,
    split_every_page,
    suffixed_name,
    to_artifact,
)
from pagekit.docs.handle import HandleRegistry, PdfHandle
from pagekit.docs.model import PPTX_MIME, OutputArtifact
from pagekit.docs.sequence import parse_page_ranges
from pagekit.errors import ValidationError
from pagekit.ingest import limits
from pagekit.ingest.validator import SourceFile, validate_markdown_text
from pagekit.markdown.converter import markdown_to_full_document
from pagekit.markdown.printing import PrintRequest, PrintService
from pagekit.render.raster import PageRasterizer
from pagekit.render.slides import (
    DEFAULT_SCALE,
    CancellationToken,
    ConversionJob,
    Progress,
    ProgressCallback,
)

from .workflow import Job, Snapshot, Workflow

log = logging.getLogger(__name__)

MERGED_FILENAME = "merged.pdf"
IMAGES_FILENAME = "images-to-pdf.pdf"


def print_progress_bar(progress: Progress, width: int = 10) -> None:
    """Render a colored one-line progress bar (``width`` fixed segments).

    Doxygen:
    - @param progress: Pages completed and total pages.
    - @param width: Number of bar segments (default 10).
    """
    total = max(1, progress.total)
    done = max(0, min(progress.completed, total))
    segments = max(1, int(width))
    filled = segments if done >= total else int(done / total * segments)
    pending = max(0, segments - filled)
    GREEN = "\x1b[32m"
    RED = "\x1b[31m"
    RESET = "\x1b[0m"
    bar = f"{GREEN}{'█'*filled}{RESET}{RED}{'█'*pending}{RESET} [{progress.completed}/{progress.total}]"
    print(f"\r{bar}", end="", flush=True)


def _single_pdf(snapshot: Snapshot, registry: HandleRegistry) -> PdfHandle:
    if not snapshot:
        raise ValidationError("Add a PDF first.")
    handle = registry.get(snapshot[0].handle_id)
    if not isinstance(handle, PdfHandle):
        raise ValidationError(f"'{handle.name}' is not a PDF.")
    return handle


# ----------------------------------------------------------------------
# Job factories
# ----------------------------------------------------------------------

def merge_job(filename: str = MERGED_FILENAME) -> Job:
    def job(snapshot: Snapshot, registry: HandleRegistry) -> List[OutputArtifact]:
        if len({ref.handle_id for ref in snapshot}) < 2:
            raise ValidationError("Add at least two PDFs to merge.")
        return [to_artifact(assemble(snapshot, registry), filename)]

    return job


def reorder_job() -> Job:
    def job(snapshot: Snapshot, registry: HandleRegistry) -> List[OutputArtifact]:
        if not snapshot:
            raise ValidationError("Keep at least one page.")
        source = registry.get(snapshot[0].handle_id)
        return [to_artifact(assemble(snapshot, registry), suffixed_name(source.name, "-reordered"))]

    return job


def split_job(mode: str = "every", ranges: Optional[str] = None, archive: bool = False) -> Job:
    """Split the loaded PDF into every page, or extract ``ranges`` into one PDF."""
    if mode not in ("every", "range"):
        raise ValueError(f"Unknown split mode: {mode}")

    def job(snapshot: Snapshot, registry: HandleRegistry) -> List[OutputArtifact]:
        handle = _single_pdf(snapshot, registry)
        if mode == "range":
            return [split_by_ranges(handle, ranges or "", registry)]
        artifacts = split_every_page(handle, registry)
        if archive:
            artifacts.append(build_archive(artifacts, archive_name(handle.name)))
        return artifacts

    return job


def images_job(policy: PageSizePolicy = PageSizePolicy.A4, filename: str = IMAGES_FILENAME) -> Job:
    def job(snapshot: Snapshot, registry: HandleRegistry) -> List[OutputArtifact]:
        return [to_artifact(images_to_pdf(snapshot, registry, policy), filename)]

    return job


class PresentationJob:
    """PDF -> PPTX job with a cancellation token and readable progress."""

    def __init__(
        self,
        rasterizer: PageRasterizer,
        scale: float = DEFAULT_SCALE,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.rasterizer = rasterizer
        self.scale = scale
        self.on_progress = on_progress
        self.token = CancellationToken()
        self.conversion: Optional[ConversionJob] = None

    @property
    def progress(self) -> Progress:
        if self.conversion is None:
            return Progress(0, 0)
        return self.conversion.progress

    def cancel(self) -> None:
        self.token.cancel()

    def __call__(self, snapshot: Snapshot, registry: HandleRegistry) -> Optional[List[OutputArtifact]]:
        handle = _single_pdf(snapshot, registry)
        # each run gets its own token; cancel() stops the current run only
        self.token = CancellationToken()
        self.conversion = ConversionJob(handle, scale=self.scale, token=self.token)
        data = self.conversion.run(self.rasterizer, self.on_progress)
        if data is None:
            return None
        filename = f"{base_name(handle.name)}.pptx"
        return [OutputArtifact(data=data, mime_type=PPTX_MIME, filename=filename)]


def markdown_to_print(text: str, service: PrintService, filename: Optional[str] = None) -> PrintRequest:
    """Validate Markdown, build the print document and hand it to ``service``."""
    trimmed = validate_markdown_text(text)
    stem = os.path.splitext(os.path.basename(filename))[0] if filename else "document"
    html = markdown_to_full_document(trimmed, title=stem)
    document = OutputArtifact(data=html.encode("utf-8"), mime_type=None, filename=f"{stem}.html")
    request = PrintRequest(document)
    service.render(request)
    return request


# ----------------------------------------------------------------------
# One-shot helpers
# ----------------------------------------------------------------------

def save_artifacts(handles: Sequence[ArtifactHandle], out_dir: str) -> List[str]:
    """Copy live artifact files to ``out_dir`` under their suggested filenames."""
    os.makedirs(out_dir, exist_ok=True)
    paths: List[str] = []
    for handle in handles:
        dest = os.path.join(out_dir, handle.filename)
        shutil.copyfile(handle.path, dest)
        paths.append(dest)
    return paths


def run_merge(paths: Sequence[str], buffer: BufferManager) -> Workflow:
    wf = Workflow(buffer, "merge")
    wf.load([SourceFile.from_path(p) for p in paths], limits.PDF_MULTIPLE)
    wf.run(merge_job())
    return wf


def run_reorder(path: str, order: str, buffer: BufferManager) -> Workflow:
    """Rebuild ``path`` with its pages in ``order``, e.g. ``"3, 1-2"``; omitted pages are dropped."""
    wf = Workflow(buffer, "reorder")
    (handle,) = wf.load([SourceFile.from_path(path)], limits.PDF_SINGLE)
    pages = parse_page_ranges(order, handle.page_count())
    wf.sequence.clear()
    wf.sequence.append(handle, [n - 1 for n in pages])
    wf.run(reorder_job())
    return wf


def run_split(path: str, buffer: BufferManager, ranges: Optional[str] = None, archive: bool = False) -> Workflow:
    wf = Workflow(buffer, "split")
    wf.load([SourceFile.from_path(path)], limits.PDF_SINGLE)
    mode = "range" if ranges else "every"
    wf.run(split_job(mode, ranges=ranges, archive=archive))
    return wf


def run_images(paths: Sequence[str], buffer: BufferManager, policy: PageSizePolicy = PageSizePolicy.A4) -> Workflow:
    wf = Workflow(buffer, "images")
    wf.load([SourceFile.from_path(p) for p in paths], limits.IMAGES)
    wf.run(images_job(policy))
    return wf


def run_presentation(path: str, buffer: BufferManager, job: PresentationJob) -> Workflow:
    wf = Workflow(buffer, "pdf-to-pptx")
    wf.load([SourceFile.from_path(path)], limits.PDF_SINGLE)
    wf.run(job)
    return wf
