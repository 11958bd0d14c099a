"""Assembly engine: copy a page-reference sequence into a fresh PDF container.

Merge, reorder, remove and split all reduce to "produce a sequence, then
assemble it". Output page order is the sequence order, and PDF pages are
copied as PDF objects (never re-rendered), so geometry and content survive
unchanged. Images take a separate path that places each bitmap on a page of
a size chosen once per job.
"""

from __future__ import annotations

import enum
import logging
from typing import Iterable, List, Sequence, Tuple

import fitz  # pymupdf

from pagekit.errors import AssemblyError, PageIndexError
from pagekit.image.processing import EmbeddableImage, fit_rect, prepare_image

from .handle import DocumentHandle, HandleRegistry, ImageHandle, PdfHandle
from .model import PageReference, PageSize

log = logging.getLogger(__name__)


class PageSizePolicy(enum.Enum):
    A4 = "a4"
    LETTER = "letter"
    MATCH_FIRST = "match"

    @property
    def label(self) -> str:
        return {"a4": "A4", "letter": "Letter", "match": "Match first image"}[self.value]


PAGE_SIZES = {
    PageSizePolicy.A4: PageSize(595.28, 841.89),
    PageSizePolicy.LETTER: PageSize(612.0, 792.0),
}


def _resolve(registry: HandleRegistry, ref: PageReference) -> DocumentHandle:
    handle = registry.get(ref.handle_id)
    if not 0 <= ref.page_index < handle.page_count():
        raise PageIndexError(
            f"Page reference {ref} is beyond '{handle.name}' ({handle.page_count()} pages)"
        )
    return handle


def _runs(references: Sequence[PageReference]) -> List[Tuple[str, int, int]]:
    """Group consecutive ascending pages of one source into (handle_id, first, last) runs."""
    runs: List[Tuple[str, int, int]] = []
    for ref in references:
        if runs:
            handle_id, first, last = runs[-1]
            if handle_id == ref.handle_id and ref.page_index == last + 1:
                runs[-1] = (handle_id, first, ref.page_index)
                continue
        runs.append((ref.handle_id, ref.page_index, ref.page_index))
    return runs


def assemble(references: Iterable[PageReference], registry: HandleRegistry) -> fitz.Document:
    """Copy every referenced page, in order, into a new PDF document.

    Doxygen:
    - @param references: Page references in output order (take a snapshot first).
    - @param registry: Arena resolving handle ids to open handles.
    - @return: New in-memory PyMuPDF document; the caller owns and closes it.
    - @throws AssemblyError: Empty sequence, non-PDF source, or a failed page copy.
    - @throws PageIndexError: A reference points past the end of its source.
    - @throws KeyError: A reference names a handle that is not registered.
    """
    refs = list(references)
    if not refs:
        raise AssemblyError("There are no pages to assemble.")

    sources = {}
    for ref in refs:
        handle = _resolve(registry, ref)
        if not isinstance(handle, PdfHandle):
            raise AssemblyError(f"'{handle.name}' is not a PDF and cannot be copied page by page.")
        sources[ref.handle_id] = handle

    out = fitz.open()
    try:
        for handle_id, first, last in _runs(refs):
            out.insert_pdf(sources[handle_id].document, from_page=first, to_page=last)
    except Exception as exc:
        out.close()
        raise AssemblyError("Failed to copy pages into the new PDF.") from exc

    if out.page_count != len(refs):
        count = out.page_count
        out.close()
        raise AssemblyError(f"Expected {len(refs)} pages after assembly, got {count}.")
    log.info("Assembled %d page(s) from %d source(s)", len(refs), len(sources))
    return out


def page_size_for_job(policy: PageSizePolicy, images: Sequence[EmbeddableImage]) -> PageSize:
    """Decide the page size once for the whole images-to-PDF job."""
    if policy is PageSizePolicy.MATCH_FIRST:
        if not images:
            raise AssemblyError("Add at least one image.")
        return images[0].size
    return PAGE_SIZES[policy]


def place_image(doc: fitz.Document, image: EmbeddableImage, page_size: PageSize) -> None:
    """Append a page of ``page_size`` holding ``image`` scaled to fit and centered."""
    rect = fit_rect(image.size, page_size)
    page = doc.new_page(width=page_size.width, height=page_size.height)
    page.insert_image(
        fitz.Rect(rect.x, rect.y, rect.x1, rect.y1),
        stream=image.data,
        keep_proportion=False,
    )


def images_to_pdf(
    references: Iterable[PageReference],
    registry: HandleRegistry,
    policy: PageSizePolicy = PageSizePolicy.A4,
) -> fitz.Document:
    """Build a PDF with one page per referenced image.

    Doxygen:
    - @param references: Image page references in output order.
    - @param registry: Arena resolving handle ids to ImageHandles.
    - @param policy: A4, Letter, or match-first-image page size for every page.
    - @return: New in-memory PyMuPDF document.
    - @throws AssemblyError: No images, a non-image source, or a failed embed.
    """
    refs = list(references)
    if not refs:
        raise AssemblyError("Add at least one image.")

    handles: List[ImageHandle] = []
    for ref in refs:
        handle = _resolve(registry, ref)
        if not isinstance(handle, ImageHandle):
            raise AssemblyError(f"'{handle.name}' is not an image.")
        handles.append(handle)

    images = [prepare_image(h.data, h.mime_type) for h in handles]
    page_size = page_size_for_job(policy, images)

    out = fitz.open()
    try:
        for handle, image in zip(handles, images):
            log.debug("Placing %s (%dx%d) on %.2fx%.2f page", handle.name, image.width, image.height,
                      page_size.width, page_size.height)
            place_image(out, image, page_size)
    except Exception as exc:
        out.close()
        raise AssemblyError("Failed to create PDF. Check that all files are valid images.") from exc
    log.info("Placed %d image(s) using %s page size", len(images), policy.label)
    return out
