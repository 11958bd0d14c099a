"""PDF -> presentation conversion: rasterize each page and place it as a slide.

The job renders pages in order, one at a time, filling every surface with an
opaque background before the page goes on top, and stops at the next page
boundary once its cancellation token is set. A cancelled job produces no
presentation at all.
"""

from __future__ import annotations

import io
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from pptx import Presentation
from pptx.util import Emu, Inches

from pagekit.docs.handle import PdfHandle
from pagekit.docs.model import PageSize
from pagekit.errors import EncodingError, PageKitError, RenderError
from pagekit.image.processing import encode_jpeg, fill_background

from .raster import PageRasterizer

log = logging.getLogger(__name__)

SLIDE_WIDTH_INCHES = 10
BLANK_LAYOUT_INDEX = 6
JPEG_QUALITY = 95
DEFAULT_SCALE = 2.0


@dataclass(frozen=True)
class Progress:
    completed: int
    total: int

    @property
    def percent(self) -> int:
        return round(self.completed / self.total * 100) if self.total else 0


ProgressCallback = Callable[[Progress], None]


class CancellationToken:
    """Cooperative stop flag, safe to set from another thread."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def slide_dimensions(first_page: PageSize) -> Tuple[Emu, Emu]:
    """Slide size for the whole deck: 10 inches wide, height from page 1's aspect ratio."""
    height_inches = round(SLIDE_WIDTH_INCHES / first_page.aspect_ratio, 4)
    return Inches(SLIDE_WIDTH_INCHES), Emu(int(round(height_inches * 914400)))


def render_size(page: PageSize, scale: float) -> Tuple[int, int]:
    return max(1, int(round(page.width * scale))), max(1, int(round(page.height * scale)))


class ConversionJob:
    """One PDF -> PPTX conversion.

    Doxygen:
    - @param handle: Source PDF.
    - @param scale: Render scale relative to the page's intrinsic size in points.
    - @param token: Cancellation token polled once per page.
    """

    def __init__(self, handle: PdfHandle, scale: float = DEFAULT_SCALE, token: Optional[CancellationToken] = None) -> None:
        if scale <= 0:
            raise ValueError(f"Render scale must be positive, got {scale}")
        self.handle = handle
        self.scale = float(scale)
        self.token = token or CancellationToken()
        self.progress = Progress(0, handle.page_count())
        self.finished = False

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def cancel(self) -> None:
        self.token.cancel()

    def run(self, rasterizer: PageRasterizer, on_progress: Optional[ProgressCallback] = None) -> Optional[bytes]:
        """Convert every page; return PPTX bytes, or ``None`` if cancelled."""
        try:
            return self._run(rasterizer, on_progress)
        finally:
            self.finished = True

    def _run(self, rasterizer: PageRasterizer, on_progress: Optional[ProgressCallback]) -> Optional[bytes]:
        handle = self.handle
        total = self.progress.total
        slide_width, slide_height = slide_dimensions(handle.page_size(0))

        prs = Presentation()
        prs.slide_width = slide_width
        prs.slide_height = slide_height
        layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]

        for index in range(total):
            if self.token.cancelled:
                log.info("Conversion of %s cancelled after %d/%d page(s)", handle.name, self.progress.completed, total)
                return None

            width_px, height_px = render_size(handle.page_size(index), self.scale)
            try:
                pixels = rasterizer.render(handle, index, width_px, height_px)
            except PageKitError:
                raise
            except Exception as exc:
                raise RenderError(f"Failed to render page {index + 1} of {handle.name}.") from exc

            jpeg = encode_jpeg(fill_background(pixels), quality=JPEG_QUALITY)
            slide = prs.slides.add_slide(layout)
            slide.shapes.add_picture(io.BytesIO(jpeg), 0, 0, width=slide_width, height=slide_height)

            self.progress = Progress(index + 1, total)
            if on_progress is not None:
                on_progress(self.progress)

        if self.token.cancelled:
            log.info("Conversion of %s cancelled after the last page", handle.name)
            return None

        buffer = io.BytesIO()
        try:
            prs.save(buffer)
        except Exception as exc:
            raise EncodingError("Failed to write the presentation.") from exc
        log.info("Converted %s into %d slide(s)", handle.name, total)
        return buffer.getvalue()


def convert_to_presentation(
    handle: PdfHandle,
    rasterizer: PageRasterizer,
    scale: float = DEFAULT_SCALE,
    token: Optional[CancellationToken] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> Optional[bytes]:
    return ConversionJob(handle, scale=scale, token=token).run(rasterizer, on_progress)
