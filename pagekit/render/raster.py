"""Page rasterization backends.

The conversion pipeline only needs "give me page N as pixels at this size";
:class:`PopplerRasterizer` does that with pdf2image, one page per call so
the caller can stop between pages.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np
from pdf2image import convert_from_bytes
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)

from pagekit.config import configure_dependencies
from pagekit.docs.handle import PdfHandle
from pagekit.errors import RenderError

log = logging.getLogger(__name__)


class PageRasterizer(Protocol):
    def render(self, handle: PdfHandle, page_index: int, width: int, height: int) -> np.ndarray:
        """Return page ``page_index`` as an H x W x 3|4 uint8 RGB(A) array."""
        ...


class PopplerRasterizer:
    """Render PDF pages through Poppler using pdf2image."""

    def __init__(self, poppler_path: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.poppler_path = poppler_path if poppler_path is not None else configure_dependencies()
        self.timeout = timeout

    def render(self, handle: PdfHandle, page_index: int, width: int, height: int) -> np.ndarray:
        page_number = page_index + 1
        try:
            images = convert_from_bytes(
                handle.data,
                first_page=page_number,
                last_page=page_number,
                size=(width, height),
                fmt="png",
                transparent=True,
                poppler_path=self.poppler_path,
                timeout=self.timeout,
            )
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, PDFPopplerTimeoutError, OSError) as exc:
            raise RenderError(f"Failed to render page {page_number} of {handle.name}.") from exc

        if not images:
            raise RenderError(f"Poppler returned no image for page {page_number} of {handle.name}.")
        img = images[0]
        mode = "RGBA" if "A" in img.getbands() else "RGB"
        return np.asarray(img.convert(mode))
