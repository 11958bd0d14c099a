"""Read-only document handles and the per-session arena that owns them.

A handle is opened once from validated bytes and never mutated: every edit
produces a new document through :mod:`pagekit.docs.assembly`. Page
references only carry a ``handle_id``; the :class:`HandleRegistry` resolves
that id back to the shared handle.
"""

from __future__ import annotations

import logging
import uuid
from typing import Dict, Iterator, List, Optional

import fitz  # pymupdf

from pagekit.errors import PdfParseError
from pagekit.image.processing import decode_image
from pagekit.ingest.validator import SourceFile

from .model import PDF_MIME, PageSize

log = logging.getLogger(__name__)


def _new_handle_id() -> str:
    return uuid.uuid4().hex[:12]


class DocumentHandle:
    """Common interface of opened documents."""

    kind = ""

    def __init__(self, name: str, data: bytes, handle_id: Optional[str] = None) -> None:
        self.name = name
        self.data = data
        self.handle_id = handle_id or _new_handle_id()

    def page_count(self) -> int:
        raise NotImplementedError

    def page_size(self, index: int) -> PageSize:
        raise NotImplementedError

    def page_indices(self) -> List[int]:
        return list(range(self.page_count()))

    def close(self) -> None:
        pass

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.page_count():
            raise IndexError(f"Page index {index} out of range for '{self.name}' ({self.page_count()} pages)")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.handle_id!r}, name={self.name!r})"


class PdfHandle(DocumentHandle):
    """PDF opened with PyMuPDF; page geometry is read lazily and cached."""

    kind = "pdf"

    def __init__(self, name: str, data: bytes, handle_id: Optional[str] = None) -> None:
        super().__init__(name, data, handle_id)
        try:
            self.document = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            raise PdfParseError("This file doesn't appear to be a valid PDF.") from exc

        if self.document.needs_pass:
            self.document.close()
            raise PdfParseError("This PDF is password protected.")
        if self.document.page_count == 0:
            self.document.close()
            raise PdfParseError("This PDF has no pages.")
        self._sizes: Dict[int, PageSize] = {}

    def page_count(self) -> int:
        return self.document.page_count

    def page_size(self, index: int) -> PageSize:
        self._check_index(index)
        size = self._sizes.get(index)
        if size is None:
            # page.rect already reflects /Rotate
            rect = self.document.load_page(index).rect
            size = PageSize(float(rect.width), float(rect.height))
            self._sizes[index] = size
        return size

    def close(self) -> None:
        if not self.document.is_closed:
            self.document.close()


class ImageHandle(DocumentHandle):
    """A decoded raster image treated as a single page sized in pixels."""

    kind = "image"

    def __init__(self, name: str, data: bytes, mime_type: str = "", handle_id: Optional[str] = None) -> None:
        super().__init__(name, data, handle_id)
        self.mime_type = mime_type
        pixels = decode_image(data)
        self.height, self.width = int(pixels.shape[0]), int(pixels.shape[1])

    def page_count(self) -> int:
        return 1

    def page_size(self, index: int) -> PageSize:
        self._check_index(index)
        return PageSize(float(self.width), float(self.height))


def open_pdf(data: bytes, name: str = "document.pdf") -> PdfHandle:
    return PdfHandle(name, data)


def open_image(data: bytes, name: str = "image", mime_type: str = "") -> ImageHandle:
    return ImageHandle(name, data, mime_type=mime_type)


def is_pdf_source(source: SourceFile) -> bool:
    return (
        source.mime_type == PDF_MIME
        or source.extension == ".pdf"
        or source.data[:5] == b"%PDF-"
    )


def open_document(source: SourceFile) -> DocumentHandle:
    """Open a validated source file as a PDF or an image handle.

    Doxygen:
    - @param source: Accepted source file.
    - @return: PdfHandle or ImageHandle.
    - @throws PdfParseError: Structurally invalid, encrypted or empty PDF.
    - @throws ImageDecodeError: Bytes could not be decoded as an image.
    """
    if is_pdf_source(source):
        handle: DocumentHandle = open_pdf(source.data, source.name)
    else:
        handle = open_image(source.data, source.name, source.mime_type)
    log.debug("Opened %r with %d page(s)", handle, handle.page_count())
    return handle


class HandleRegistry:
    """Arena of open handles keyed by ``handle_id``."""

    def __init__(self) -> None:
        self._handles: Dict[str, DocumentHandle] = {}

    def add(self, handle: DocumentHandle) -> DocumentHandle:
        self._handles[handle.handle_id] = handle
        return handle

    def get(self, handle_id: str) -> DocumentHandle:
        try:
            return self._handles[handle_id]
        except KeyError as exc:
            raise KeyError(f"Unknown document handle: {handle_id}") from exc

    def remove(self, handle_id: str) -> None:
        handle = self._handles.pop(handle_id, None)
        if handle is not None:
            handle.close()

    def close_all(self) -> None:
        for handle in self._handles.values():
            handle.close()
        self._handles.clear()

    def __contains__(self, handle_id: object) -> bool:
        return handle_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[DocumentHandle]:
        return iter(list(self._handles.values()))
