"""Serialization, split outputs, archives and output naming."""

from __future__ import annotations

import io
import logging
import re
import zipfile
from typing import List, Optional, Sequence

import fitz  # pymupdf

from pagekit.errors import EncodingError

from .assembly import assemble
from .handle import HandleRegistry, PdfHandle
from .model import PDF_MIME, ZIP_MIME, OutputArtifact, PageReference
from .sequence import parse_page_ranges

log = logging.getLogger(__name__)

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)


def base_name(filename: Optional[str], default: str = "document") -> str:
    """Strip a trailing ``.pdf`` (any case); fall back to ``default``."""
    stem = _PDF_SUFFIX.sub("", filename or "")
    return stem or default


def suffixed_name(filename: Optional[str], suffix: str, ext: str = ".pdf") -> str:
    return f"{base_name(filename)}{suffix}{ext}"


def page_name(filename: Optional[str], page_number: int) -> str:
    return suffixed_name(filename, f"-page-{page_number}")


def serialize(doc: fitz.Document) -> bytes:
    """Return the bytes of ``doc`` with unused and duplicate objects removed."""
    try:
        return doc.tobytes(garbage=3, deflate=True)
    except Exception as exc:
        raise EncodingError("Failed to write the PDF.") from exc


def to_artifact(doc: fitz.Document, filename: str) -> OutputArtifact:
    """Serialize and close ``doc``."""
    try:
        return OutputArtifact(data=serialize(doc), mime_type=PDF_MIME, filename=filename)
    finally:
        doc.close()


def to_handle(doc: fitz.Document, name: str = "assembled.pdf") -> PdfHandle:
    """Reopen an assembled document as a new read-only handle."""
    data = serialize(doc)
    return PdfHandle(name, data)


def split_every_page(handle: PdfHandle, registry: HandleRegistry) -> List[OutputArtifact]:
    """One single-page PDF per source page, each built in its own container."""
    artifacts: List[OutputArtifact] = []
    for index in range(handle.page_count()):
        doc = assemble([PageReference(handle.handle_id, index)], registry)
        artifacts.append(to_artifact(doc, page_name(handle.name, index + 1)))
    log.info("Split %s into %d page(s)", handle.name, len(artifacts))
    return artifacts


def split_by_ranges(handle: PdfHandle, ranges: str, registry: HandleRegistry) -> OutputArtifact:
    """One PDF holding the pages named by ``ranges`` (e.g. ``"1-3, 5"``), in that order."""
    pages = parse_page_ranges(ranges, handle.page_count())
    refs = [PageReference(handle.handle_id, n - 1) for n in pages]
    return to_artifact(assemble(refs, registry), suffixed_name(handle.name, "-split"))


def build_archive(artifacts: Sequence[OutputArtifact], archive_name: str) -> OutputArtifact:
    """Bundle ``artifacts`` into one ZIP; member names are the artifact filenames.

    Doxygen:
    - @param artifacts: Outputs to bundle, in order.
    - @param archive_name: Suggested filename of the archive.
    - @return: ZIP artifact.
    - @throws EncodingError: Duplicate member names or a failed write.
    """
    names = [a.filename for a in artifacts]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise EncodingError(f"Duplicate archive member names: {', '.join(duplicates)}")

    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for artifact in artifacts:
                zf.writestr(artifact.filename, artifact.data)
    except (OSError, zipfile.BadZipFile, ValueError) as exc:
        raise EncodingError("Could not create ZIP. Try downloading pages individually.") from exc
    return OutputArtifact(data=buffer.getvalue(), mime_type=ZIP_MIME, filename=archive_name)


def archive_name(filename: Optional[str]) -> str:
    return suffixed_name(filename, "-split-pages", ".zip")
