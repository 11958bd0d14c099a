import fitz  # pymupdf
import pytest

from conftest import make_jpeg, make_pdf, make_png
from pagekit.docs.handle import (
    HandleRegistry,
    ImageHandle,
    PdfHandle,
    open_document,
    open_image,
    open_pdf,
)
from pagekit.docs.model import PageSize
from pagekit.errors import ImageDecodeError, PdfParseError
from pagekit.ingest.validator import SourceFile


def test_pdf_handle_counts_and_sizes():
    handle = open_pdf(make_pdf([(200, 300), (300, 200)]), "a.pdf")
    assert handle.page_count() == 2
    assert handle.page_size(1) == PageSize(300.0, 200.0)
    assert handle.page_indices() == [0, 1]
    with pytest.raises(IndexError):
        handle.page_size(2)
    handle.close()


def test_rotated_page_reports_displayed_size():
    doc = fitz.open()
    page = doc.new_page(width=200, height=300)
    page.set_rotation(90)
    handle = open_pdf(doc.tobytes(), "rotated.pdf")
    doc.close()
    assert handle.page_size(0) == PageSize(300.0, 200.0)


def test_invalid_pdf_bytes():
    with pytest.raises(PdfParseError, match="valid PDF"):
        open_pdf(b"definitely not a pdf", "broken.pdf")


def test_password_protected_pdf():
    doc = fitz.open()
    doc.new_page()
    data = doc.tobytes(encryption=fitz.PDF_ENCRYPT_AES_256, owner_pw="owner", user_pw="user")
    doc.close()
    with pytest.raises(PdfParseError, match="password"):
        open_pdf(data, "locked.pdf")


def test_image_handle_is_one_page_in_pixels():
    handle = open_image(make_png(64, 32), "a.png", "image/png")
    assert handle.page_count() == 1
    assert handle.page_size(0) == PageSize(64.0, 32.0)


def test_corrupt_image():
    with pytest.raises(ImageDecodeError):
        open_image(b"\x89PNG\r\n\x1a\nnope", "bad.png", "image/png")


def test_open_document_dispatches_by_type():
    pdf = open_document(SourceFile("doc.pdf", make_pdf([(100, 100)]), "application/pdf"))
    img = open_document(SourceFile("photo.jpg", make_jpeg(10, 10), "image/jpeg"))
    assert isinstance(pdf, PdfHandle)
    assert isinstance(img, ImageHandle)
    # sniffed from the signature when name and type say nothing
    sniffed = open_document(SourceFile("upload", make_pdf([(100, 100)])))
    assert isinstance(sniffed, PdfHandle)


def test_registry_remove_closes_handle():
    reg = HandleRegistry()
    handle = reg.add(open_pdf(make_pdf([(100, 100)])))
    assert handle.handle_id in reg
    reg.remove(handle.handle_id)
    assert handle.document.is_closed
    assert len(reg) == 0
    with pytest.raises(KeyError):
        reg.get(handle.handle_id)
