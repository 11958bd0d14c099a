import io
import zipfile

import pytest

from conftest import page_texts
from pagekit.docs.assembly import assemble
from pagekit.docs.export import (
    archive_name,
    base_name,
    build_archive,
    split_by_ranges,
    split_every_page,
    to_handle,
)
from pagekit.docs.handle import open_pdf
from pagekit.docs.model import PDF_MIME, ZIP_MIME, OutputArtifact, PageReference
from pagekit.errors import EncodingError, PageRangeError


@pytest.mark.parametrize(
    "filename, expected",
    [("report.pdf", "report"), ("Scan.PDF", "Scan"), ("notes.txt", "notes.txt"), ("", "document"), (None, "document")],
)
def test_base_name(filename, expected):
    assert base_name(filename) == expected


def test_split_every_page_names_and_content(registry, three_page_pdf):
    artifacts = split_every_page(three_page_pdf, registry)
    assert [a.filename for a in artifacts] == ["report-page-1.pdf", "report-page-2.pdf", "report-page-3.pdf"]
    for n, artifact in enumerate(artifacts, start=1):
        assert artifact.mime_type == PDF_MIME
        assert page_texts(artifact.data) == [f"Page {n}"]


def test_split_pages_reassemble_to_original(registry, three_page_pdf):
    refs = []
    for artifact in split_every_page(three_page_pdf, registry):
        handle = registry.add(open_pdf(artifact.data, artifact.filename))
        refs.append(PageReference(handle.handle_id, 0))
    rebuilt = to_handle(assemble(refs, registry))
    try:
        assert page_texts(rebuilt.data) == ["Page 1", "Page 2", "Page 3"]
        assert [rebuilt.page_size(i) for i in range(3)] == [three_page_pdf.page_size(i) for i in range(3)]
    finally:
        rebuilt.close()


def test_split_by_ranges_follows_request_order(registry, three_page_pdf):
    artifact = split_by_ranges(three_page_pdf, "3, 1-2", registry)
    assert artifact.filename == "report-split.pdf"
    assert page_texts(artifact.data) == ["Page 3", "Page 1", "Page 2"]


def test_split_by_ranges_bad_input(registry, three_page_pdf):
    with pytest.raises(PageRangeError):
        split_by_ranges(three_page_pdf, "4", registry)


def test_archive_members(registry, three_page_pdf):
    pages = split_every_page(three_page_pdf, registry)
    archive = build_archive(pages, archive_name(three_page_pdf.name))
    assert archive.filename == "report-split-pages.zip"
    assert archive.mime_type == ZIP_MIME
    with zipfile.ZipFile(io.BytesIO(archive.data)) as zf:
        assert zf.namelist() == [p.filename for p in pages]
        assert zf.read("report-page-2.pdf") == pages[1].data


def test_archive_rejects_duplicate_names():
    dup = OutputArtifact(b"x", PDF_MIME, "same.pdf")
    with pytest.raises(EncodingError, match="same.pdf"):
        build_archive([dup, dup], "out.zip")
