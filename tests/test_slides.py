import io
import shutil

import cv2
import numpy as np
import pytest
from pptx import Presentation
from pptx.util import Emu, Inches

from conftest import make_pdf
from pagekit.docs.handle import open_pdf
from pagekit.errors import RenderError
from pagekit.render.raster import PopplerRasterizer
from pagekit.render.slides import ConversionJob, Progress, convert_to_presentation, render_size


class TransparentRasterizer:
    """Returns fully transparent pages, like a renderer without a page background."""

    def __init__(self):
        self.calls = []

    def render(self, handle, page_index, width, height):
        self.calls.append((page_index, width, height))
        return np.zeros((height, width, 4), dtype=np.uint8)


class BrokenRasterizer:
    def render(self, handle, page_index, width, height):
        raise RuntimeError("renderer crashed")


@pytest.fixture
def pdf_handle():
    handle = open_pdf(make_pdf([(200, 300), (300, 200), (200, 300)]), "deck.pdf")
    yield handle
    handle.close()


def test_one_slide_per_page_sized_from_first_page(pdf_handle):
    data = convert_to_presentation(pdf_handle, TransparentRasterizer(), scale=1.0)
    prs = Presentation(io.BytesIO(data))
    assert len(prs.slides) == 3
    assert prs.slide_width == Inches(10)
    # 200x300 -> 15 inches tall
    assert prs.slide_height == Emu(15 * 914400)


def test_slides_are_full_bleed_and_opaque(pdf_handle):
    data = convert_to_presentation(pdf_handle, TransparentRasterizer(), scale=1.0)
    prs = Presentation(io.BytesIO(data))
    for slide in prs.slides:
        (picture,) = list(slide.shapes)
        assert (picture.left, picture.top) == (0, 0)
        assert (picture.width, picture.height) == (prs.slide_width, prs.slide_height)
        pixels = cv2.imdecode(np.frombuffer(picture.image.blob, dtype=np.uint8), cv2.IMREAD_COLOR)
        # transparent page rendered onto white, never black
        assert pixels.min() >= 250


def test_pages_rendered_at_scale(pdf_handle):
    rasterizer = TransparentRasterizer()
    ConversionJob(pdf_handle, scale=2.0).run(rasterizer)
    assert rasterizer.calls == [(0, 400, 600), (1, 600, 400), (2, 400, 600)]
    assert render_size(pdf_handle.page_size(0), 1.5) == (300, 450)


def test_progress_reported_per_page(pdf_handle):
    seen = []
    convert_to_presentation(pdf_handle, TransparentRasterizer(), on_progress=seen.append)
    assert seen == [Progress(1, 3), Progress(2, 3), Progress(3, 3)]
    assert seen[-1].percent == 100


def test_cancel_mid_run_produces_nothing():
    handle = open_pdf(make_pdf([(100, 100)] * 5), "five.pdf")
    job = ConversionJob(handle, scale=1.0)
    rasterizer = TransparentRasterizer()

    def on_progress(progress):
        if progress.completed == 2:
            job.cancel()

    assert job.run(rasterizer, on_progress) is None
    assert job.progress == Progress(2, 5)
    assert len(rasterizer.calls) == 2
    assert job.finished
    handle.close()


def test_cancel_after_last_page_still_discards(pdf_handle):
    job = ConversionJob(pdf_handle, scale=1.0)

    def on_progress(progress):
        if progress.completed == progress.total:
            job.cancel()

    assert job.run(TransparentRasterizer(), on_progress) is None


def test_rasterizer_failure_is_a_render_error(pdf_handle):
    with pytest.raises(RenderError, match="page 1"):
        convert_to_presentation(pdf_handle, BrokenRasterizer())


def test_scale_must_be_positive(pdf_handle):
    with pytest.raises(ValueError):
        ConversionJob(pdf_handle, scale=0)


@pytest.mark.skipif(shutil.which("pdftoppm") is None, reason="Poppler is not installed")
def test_poppler_rasterizer_renders_requested_size(pdf_handle):
    pixels = PopplerRasterizer().render(pdf_handle, 1, 150, 100)
    assert pixels.shape[:2] == (100, 150)
    assert pixels.dtype == np.uint8
