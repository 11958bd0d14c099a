from typing import Sequence, Tuple

import cv2
import fitz  # pymupdf
import numpy as np
import pytest

from pagekit.docs.buffer import BufferManager
from pagekit.docs.handle import HandleRegistry, open_image, open_pdf


def make_pdf(sizes: Sequence[Tuple[float, float]], label: str = "Page") -> bytes:
    """Build a PDF whose page i (1-based) reads "<label> i"."""
    doc = fitz.open()
    for i, (w, h) in enumerate(sizes, start=1):
        page = doc.new_page(width=w, height=h)
        page.insert_text((20, 40), f"{label} {i}", fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def make_png(width: int, height: int, color=(200, 30, 30), alpha=None) -> bytes:
    if alpha is None:
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:, :] = color[::-1]
    else:
        img = np.zeros((height, width, 4), dtype=np.uint8)
        img[:, :, :3] = color[::-1]
        img[:, :, 3] = alpha
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def make_jpeg(width: int, height: int) -> bytes:
    img = np.full((height, width, 3), 128, dtype=np.uint8)
    ok, buf = cv2.imencode(".jpg", img)
    assert ok
    return buf.tobytes()


def page_texts(data: bytes):
    doc = fitz.open(stream=data, filetype="pdf")
    try:
        return [page.get_text().strip() for page in doc]
    finally:
        doc.close()


@pytest.fixture
def registry():
    reg = HandleRegistry()
    yield reg
    reg.close_all()


@pytest.fixture
def buffer(tmp_path):
    buf = BufferManager(base_dir=str(tmp_path / "buffer"))
    yield buf
    buf.cleanup()


@pytest.fixture
def three_page_pdf(registry):
    handle = open_pdf(make_pdf([(200, 300), (300, 200), (250, 250)]), "report.pdf")
    return registry.add(handle)


@pytest.fixture
def other_pdf(registry):
    handle = open_pdf(make_pdf([(200, 300), (200, 300)], label="Other"), "other.pdf")
    return registry.add(handle)


@pytest.fixture
def landscape_image(registry):
    return registry.add(open_image(make_png(800, 600), "wide.png", "image/png"))


@pytest.fixture
def square_image(registry):
    return registry.add(open_image(make_png(400, 400, color=(10, 200, 10)), "square.png", "image/png"))
