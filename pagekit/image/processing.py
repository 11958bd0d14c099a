"""Pixel-level helpers: decoding, re-encoding, background fill and fit geometry.

These utilities operate on numpy image arrays using OpenCV. Arrays handed
around between pagekit modules are RGB or RGBA (OpenCV's BGR order stays
inside this module).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from pagekit.docs.model import PageSize, Rect
from pagekit.errors import EncodingError, ImageDecodeError

JPEG_SIGNATURE = b"\xff\xd8\xff"
WHITE = (255, 255, 255)


@dataclass(frozen=True)
class EmbeddableImage:
    """Image bytes ready to be placed on a PDF page."""

    data: bytes
    width: int
    height: int
    is_jpeg: bool

    @property
    def size(self) -> PageSize:
        return PageSize(float(self.width), float(self.height))


def _to_uint8(img: np.ndarray) -> np.ndarray:
    if img.dtype == np.uint8:
        return img
    if img.dtype == np.uint16:
        return (img >> 8).astype(np.uint8)
    return cv2.normalize(img, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)


def _decode_bgr(data: bytes) -> np.ndarray:
    buf = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED) if buf.size else None
    if img is None:
        raise ImageDecodeError("Failed to decode image. Check that the file is a valid image.")
    img = _to_uint8(img)
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    return img


def decode_image(data: bytes) -> np.ndarray:
    """Decode encoded image bytes into an RGB or RGBA uint8 array.

    Doxygen:
    - @param data: Encoded JPEG/PNG/WebP bytes.
    - @return: H x W x 3 (RGB) or H x W x 4 (RGBA) array.
    - @throws ImageDecodeError: If OpenCV cannot decode the bytes.
    """
    img = _decode_bgr(data)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def encode_png(pixels: np.ndarray) -> bytes:
    if pixels.ndim == 3 and pixels.shape[2] == 4:
        bgr = cv2.cvtColor(pixels, cv2.COLOR_RGBA2BGRA)
    else:
        bgr = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
    ok, buf = cv2.imencode(".png", bgr)
    if not ok:
        raise EncodingError("Failed to encode image as PNG.")
    return buf.tobytes()


def encode_jpeg(pixels: np.ndarray, quality: int = 95) -> bytes:
    """Encode an opaque RGB array as JPEG."""
    bgr = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)
    ok, buf = cv2.imencode(".jpg", bgr, [int(cv2.IMWRITE_JPEG_QUALITY), int(quality)])
    if not ok:
        raise EncodingError("Failed to encode image as JPEG.")
    return buf.tobytes()


def prepare_image(data: bytes, mime_type: str = "") -> EmbeddableImage:
    """Normalize an uploaded image into something a PDF page can embed.

    JPEG input is passed through byte for byte so no quality is lost. PNG,
    WebP and anything else OpenCV can read is re-encoded as PNG, keeping
    the alpha channel.
    """
    pixels = decode_image(data)
    height, width = pixels.shape[:2]
    if mime_type == "image/jpeg" or data[:3] == JPEG_SIGNATURE:
        return EmbeddableImage(data=data, width=width, height=height, is_jpeg=True)
    return EmbeddableImage(data=encode_png(pixels), width=width, height=height, is_jpeg=False)


def fill_background(pixels: np.ndarray, color: Tuple[int, int, int] = WHITE) -> np.ndarray:
    """Composite ``pixels`` over an opaque ``color`` canvas.

    Rendered pages without an explicit background come back transparent;
    presentation viewers show such slides as black, so the canvas is always
    filled before page content lands on it.

    Doxygen:
    - @param pixels: H x W x 3 or H x W x 4 uint8 array (RGB/RGBA).
    - @param color: Background RGB color.
    - @return: Opaque H x W x 3 uint8 array.
    """
    height, width = pixels.shape[:2]
    canvas = np.empty((height, width, 3), dtype=np.uint8)
    canvas[:, :] = np.array(color, dtype=np.uint8)
    if pixels.ndim == 2:
        pixels = cv2.cvtColor(pixels, cv2.COLOR_GRAY2RGB)
    if pixels.shape[2] == 3:
        canvas[:, :] = pixels
        return canvas

    rgb = pixels[:, :, :3].astype(np.float32)
    alpha = pixels[:, :, 3:4].astype(np.float32) / 255.0
    blended = rgb * alpha + canvas.astype(np.float32) * (1.0 - alpha)
    return np.clip(np.rint(blended), 0, 255).astype(np.uint8)


def fit_rect(content: PageSize, page: PageSize) -> Rect:
    """Scale ``content`` to fit inside ``page`` keeping its aspect ratio, centered.

    The scale factor may exceed 1: small images are enlarged until one
    axis touches the page edge.
    """
    if content.width <= 0 or content.height <= 0:
        raise ValueError(f"Cannot fit content of size {content.width}x{content.height}")
    scale = min(page.width / content.width, page.height / content.height)
    width = content.width * scale
    height = content.height * scale
    return Rect(
        x=(page.width - width) / 2,
        y=(page.height - height) / 2,
        width=width,
        height=height,
    )
