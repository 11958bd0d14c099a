"""Image-level processing utilities (decoding, background fill, fit geometry)."""

from .processing import (
    EmbeddableImage,
    decode_image,
    encode_jpeg,
    encode_png,
    fill_background,
    fit_rect,
    prepare_image,
)

__all__ = [
    "EmbeddableImage",
    "decode_image",
    "encode_jpeg",
    "encode_png",
    "fill_background",
    "fit_rect",
    "prepare_image",
]
