"""Raster conversion: page rasterizers and the PDF -> PPTX job."""

from .raster import PageRasterizer, PopplerRasterizer
from .slides import (
    CancellationToken,
    ConversionJob,
    Progress,
    convert_to_presentation,
    slide_dimensions,
)

__all__ = [
    "PageRasterizer",
    "PopplerRasterizer",
    "CancellationToken",
    "ConversionJob",
    "Progress",
    "convert_to_presentation",
    "slide_dimensions",
]
