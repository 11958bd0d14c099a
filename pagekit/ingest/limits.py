"""Size and type limits for every tool, plus the matching validation rules."""

from __future__ import annotations

from .validator import FileRule

MAX_PDF_SIZE_BYTES = 100 * 1024 * 1024
MAX_IMAGE_SIZE_BYTES = 20 * 1024 * 1024
MAX_IMAGE_COUNT = 50
MAX_MARKDOWN_LENGTH = 500 * 1024

MAX_PDF_SIZE_LABEL = "100 MB"
MAX_IMAGE_SIZE_LABEL = "20 MB"
MAX_MARKDOWN_LENGTH_LABEL = "500 KB"

ALLOWED_PDF_TYPES = ("application/pdf",)
ALLOWED_PDF_EXTENSIONS = (".pdf",)
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")
ALLOWED_MD_TYPES = ("text/markdown", "text/plain")
ALLOWED_MD_EXTENSIONS = (".md",)

PDF_SINGLE = FileRule(
    multiple=False,
    max_size=MAX_PDF_SIZE_BYTES,
    allowed_types=ALLOWED_PDF_TYPES,
    allowed_extensions=ALLOWED_PDF_EXTENSIONS,
    size_label=MAX_PDF_SIZE_LABEL,
)

PDF_MULTIPLE = FileRule(
    multiple=True,
    max_size=MAX_PDF_SIZE_BYTES,
    allowed_types=ALLOWED_PDF_TYPES,
    allowed_extensions=ALLOWED_PDF_EXTENSIONS,
    size_label=MAX_PDF_SIZE_LABEL,
)

IMAGES = FileRule(
    multiple=True,
    max_count=MAX_IMAGE_COUNT,
    max_size=MAX_IMAGE_SIZE_BYTES,
    allowed_types=ALLOWED_IMAGE_TYPES,
    allowed_extensions=ALLOWED_IMAGE_EXTENSIONS,
    size_label=MAX_IMAGE_SIZE_LABEL,
)

MARKDOWN = FileRule(
    multiple=False,
    max_size=MAX_MARKDOWN_LENGTH,
    allowed_types=ALLOWED_MD_TYPES,
    allowed_extensions=ALLOWED_MD_EXTENSIONS,
    size_label=MAX_MARKDOWN_LENGTH_LABEL,
)
