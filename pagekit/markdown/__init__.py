"""Markdown -> styled HTML, and the print-engine boundary that turns it into a PDF."""

from .converter import (
    PREVIEW_STYLE,
    TEMPLATE_STYLE,
    markdown_to_full_document,
    markdown_to_html,
)
from .printing import BrowserPrintService, PrintRequest, PrintService

__all__ = [
    "PREVIEW_STYLE",
    "TEMPLATE_STYLE",
    "markdown_to_full_document",
    "markdown_to_html",
    "BrowserPrintService",
    "PrintRequest",
    "PrintService",
]
