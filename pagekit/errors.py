"""Exception hierarchy shared by every pagekit component.

Validation and range errors are raised before any state changes. Parse,
assembly and encoding errors abort the running job; the workflow layer
releases partial artifacts and keeps the process alive so the user can retry.
"""

from __future__ import annotations

from typing import Optional


class PageKitError(Exception):
    """Base class for recoverable, user-facing errors."""


class ValidationError(PageKitError):
    """A candidate batch was rejected before any parsing happened."""


class ParseError(PageKitError):
    """Bytes do not form a valid document of the declared kind."""


class PdfParseError(ParseError):
    pass


class ImageDecodeError(ParseError):
    pass


class PageRangeError(PageKitError, ValueError):
    """A user supplied page or range token is malformed or out of bounds."""

    def __init__(self, message: str, token: Optional[str] = None) -> None:
        super().__init__(message)
        self.token = token


class AssemblyError(PageKitError):
    """Copying a page or placing an image into the output failed."""


class RenderError(AssemblyError):
    """A page could not be rasterized."""


class EncodingError(PageKitError):
    """The final output could not be serialized."""


class WorkflowBusyError(PageKitError):
    """A job is already running on this workflow."""


class PageIndexError(IndexError):
    """A page reference points past the end of its source document.

    Raised for a broken page-sequence invariant, never for user input, and
    therefore not a :class:`PageKitError`.
    """
