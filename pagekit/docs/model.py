from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PageSize:
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class PageReference:
    """One page of one opened document; equal iff both fields match."""

    handle_id: str
    page_index: int


@dataclass(frozen=True)
class OutputArtifact:
    data: bytes
    mime_type: Optional[str]
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


PDF_MIME = "application/pdf"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
ZIP_MIME = "application/zip"
