"""Document layer: page references, handles, assembly and export.

Exposes:
- Data model: PageSize, Rect, PageReference, OutputArtifact
- Buffer manager: BufferManager, ArtifactHandle, ArtifactSlot (ephemeral outputs)

Handles (``docs.handle``), the page sequence (``docs.sequence``), assembly
(``docs.assembly``) and export (``docs.export``) are imported from their
modules directly.
"""

from .model import OutputArtifact, PageReference, PageSize, Rect
from .buffer import ArtifactHandle, ArtifactSlot, BufferManager

__all__ = [
    "OutputArtifact",
    "PageReference",
    "PageSize",
    "Rect",
    "ArtifactHandle",
    "ArtifactSlot",
    "BufferManager",
]
