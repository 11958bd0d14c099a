"""Upload-boundary validation.

A batch of candidate files is accepted or rejected as a whole. Rules are
checked in a fixed order (cardinality, count, type, size) and the first
failure wins, so the caller always sees one actionable message and nothing
downstream is touched.
"""

from __future__ import annotations

import mimetypes
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pagekit.errors import ValidationError


@dataclass(frozen=True)
class SourceFile:
    """Raw bytes selected by the user together with their declared metadata."""

    name: str
    data: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return os.path.splitext(self.name)[1].lower()

    @classmethod
    def from_path(cls, path: str) -> "SourceFile":
        with open(path, "rb") as f:
            data = f.read()
        mime, _ = mimetypes.guess_type(path)
        return cls(name=os.path.basename(path), data=data, mime_type=mime or "")


@dataclass(frozen=True)
class FileRule:
    multiple: bool = False
    max_count: Optional[int] = None
    max_size: Optional[int] = None
    allowed_types: Tuple[str, ...] = ()
    allowed_extensions: Tuple[str, ...] = ()
    size_label: str = ""

    def allows_type(self, source: SourceFile) -> bool:
        if not self.allowed_types:
            return True
        if source.mime_type in self.allowed_types:
            return True
        name = source.name.lower()
        return any(name.endswith(ext.lower()) for ext in self.allowed_extensions)

    def describe_types(self) -> str:
        parts = [", ".join(self.allowed_types), ", ".join(self.allowed_extensions)]
        return " or ".join(p for p in parts if p) or "any"


def validate_batch(files: Iterable[SourceFile], rule: FileRule) -> List[SourceFile]:
    """Return ``files`` as a list if the whole batch satisfies ``rule``.

    Doxygen:
    - @param files: Candidate files in user order.
    - @param rule: Cardinality, count, type and size constraints.
    - @return: The accepted files, unchanged and in the same order.
    - @throws ValidationError: On the first violated rule; nothing is accepted.
    """
    batch = list(files)
    if not batch:
        return []

    if not rule.multiple and len(batch) > 1:
        raise ValidationError("Please upload only one file.")

    if rule.max_count and len(batch) > rule.max_count:
        raise ValidationError(f"Maximum {rule.max_count} files allowed.")

    for source in batch:
        if not rule.allows_type(source):
            raise ValidationError(f"Invalid file type. Allowed: {rule.describe_types()}")

    for source in batch:
        if rule.max_size and source.size > rule.max_size:
            label = rule.size_label or "size"
            raise ValidationError(f'File "{source.name}" is too large. Max {label} per file.')

    return batch


def validate_markdown_text(text: str, max_length: Optional[int] = None) -> str:
    """Strip ``text`` and check it is non-empty and within the Markdown limit."""
    from .limits import MAX_MARKDOWN_LENGTH, MAX_MARKDOWN_LENGTH_LABEL

    limit = MAX_MARKDOWN_LENGTH if max_length is None else max_length
    trimmed = (text or "").strip()
    if not trimmed:
        raise ValidationError("Enter or upload Markdown.")
    if len(trimmed) > limit:
        raise ValidationError(f"Content is too long. Max {MAX_MARKDOWN_LENGTH_LABEL}.")
    return trimmed
