"""Ingestion boundary: source files, validation rules and per-tool limits."""

from .validator import FileRule, SourceFile, validate_batch, validate_markdown_text
from . import limits

__all__ = [
    "FileRule",
    "SourceFile",
    "validate_batch",
    "validate_markdown_text",
    "limits",
]
