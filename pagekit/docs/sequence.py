"""Ordered page-reference list and page-range parsing.

The sequence is the only state assembly consumes. Positions are display
order, not identity: removing an entry shrinks the list and nothing is
reindexed. Every operation either applies completely or raises before
touching the list.
"""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Tuple

from pagekit.errors import PageRangeError

from .handle import DocumentHandle
from .model import PageReference


class PageSequence:
    def __init__(self, references: Optional[Iterable[PageReference]] = None) -> None:
        self._refs: List[PageReference] = list(references or [])
        self._loaded = references is not None

    @property
    def loaded(self) -> bool:
        """False until a document has been appended ("no document loaded yet")."""
        return self._loaded

    @property
    def is_empty(self) -> bool:
        return not self._refs

    @property
    def references(self) -> List[PageReference]:
        return list(self._refs)

    def snapshot(self) -> Tuple[PageReference, ...]:
        return tuple(self._refs)

    def append(self, handle: DocumentHandle, indices: Optional[Iterable[int]] = None) -> None:
        """Append ``handle``'s pages (all of them, in order, by default)."""
        wanted = list(handle.page_indices() if indices is None else indices)
        count = handle.page_count()
        for idx in wanted:
            if not 0 <= idx < count:
                raise IndexError(f"Page index {idx} out of range for '{handle.name}' ({count} pages)")
        self._refs.extend(PageReference(handle.handle_id, idx) for idx in wanted)
        self._loaded = True

    def reorder(self, from_position: int, to_position: int) -> None:
        """Move one entry; every other entry keeps its relative order."""
        self._check_position(from_position)
        self._check_position(to_position)
        ref = self._refs.pop(from_position)
        self._refs.insert(to_position, ref)

    def remove_at(self, position: int) -> PageReference:
        self._check_position(position)
        return self._refs.pop(position)

    def remove_handle(self, handle_id: str) -> int:
        """Drop every reference into one document; returns how many were removed."""
        kept = [ref for ref in self._refs if ref.handle_id != handle_id]
        removed = len(self._refs) - len(kept)
        self._refs = kept
        return removed

    def clear(self) -> None:
        self._refs = []
        self._loaded = False

    def handle_ids(self) -> List[str]:
        seen: List[str] = []
        for ref in self._refs:
            if ref.handle_id not in seen:
                seen.append(ref.handle_id)
        return seen

    def _check_position(self, position: int) -> None:
        if not 0 <= position < len(self._refs):
            raise IndexError(f"Position {position} out of range for sequence of {len(self._refs)}")

    def __len__(self) -> int:
        return len(self._refs)

    def __iter__(self) -> Iterator[PageReference]:
        return iter(self.snapshot())

    def __getitem__(self, position: int) -> PageReference:
        return self._refs[position]

    def __repr__(self) -> str:
        return f"PageSequence({len(self._refs)} refs, loaded={self._loaded})"


_PAGE_NUMBER = re.compile(r"\d+", re.ASCII)


def _parse_page_number(token: str) -> Optional[int]:
    token = token.strip()
    if not _PAGE_NUMBER.fullmatch(token):
        return None
    return int(token)


def parse_page_ranges(text: str, page_count: int) -> List[int]:
    """Parse ``"1-3, 5, 7-9"`` into 1-based page numbers.

    Descending ranges are normalized (``"3-1"`` -> 1, 2, 3) and duplicates
    across tokens are kept, so a page requested twice appears twice.

    Doxygen:
    - @param text: Comma separated list of pages and a-b ranges.
    - @param page_count: Number of pages in the source document.
    - @return: Page numbers in request order.
    - @throws PageRangeError: Blank input, or a token that is malformed or outside [1, page_count].
    """
    if not text or not text.strip():
        raise PageRangeError("Enter a page range.")

    pages: List[int] = []
    for part in (p.strip() for p in text.split(",")):
        if not part:
            continue
        if "-" in part:
            left, _, right = part.partition("-")
            a = _parse_page_number(left)
            b = _parse_page_number(right)
            if a is None or b is None or not (1 <= a <= page_count and 1 <= b <= page_count):
                raise PageRangeError(
                    f'Invalid range "{part}". Use numbers between 1 and {page_count}.', token=part
                )
            low, high = min(a, b), max(a, b)
            pages.extend(range(low, high + 1))
        else:
            n = _parse_page_number(part)
            if n is None or not 1 <= n <= page_count:
                raise PageRangeError(
                    f'Invalid page "{part}". Use numbers between 1 and {page_count}.', token=part
                )
            pages.append(n)

    if not pages:
        raise PageRangeError("Enter a page range.")
    return pages
