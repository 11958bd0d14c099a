"""Per-tool workflow state machine.

    IDLE -> LOADED -> PROCESSING -> READY(artifacts) | FAILED(error)

A workflow owns the open handles, the page sequence and one artifact slot.
Jobs see a snapshot of the sequence taken when they start, so edits made
while a job runs only affect the next job. Only one job runs at a time.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from pagekit.docs.buffer import ArtifactHandle, ArtifactSlot, BufferManager
from pagekit.docs.handle import DocumentHandle, HandleRegistry, open_document
from pagekit.docs.model import OutputArtifact, PageReference
from pagekit.docs.sequence import PageSequence
from pagekit.errors import (
    AssemblyError,
    EncodingError,
    PageRangeError,
    ParseError,
    ValidationError,
    WorkflowBusyError,
)
from pagekit.ingest.validator import FileRule, SourceFile, validate_batch

log = logging.getLogger(__name__)

Snapshot = Tuple[PageReference, ...]
# returns None when the job was cancelled
Job = Callable[[Snapshot, HandleRegistry], Optional[Sequence[OutputArtifact]]]


class WorkflowState(enum.Enum):
    IDLE = "idle"
    LOADED = "loaded"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class Workflow:
    def __init__(self, buffer: BufferManager, name: str = "workflow") -> None:
        self.name = name
        self.buffer = buffer
        self.registry = HandleRegistry()
        self.sequence = PageSequence()
        self.slot = ArtifactSlot(buffer)
        self.state = WorkflowState.IDLE
        self.error: Optional[BaseException] = None
        self._run_lock = threading.Lock()
        # guards _pending_close and the release of _run_lock
        self._pending_lock = threading.Lock()
        self._pending_close: List[str] = []

    # ------------------------------------------------------------------
    # Loading and editing
    # ------------------------------------------------------------------
    def load(self, files: Iterable[SourceFile], rule: FileRule, replace: bool = False) -> List[DocumentHandle]:
        """Validate and open ``files``, then append their pages.

        Either every file is opened and added, or nothing changes. With
        ``replace`` the previous documents are dropped (single-file tools).
        """
        accepted = validate_batch(files, rule)
        if not accepted:
            return []
        if replace and self.busy:
            raise WorkflowBusyError("Wait for the running job to finish before replacing documents.")

        opened: List[DocumentHandle] = []
        try:
            for source in accepted:
                opened.append(open_document(source))
        except BaseException:
            for handle in opened:
                handle.close()
            raise

        if replace:
            self.reset()
        for handle in opened:
            self.registry.add(handle)
            self.sequence.append(handle)
        log.info("%s: loaded %d file(s), %d page(s) in sequence", self.name, len(opened), len(self.sequence))
        self._edited()
        return opened

    def move_page(self, from_position: int, to_position: int) -> None:
        self.sequence.reorder(from_position, to_position)
        self._edited()

    def remove_page(self, position: int) -> PageReference:
        ref = self.sequence.remove_at(position)
        self._edited()
        return ref

    def remove_document(self, handle_id: str) -> None:
        self.registry.get(handle_id)
        self.sequence.remove_handle(handle_id)
        with self._pending_lock:
            if self._run_lock.locked():
                # the running job may still read from it
                self._pending_close.append(handle_id)
            else:
                self.registry.remove(handle_id)
        self._edited()

    def reset(self) -> None:
        """Release every artifact and handle and go back to IDLE."""
        if self.state is WorkflowState.PROCESSING:
            raise WorkflowBusyError("Wait for the running job to finish before clearing.")
        self.slot.clear()
        with self._pending_lock:
            self._close_pending()
        self.registry.close_all()
        self.sequence.clear()
        self.error = None
        self.state = WorkflowState.IDLE

    def _edited(self) -> None:
        if self.state is WorkflowState.PROCESSING:
            return
        self.slot.clear()
        self.error = None
        self.state = WorkflowState.LOADED if self.sequence.loaded else WorkflowState.IDLE

    # ------------------------------------------------------------------
    # Running jobs
    # ------------------------------------------------------------------
    @property
    def artifacts(self) -> List[ArtifactHandle]:
        return self.slot.handles

    def run(self, job: Job) -> List[ArtifactHandle]:
        """Run ``job`` on a snapshot of the sequence and keep its result in the slot.

        Doxygen:
        - @param job: Callable producing the output artifacts (None when cancelled).
        - @return: Live handles of the new result; empty if the job was cancelled.
        - @throws WorkflowBusyError: Another job is running.
        - @throws ValidationError, PageRangeError: Bad input; state is unchanged.
        - @throws ParseError, AssemblyError, EncodingError: State becomes FAILED.
        """
        if not self._run_lock.acquire(blocking=False):
            raise WorkflowBusyError("A job is already running.")
        try:
            if not self.sequence.loaded:
                raise ValidationError("Add a document first.")

            self.slot.clear()
            self.error = None
            self.state = WorkflowState.PROCESSING
            snapshot = self.sequence.snapshot()
            try:
                artifacts = job(snapshot, self.registry)
            except (ValidationError, PageRangeError):
                self.state = WorkflowState.LOADED
                raise
            except (ParseError, AssemblyError, EncodingError) as exc:
                log.error("%s: job failed: %s", self.name, exc)
                self.error = exc
                self.state = WorkflowState.FAILED
                raise
            except Exception as exc:
                log.exception("%s: unexpected error in job", self.name)
                self.error = exc
                self.state = WorkflowState.FAILED
                raise

            if artifacts is None:
                self.state = WorkflowState.LOADED
                return []
            try:
                handles = self.slot.replace(artifacts)
            except OSError as exc:
                error = EncodingError(f"Could not store the result: {exc}")
                self.error = error
                self.state = WorkflowState.FAILED
                raise error from exc
            self.state = WorkflowState.READY
            return handles
        finally:
            with self._pending_lock:
                self._close_pending()
                self._run_lock.release()

    def _close_pending(self) -> None:
        for handle_id in self._pending_close:
            self.registry.remove(handle_id)
        self._pending_close = []

    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def close(self) -> None:
        self.reset()

    def __repr__(self) -> str:
        return f"Workflow({self.name!r}, state={self.state.value}, pages={len(self.sequence)})"
