from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
import threading
import time
from typing import List, Optional, Sequence

from .model import OutputArtifact

log = logging.getLogger(__name__)

_UNSAFE_NAME = re.compile(r"[^\w.\-]+")


class ArtifactHandle:
    """Revocable reference to produced bytes, backed by a file in the session buffer."""

    def __init__(self, path: str, artifact: OutputArtifact) -> None:
        self._path = path
        self.filename = artifact.filename
        self.mime_type = artifact.mime_type
        self.size = artifact.size
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def path(self) -> str:
        if self._released:
            raise RuntimeError(f"Artifact handle for {self.filename} has been released")
        return self._path

    def read_bytes(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass
        log.debug("Released artifact %s", self._path)

    def __repr__(self) -> str:
        state = "released" if self._released else self._path
        return f"ArtifactHandle({self.filename!r}, {state})"


class BufferManager:
    """Session buffer under <base>/<timestamp> holding ephemeral artifact files.

    Debug mode keeps the buffer on disk; release mode removes it on cleanup().
    """

    def __init__(self, base_dir: Optional[str] = None, debug: bool = False) -> None:
        self.debug = bool(debug)
        base = base_dir or os.path.join(tempfile.gettempdir(), "pagekit-buffer")
        os.makedirs(base, exist_ok=True)
        ts = time.strftime("%Y%m%d-%H%M%S")
        self.base_dir = tempfile.mkdtemp(prefix=f"{ts}-", dir=base)
        self._handles: List[ArtifactHandle] = []
        self._counter = 0
        self._lock = threading.Lock()

    def path(self, *parts: str) -> str:
        p = os.path.join(self.base_dir, *parts)
        os.makedirs(os.path.dirname(p), exist_ok=True)
        return p

    def store(self, artifact: OutputArtifact) -> ArtifactHandle:
        """Write ``artifact`` into the buffer and return a live handle to it."""
        with self._lock:
            self._counter += 1
            fname = f"{self._counter:04d}-{_UNSAFE_NAME.sub('_', artifact.filename) or 'artifact'}"
        out_path = self.path(fname)
        with open(out_path, "wb") as f:
            f.write(artifact.data)
        handle = ArtifactHandle(out_path, artifact)
        with self._lock:
            self._handles.append(handle)
        return handle

    def live_handles(self) -> List[ArtifactHandle]:
        with self._lock:
            return [h for h in self._handles if not h.released]

    def cleanup(self) -> None:
        with self._lock:
            handles, self._handles = self._handles, []
        for handle in handles:
            handle.release()
        if not self.debug:
            shutil.rmtree(self.base_dir, ignore_errors=True)


class ArtifactSlot:
    """Holds the live handles of the one pending result of a workflow step.

    A result is usually a single artifact; split-every-page results carry one
    handle per page (plus the optional archive) and are replaced as a unit.
    """

    def __init__(self, buffer: BufferManager) -> None:
        self.buffer = buffer
        self._handles: List[ArtifactHandle] = []

    @property
    def handles(self) -> List[ArtifactHandle]:
        return list(self._handles)

    @property
    def handle(self) -> Optional[ArtifactHandle]:
        return self._handles[0] if self._handles else None

    @property
    def empty(self) -> bool:
        return not self._handles

    def replace(self, artifacts: Sequence[OutputArtifact]) -> List[ArtifactHandle]:
        # previous result is released before the new one is written
        self.clear()
        stored: List[ArtifactHandle] = []
        try:
            for artifact in artifacts:
                stored.append(self.buffer.store(artifact))
        except OSError:
            for handle in stored:
                handle.release()
            raise
        self._handles = stored
        return self.handles

    def clear(self) -> None:
        handles, self._handles = self._handles, []
        for handle in handles:
            handle.release()
