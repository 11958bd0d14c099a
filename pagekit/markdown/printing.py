"""Print-engine boundary for the Markdown path.

The print engine is an opaque service: it receives a finished HTML document,
and completion is signalled later by whoever observes the engine (for the
browser, the user closing the print dialog). pagekit never sees the bytes it
produces.
"""

from __future__ import annotations

import abc
import logging
import threading
import webbrowser
from pathlib import Path
from typing import Callable, Optional

from pagekit.docs.buffer import BufferManager
from pagekit.docs.model import OutputArtifact

log = logging.getLogger(__name__)


class PrintRequest:
    """A document handed to a print engine, plus its asynchronous outcome."""

    def __init__(self, document: OutputArtifact) -> None:
        self.document = document
        self.error: Optional[BaseException] = None
        self._done = threading.Event()

    @property
    def html(self) -> str:
        return self.document.data.decode("utf-8")

    @property
    def completed(self) -> bool:
        return self._done.is_set()

    def complete(self) -> None:
        self._done.set()

    def fail(self, error: BaseException) -> None:
        self.error = error
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)


class PrintService(abc.ABC):
    @abc.abstractmethod
    def render(self, request: PrintRequest) -> None:
        """Hand ``request`` to the engine and return without waiting."""


class BrowserPrintService(PrintService):
    """Open the document in the default browser, whose print dialog makes the PDF.

    Completion is left to the caller (``request.complete()``) because the
    browser gives no signal back.
    """

    def __init__(self, buffer: BufferManager, opener: Callable[[str], bool] = webbrowser.open) -> None:
        self.buffer = buffer
        self.opener = opener
        self.last_path: Optional[str] = None

    def render(self, request: PrintRequest) -> None:
        path = self.buffer.path("print", request.document.filename)
        with open(path, "wb") as f:
            f.write(request.document.data)
        self.last_path = path
        uri = Path(path).resolve().as_uri()
        if not self.opener(uri):
            request.fail(RuntimeError("Print dialog was blocked or unavailable. Open the file manually: " + path))
            return
        log.info("Opened %s for printing", uri)
