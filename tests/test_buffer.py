import os

import pytest

from pagekit.docs.buffer import ArtifactSlot, BufferManager
from pagekit.docs.model import PDF_MIME, OutputArtifact


def _artifact(name="out.pdf", data=b"%PDF-1.4 test"):
    return OutputArtifact(data=data, mime_type=PDF_MIME, filename=name)


def test_store_and_release(buffer):
    handle = buffer.store(_artifact())
    path = handle.path
    assert os.path.isfile(path)
    assert handle.read_bytes() == b"%PDF-1.4 test"
    assert handle.filename == "out.pdf"

    handle.release()
    handle.release()
    assert not os.path.exists(path)
    with pytest.raises(RuntimeError):
        handle.path
    assert buffer.live_handles() == []


def test_unsafe_names_are_sanitized(buffer):
    handle = buffer.store(_artifact("../../etc/passwd"))
    assert os.path.dirname(handle.path) == buffer.base_dir
    assert handle.filename == "../../etc/passwd"


def test_slot_replace_releases_previous(buffer):
    slot = ArtifactSlot(buffer)
    assert slot.empty
    (first,) = slot.replace([_artifact("a.pdf")])
    second, third = slot.replace([_artifact("b.pdf"), _artifact("c.pdf")])
    assert first.released
    assert not second.released and not third.released
    assert slot.handle is second
    slot.clear()
    assert second.released and third.released
    assert slot.empty


def test_cleanup_removes_buffer_unless_debug(tmp_path):
    release = BufferManager(base_dir=str(tmp_path))
    release.store(_artifact())
    release.cleanup()
    assert not os.path.exists(release.base_dir)

    debug = BufferManager(base_dir=str(tmp_path), debug=True)
    handle = debug.store(_artifact())
    debug.cleanup()
    assert os.path.isdir(debug.base_dir)
    assert handle.released
