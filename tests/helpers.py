"""Shared test helpers — in-memory upload sources and invariant checks."""

from __future__ import annotations


class FakeUpload:
    """Minimal stand-in for an UploadFile: a name, a type, and async read()."""

    def __init__(self, filename: str, content: bytes | str, content_type: str | None = None):
        self.filename = filename
        self.content_type = content_type
        self._content = content.encode("utf-8") if isinstance(content, str) else content

    async def read(self) -> bytes:
        return self._content


class BrokenUpload(FakeUpload):
    """Upload whose read fails like a vanished file."""

    async def read(self) -> bytes:
        raise OSError("device not ready")


def assert_membership_symmetric(collections) -> None:
    """D.id in C.diagram_ids exactly when C.id in D.collection_ids, and no dangling ids."""
    all_collections = collections.list_all()
    all_diagrams = collections.diagrams.list_all()
    collection_ids = {c.id for c in all_collections}
    diagram_ids = {d.id for d in all_diagrams}

    for c in all_collections:
        for d in all_diagrams:
            assert (d.id in c.diagram_ids) == (c.id in d.collection_ids), (c.id, d.id)
        assert set(c.diagram_ids) <= diagram_ids
    for d in all_diagrams:
        assert set(d.collection_ids) <= collection_ids
