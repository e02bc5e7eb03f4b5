"""Persistent store for collections and their diagram membership.

Membership is stored twice: ``CollectionRecord.diagram_ids`` and
``DiagramRecord.collection_ids``. The backend has no query capability, so
both directions are denormalized and this store alone keeps them in step:
for every collection C and diagram D, D.id in C.diagram_ids exactly when
C.id in D.collection_ids.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from diagramvault import config
from diagramvault.clock import new_id, now_ms
from diagramvault.errors import NotFoundError
from diagramvault.storage.diagram_store import DiagramStore
from diagramvault.storage.kv_store import KeyValueBackend, load_array, save_array
from diagramvault.storage.records import (
    DEFAULT_COLLECTION_COLOR,
    DEFAULT_COLLECTION_ICON,
    CollectionRecord,
    DiagramRecord,
)

logger = logging.getLogger(__name__)

# diagram_ids is only changed through the membership operations.
_UPDATABLE = {"name", "description", "color", "icon"}


def _check_name(name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Collection name must be a non-empty string")


class CollectionStore:
    def __init__(
        self,
        backend: KeyValueBackend,
        diagrams: DiagramStore,
        key: str = config.COLLECTIONS_KEY,
    ) -> None:
        self._backend = backend
        self._key = key
        self.diagrams = diagrams

    def _load(self) -> list[CollectionRecord]:
        records = []
        for item in load_array(self._backend, self._key):
            try:
                records.append(CollectionRecord.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed stored collection: %r", item)
        return records

    def _save(self, records: list[CollectionRecord]) -> None:
        save_array(self._backend, self._key, [r.to_dict() for r in records])

    def _require(self, collection_id: str) -> tuple[list[CollectionRecord], int]:
        records = self._load()
        for i, record in enumerate(records):
            if record.id == collection_id:
                return records, i
        raise NotFoundError("Collection", collection_id)

    def _write_collection(
        self, records: list[CollectionRecord], index: int, diagram_ids: list[str]
    ) -> None:
        record = records[index]
        records[index] = replace(
            record,
            diagram_ids=diagram_ids,
            updated_at=max(now_ms(), record.created_at),
        )
        self._save(records)

    # ── CRUD ──

    def list_all(self) -> list[CollectionRecord]:
        """Return every stored collection in storage order."""
        return self._load()

    def get(self, collection_id: str) -> CollectionRecord | None:
        for record in self._load():
            if record.id == collection_id:
                return record
        return None

    def create(
        self,
        name: str,
        description: str | None = None,
        color: str | None = None,
        icon: str | None = None,
    ) -> CollectionRecord:
        """Create and persist an empty collection."""
        _check_name(name)
        ts = now_ms()
        record = CollectionRecord(
            id=new_id(),
            name=name,
            description=description,
            color=color or DEFAULT_COLLECTION_COLOR,
            icon=icon or DEFAULT_COLLECTION_ICON,
            diagram_ids=[],
            created_at=ts,
            updated_at=ts,
        )
        records = self._load()
        records.append(record)
        self._save(records)
        logger.debug("Created collection %s (%r)", record.id, name)
        return record

    def update(self, collection_id: str, **fields) -> CollectionRecord:
        """Merge presentation fields into a collection and bump updated_at.

        Raises:
            NotFoundError: If no collection has ``collection_id``.
            ValueError: For unknown/immutable fields or an empty name.
        """
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update collection field(s): {', '.join(sorted(unknown))}")
        if "name" in fields:
            _check_name(fields["name"])

        records, i = self._require(collection_id)
        merged = replace(records[i], **fields)
        merged.updated_at = max(now_ms(), merged.created_at)
        records[i] = merged
        self._save(records)
        logger.debug("Updated collection %s: %s", collection_id, ", ".join(sorted(fields)))
        return merged

    def delete(self, collection_id: str) -> None:
        """Delete a collection and strip its id from every member diagram.

        Member diagrams themselves are kept. Deleting an unknown id is a no-op.
        """
        stripped = 0
        for diagram in self.diagrams.list_all():
            if collection_id in diagram.collection_ids:
                self.diagrams.update(
                    diagram.id,
                    collection_ids=[c for c in diagram.collection_ids if c != collection_id],
                )
                stripped += 1

        records = self._load()
        remaining = [r for r in records if r.id != collection_id]
        if len(remaining) != len(records):
            self._save(remaining)
        logger.debug("Deleted collection %s (%d diagram reference(s) removed)", collection_id, stripped)

    # ── Membership ──

    def add_diagram_to_collection(self, collection_id: str, diagram_id: str) -> None:
        """Make ``diagram_id`` a member of ``collection_id`` on both sides.

        Raises:
            NotFoundError: If either the collection or the diagram is absent.
        """
        records, i = self._require(collection_id)
        diagram = self.diagrams.get(diagram_id)
        if diagram is None:
            raise NotFoundError("Diagram", diagram_id)

        collection = records[i]
        if diagram_id not in collection.diagram_ids:
            self._write_collection(records, i, collection.diagram_ids + [diagram_id])
        if collection_id not in diagram.collection_ids:
            self.diagrams.update(diagram_id, collection_ids=diagram.collection_ids + [collection_id])
        logger.debug("Added diagram %s to collection %s", diagram_id, collection_id)

    def remove_diagram_from_collection(self, collection_id: str, diagram_id: str) -> None:
        """Remove membership on both sides. A non-member is a no-op.

        Raises:
            NotFoundError: If the collection is absent.
        """
        records, i = self._require(collection_id)
        collection = records[i]
        if diagram_id in collection.diagram_ids:
            self._write_collection(
                records, i, [d for d in collection.diagram_ids if d != diagram_id]
            )

        diagram = self.diagrams.get(diagram_id)
        if diagram is not None and collection_id in diagram.collection_ids:
            self.diagrams.update(
                diagram_id,
                collection_ids=[c for c in diagram.collection_ids if c != collection_id],
            )
        logger.debug("Removed diagram %s from collection %s", diagram_id, collection_id)

    def delete_diagram(self, diagram_id: str) -> None:
        """Delete a diagram after removing it from every collection."""
        records = self._load()
        changed = False
        for i, record in enumerate(records):
            if diagram_id in record.diagram_ids:
                records[i] = replace(
                    record,
                    diagram_ids=[d for d in record.diagram_ids if d != diagram_id],
                    updated_at=max(now_ms(), record.created_at),
                )
                changed = True
        if changed:
            self._save(records)
        self.diagrams.delete(diagram_id)

    def diagrams_in(self, collection_id: str) -> list[DiagramRecord]:
        """Member diagrams in collection order; unknown collection yields []."""
        collection = self.get(collection_id)
        if collection is None:
            return []
        by_id = {d.id: d for d in self.diagrams.list_all()}
        return [by_id[d] for d in collection.diagram_ids if d in by_id]
