"""Persistent CRUD store for diagrams.

Every call re-reads the whole array from the backend, applies its change,
and writes the whole array back. Nothing is cached between calls.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from diagramvault import config
from diagramvault.clock import new_id, now_ms
from diagramvault.errors import NotFoundError
from diagramvault.library.builtin import is_builtin
from diagramvault.library.templates import get_template
from diagramvault.storage.kv_store import KeyValueBackend, load_array, save_array
from diagramvault.storage.records import DEFAULT_THEME, THEMES, DiagramRecord

logger = logging.getLogger(__name__)

# Fields callers may change through update(); id and created_at are immutable.
_UPDATABLE = {"name", "code", "theme", "collection_ids"}


def _check_name(name: str) -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValueError("Diagram name must be a non-empty string")


def _check_theme(theme: str) -> None:
    if theme not in THEMES:
        raise ValueError(f"Unknown theme {theme!r}. Expected one of: {', '.join(THEMES)}")


def _check_mutable(diagram_id: str) -> None:
    if is_builtin(diagram_id):
        raise ValueError(f"Built-in diagram {diagram_id!r} is read-only")


class DiagramStore:
    def __init__(self, backend: KeyValueBackend, key: str = config.DIAGRAMS_KEY) -> None:
        self._backend = backend
        self._key = key

    def _load(self) -> list[DiagramRecord]:
        records = []
        for item in load_array(self._backend, self._key):
            try:
                records.append(DiagramRecord.from_dict(item))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed stored diagram: %r", item)
        return records

    def _save(self, records: list[DiagramRecord]) -> None:
        save_array(self._backend, self._key, [r.to_dict() for r in records])

    def list_all(self) -> list[DiagramRecord]:
        """Return every stored diagram in storage order."""
        return self._load()

    def get(self, diagram_id: str) -> DiagramRecord | None:
        """Return one diagram by id, or None if it is not stored."""
        for record in self._load():
            if record.id == diagram_id:
                return record
        return None

    def create(self, name: str, code: str) -> DiagramRecord:
        """Create and persist a blank-theme diagram with a fresh id."""
        _check_name(name)
        ts = now_ms()
        record = DiagramRecord(
            id=new_id(),
            name=name,
            code=code,
            theme=DEFAULT_THEME,
            created_at=ts,
            updated_at=ts,
        )
        records = self._load()
        records.append(record)
        self._save(records)
        logger.debug("Created diagram %s (%r)", record.id, name)
        return record

    def create_from_template(self, template_id: str, name: str | None = None) -> DiagramRecord:
        """Create a diagram whose code is copied from a starter template."""
        template = get_template(template_id)
        if template is None:
            raise NotFoundError("Template", template_id)
        return self.create(name or template.name, template.code)

    def add(self, record: DiagramRecord) -> DiagramRecord:
        """Persist an already-built record, e.g. one produced by an importer.

        Collection membership is not carried over: the record is stored as
        uncategorized so it cannot reference a collection that does not exist.
        """
        _check_name(record.name)
        _check_theme(record.theme)
        _check_mutable(record.id)
        records = self._load()
        stored = replace(record, collection_ids=[])
        if any(r.id == stored.id for r in records):
            stored = replace(stored, id=new_id())
        records.append(stored)
        self._save(records)
        logger.debug("Added diagram %s (%r)", stored.id, stored.name)
        return stored

    def update(self, diagram_id: str, **fields) -> DiagramRecord:
        """Merge ``fields`` into a stored diagram and bump updated_at.

        Raises:
            NotFoundError: If no diagram has ``diagram_id``.
            ValueError: For unknown/immutable fields or invalid values.
        """
        _check_mutable(diagram_id)
        unknown = set(fields) - _UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update diagram field(s): {', '.join(sorted(unknown))}")
        if "name" in fields:
            _check_name(fields["name"])
        if "theme" in fields:
            _check_theme(fields["theme"])
        if "collection_ids" in fields:
            fields["collection_ids"] = list(dict.fromkeys(fields["collection_ids"] or []))

        records = self._load()
        for i, record in enumerate(records):
            if record.id == diagram_id:
                merged = replace(record, **fields)
                merged.updated_at = max(now_ms(), merged.created_at)
                records[i] = merged
                self._save(records)
                logger.debug("Updated diagram %s: %s", diagram_id, ", ".join(sorted(fields)))
                return merged
        raise NotFoundError("Diagram", diagram_id)

    def delete(self, diagram_id: str) -> None:
        """Remove a diagram. Deleting an unknown id is a no-op."""
        _check_mutable(diagram_id)
        records = self._load()
        remaining = [r for r in records if r.id != diagram_id]
        if len(remaining) == len(records):
            return
        self._save(remaining)
        logger.debug("Deleted diagram %s", diagram_id)
