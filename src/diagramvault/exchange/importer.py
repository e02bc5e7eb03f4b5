"""Batch import of dropped or picked files, plus share-link import."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from diagramvault import config
from diagramvault.exchange.backup import BACKUP_EXTENSION, decode_backup
from diagramvault.exchange.result import ImportResult
from diagramvault.exchange.share import diagram_from_url, strip_share_param
from diagramvault.exchange.single import SINGLE_EXTENSION, decode_single
from diagramvault.storage.diagram_store import DiagramStore
from diagramvault.storage.records import DiagramRecord

logger = logging.getLogger(__name__)

VALID_EXTENSIONS = (BACKUP_EXTENSION, SINGLE_EXTENSION)
VALID_CONTENT_TYPES = ("application/json", "text/plain")


class ImportSource(Protocol):
    """Anything with a filename and an async ``read()``, e.g. a FastAPI UploadFile."""

    filename: str | None
    content_type: str | None

    async def read(self) -> bytes: ...


@dataclass
class LocalFile:
    """An ImportSource backed by a file on disk."""

    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def content_type(self) -> str | None:
        return mimetypes.guess_type(self.path.name)[0]

    async def read(self) -> bytes:
        return await asyncio.to_thread(self.path.read_bytes)


def is_valid_import_file(filename: str, content_type: str | None = None) -> bool:
    """Accept a file by extension or by MIME type."""
    lowered = filename.lower()
    return lowered.endswith(VALID_EXTENSIONS) or content_type in VALID_CONTENT_TYPES


class ImportCoordinator:
    def __init__(self, diagrams: DiagramStore, max_bytes: int | None = None) -> None:
        self._diagrams = diagrams
        self._max_bytes = max_bytes if max_bytes is not None else config.MAX_IMPORT_BYTES

    async def _process_one(self, source: ImportSource) -> ImportResult:
        name = source.filename or ""
        if not is_valid_import_file(name, source.content_type):
            return ImportResult.failure(f"Unsupported file type: {name}")

        lowered = name.lower()
        if not lowered.endswith(VALID_EXTENSIONS):
            return ImportResult.failure(f"Unknown file type: {name}")

        try:
            raw = await source.read()
        except OSError as e:
            return ImportResult.failure(f"Failed to read file {name}: {e}")
        if len(raw) > self._max_bytes:
            return ImportResult.failure(
                f"File too large: {name} ({len(raw)} bytes, limit {self._max_bytes})"
            )

        # Decode like a browser text reader: drop a BOM, replace bad bytes.
        text = raw.decode("utf-8-sig", errors="replace")
        if lowered.endswith(BACKUP_EXTENSION):
            result = decode_backup(text)
            result.errors = [f"{name}: {e}" for e in result.errors]
            return result

        diagram = decode_single(name, text)
        return ImportResult(success=True, imported=1, diagrams=[diagram])

    async def process_files(self, files: list[ImportSource]) -> ImportResult:
        """Decode every file, in order, into one aggregate result.

        A bad file never fails the batch: it contributes an error string and
        processing continues with the next file. Nothing is persisted.
        """
        success = False
        imported = 0
        errors: list[str] = []
        diagrams: list[DiagramRecord] = []

        for source in files:
            result = await self._process_one(source)
            if result.success:
                success = True
            else:
                logger.warning("Import of %r failed: %s", source.filename, "; ".join(result.errors))
            logger.info(
                "Import %r: %d diagram(s), %d error(s)",
                source.filename, result.imported, len(result.errors),
            )
            imported += result.imported
            errors.extend(result.errors)
            diagrams.extend(result.diagrams)

        return ImportResult(success=success, imported=imported, errors=errors, diagrams=diagrams)

    def persist(self, result: ImportResult) -> ImportResult:
        """Store each decoded diagram and return the result with stored records."""
        stored = [self._diagrams.add(d) for d in result.diagrams]
        return ImportResult(
            success=result.success,
            imported=len(stored),
            errors=list(result.errors),
            diagrams=stored,
        )

    async def import_files(self, files: list[ImportSource]) -> ImportResult:
        """process_files followed by persist, with the store writes off the event loop."""
        decoded = await self.process_files(files)
        return await asyncio.to_thread(self.persist, decoded)

    def import_shared_url(self, url: str) -> tuple[DiagramRecord | None, str]:
        """Import the diagram carried by a share URL, if any.

        Returns the stored diagram (or None) and the URL with the share
        parameter removed, which the caller should show instead.
        """
        diagram = diagram_from_url(url)
        cleaned = strip_share_param(url)
        if diagram is None:
            return None, cleaned
        stored = self._diagrams.add(diagram)
        logger.info("Imported shared diagram %s (%r)", stored.id, stored.name)
        return stored, cleaned
