"""Result of decoding one or more import sources."""

from __future__ import annotations

from dataclasses import dataclass, field

from diagramvault.storage.records import DiagramRecord


@dataclass
class ImportResult:
    """Outcome of an import.

    ``success`` is True when anything was imported, even if some files or
    records failed. Failures are human-readable strings in ``errors``.
    """

    success: bool
    imported: int = 0
    errors: list[str] = field(default_factory=list)
    diagrams: list[DiagramRecord] = field(default_factory=list)

    @classmethod
    def failure(cls, message: str) -> ImportResult:
        return cls(success=False, imported=0, errors=[message], diagrams=[])

    @property
    def current_id(self) -> str | None:
        """Id of the diagram to select after the import: the first one."""
        return self.diagrams[0].id if self.diagrams else None
