"""Full-library JSON backup: encode all diagrams, decode with per-record tolerance."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from diagramvault.clock import new_id, now_ms
from diagramvault.errors import FormatError, ParseError, ValidationError
from diagramvault.exchange.result import ImportResult
from diagramvault.storage.records import DiagramRecord

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"
BACKUP_EXTENSION = ".json"
BACKUP_FILENAME_PREFIX = "mermaid-diagrams-backup"


class BackupDiagram(BaseModel):
    """Shape of one diagram inside a backup file. Types are checked strictly."""

    model_config = ConfigDict(strict=True, extra="ignore")

    id: str
    name: str
    code: str
    theme: Literal["light", "dark"]
    createdAt: float = Field(allow_inf_nan=False)
    updatedAt: float = Field(allow_inf_nan=False)
    collectionIds: list[str] | None = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v


def encode_backup(diagrams: list[DiagramRecord], export_date: int | None = None) -> str:
    """Wrap diagrams with the version tag and export time, as indented JSON."""
    document = {
        "version": BACKUP_VERSION,
        "exportDate": export_date if export_date is not None else now_ms(),
        "diagrams": [d.to_dict() for d in diagrams],
    }
    return json.dumps(document, indent=2, ensure_ascii=False)


def backup_filename(when: datetime | None = None) -> str:
    """Download name with a UTC timestamp, e.g. ``...-2024-05-01T09-30-00.json``."""
    when = when or datetime.now(timezone.utc)
    stamp = when.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{BACKUP_FILENAME_PREFIX}-{stamp}{BACKUP_EXTENSION}"


def _parse_document(text: str) -> list[Any]:
    """Parse backup text and return its raw ``diagrams`` list.

    Raises:
        ParseError: If the text is not JSON.
        FormatError: If ``version`` or the ``diagrams`` array is missing.
    """
    try:
        document = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as e:
        raise ParseError(str(e)) from e

    if not isinstance(document, dict):
        raise FormatError("Invalid backup file format: expected a JSON object")
    version = document.get("version")
    if not isinstance(version, str) or not version:
        raise FormatError("Invalid backup file format: missing version")
    diagrams = document.get("diagrams")
    if not isinstance(diagrams, list):
        raise FormatError("Invalid backup file format: missing diagrams array")
    if version != BACKUP_VERSION:
        logger.info("Reading backup version %r as %s", version, BACKUP_VERSION)
    return diagrams


def _validate_entry(index: int, entry: Any) -> BackupDiagram:
    if not isinstance(entry, dict):
        raise ValidationError(index, "not an object")
    try:
        return BackupDiagram.model_validate(entry)
    except PydanticValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValidationError(
            index, f"missing or invalid field(s) {', '.join(fields)}"
        ) from e


def decode_backup(text: str) -> ImportResult:
    """Decode backup text into fresh, unsaved diagram records.

    Never raises on bad input. Invalid entries are dropped with one error
    string each; the remaining entries are still returned. Every surviving
    record gets a newly generated id and ``updated_at = now``.
    """
    try:
        entries = _parse_document(text)
    except ParseError as e:
        return ImportResult.failure(f"Failed to parse backup file: {e}")
    except FormatError as e:
        return ImportResult.failure(str(e))

    errors: list[str] = []
    diagrams: list[DiagramRecord] = []
    for index, entry in enumerate(entries):
        try:
            valid = _validate_entry(index, entry)
        except ValidationError as e:
            errors.append(str(e))
            continue
        created_at = int(valid.createdAt)
        diagrams.append(
            DiagramRecord(
                id=new_id(),
                name=valid.name,
                code=valid.code,
                theme=valid.theme,
                created_at=created_at,
                updated_at=max(now_ms(), created_at),
            )
        )

    logger.debug("Decoded backup: %d valid, %d invalid", len(diagrams), len(errors))
    return ImportResult(
        success=bool(diagrams),
        imported=len(diagrams),
        errors=errors,
        diagrams=diagrams,
    )
