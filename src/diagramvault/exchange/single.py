"""One diagram as a plain ``.mmd`` source file."""

from __future__ import annotations

import re

from diagramvault.clock import new_id, now_ms
from diagramvault.storage.records import DEFAULT_THEME, DiagramRecord

SINGLE_EXTENSION = ".mmd"
DEFAULT_IMPORT_NAME = "Imported Diagram"
DEFAULT_EXPORT_STEM = "diagram"

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9\-_ ]")
_EXTENSION_RE = re.compile(re.escape(SINGLE_EXTENSION) + r"$", re.IGNORECASE)


def safe_filename(name: str) -> str:
    """Strip everything outside letters, digits, ``-``, ``_`` and space."""
    return _UNSAFE_CHARS_RE.sub("", name).strip() or DEFAULT_EXPORT_STEM


def encode_single(diagram: DiagramRecord) -> tuple[str, str]:
    """Return ``(filename, text)``. The text is exactly the diagram source."""
    return safe_filename(diagram.name) + SINGLE_EXTENSION, diagram.code


def decode_single(filename: str, text: str) -> DiagramRecord:
    """Build a new, unsaved diagram from a source file. Any text is accepted."""
    name = _EXTENSION_RE.sub("", filename or "").strip()
    ts = now_ms()
    return DiagramRecord(
        id=new_id(),
        name=name or DEFAULT_IMPORT_NAME,
        code=text,
        theme=DEFAULT_THEME,
        created_at=ts,
        updated_at=ts,
    )
