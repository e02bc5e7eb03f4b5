"""Heuristics for recognizing Mermaid source in pasted text."""

from __future__ import annotations

import re

# Diagram type keyword -> display name for a diagram created from a paste.
_DIAGRAM_KINDS: list[tuple[str, str]] = [
    ("flowchart", "Flowchart Diagram"),
    ("graph", "Flowchart Diagram"),
    ("sequencediagram", "Sequence Diagram"),
    ("classdiagram", "Class Diagram"),
    ("statediagram", "State Diagram"),
    ("erdiagram", "Entity Relationship Diagram"),
    ("journey", "User Journey"),
    ("gantt", "Gantt Chart"),
    ("pie", "Pie Chart"),
    ("requirement", "Requirement Diagram"),
    ("c4context", "C4 Context Diagram"),
    ("mindmap", "Mind Map"),
    ("timeline", "Timeline"),
    ("gitgraph", "Git Graph"),
    ("quadrantchart", "Quadrant Chart"),
    ("xychart", "XY Chart"),
]

_LINE_PATTERNS = [
    re.compile(r"^[A-Z]\s*-->", re.MULTILINE),
    re.compile(r"^[A-Z]\s*---", re.MULTILINE),
    re.compile(r"^\s*participant\s+", re.MULTILINE),
    re.compile(r"^\s*[A-Z][A-Z0-9]*\s*:\s*", re.MULTILINE),
    re.compile(r"^\s*state\s+", re.MULTILINE),
    re.compile(r"^\s*[A-Z][A-Z0-9_]*\s*\|\|--o", re.MULTILINE),
]

_STYLE_RE = re.compile(r"style\s+\w+\s+fill:")
_NODE_LABEL_RE = re.compile(r"([A-Z][A-Z0-9]*)\[([^\]]+)\]")

PASTED_DIAGRAM_NAME = "Pasted Diagram"


def is_diagram_source(text: str) -> bool:
    """Return True if ``text`` looks like Mermaid diagram source."""
    if not text:
        return False
    stripped = text.strip()
    if len(stripped) < 5:
        return False

    lowered = stripped.lower()
    if any(lowered.startswith(keyword) for keyword, _ in _DIAGRAM_KINDS):
        return True

    if any(p.search(stripped) for p in _LINE_PATTERNS):
        return True

    has_links = "-->" in stripped or "---" in stripped
    has_nodes = "[" in stripped and "]" in stripped
    return (has_links and has_nodes) or ":::" in stripped or bool(_STYLE_RE.search(stripped))


def suggest_name(code: str) -> str:
    """Pick a display name for a diagram created from pasted source."""
    first_line = code.strip().split("\n")[0].strip().lower()
    for keyword, name in _DIAGRAM_KINDS:
        if first_line.startswith(keyword):
            return name

    match = _NODE_LABEL_RE.search(code)
    if match:
        return f"{match.group(2)} Diagram"
    return PASTED_DIAGRAM_NAME
