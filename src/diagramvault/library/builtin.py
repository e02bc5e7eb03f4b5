"""Read-only diagrams shipped with the app.

These are synthesized on every call and never written to a store, so
they cannot be edited, deleted, or added to a collection.
"""

from __future__ import annotations

from diagramvault.clock import now_ms
from diagramvault.storage.records import DiagramRecord

WELCOME_ID = "welcome"
TUTORIAL_ID = "tutorial"
BUILTIN_IDS = frozenset({WELCOME_ID, TUTORIAL_ID})

_WELCOME_CODE = """flowchart TD
    Start([🚀 Welcome]) --> Library[📚 Your diagram library]
    Library --> Collections[🗂️ Group diagrams into collections]
    Library --> Exchange[🔁 Move diagrams in and out]
    Exchange --> Backup["💾 Full backup as .json"]
    Exchange --> Single["📄 One diagram as .mmd"]
    Exchange --> Share["🔗 Shareable link"]
    Library --> Start2[➕ Create from blank, template, or paste]

    style Start fill:#4F46E5,stroke:#1E40AF,stroke-width:3px,color:#fff
    style Exchange fill:#059669,stroke:#047857,stroke-width:2px,color:#fff"""

_TUTORIAL_CODE = """flowchart TD
    Start([🎯 Mermaid basics]) --> Shapes
    subgraph Shapes [🔷 Node shapes]
        R[Rectangle] --- Ro(Rounded) --- Di{Diamond} --- Ci((Circle))
    end
    Shapes --> Arrows
    subgraph Arrows [➡️ Links]
        A1[A] --> B1[B]
        A2[A] -.-> B2[B]
        A3[A] ==> B3[B]
        A4[A] -->|label| B4[B]
    end
    Arrows --> Styling[🎨 style A fill:#f9f,stroke:#333]"""


def welcome_diagram() -> DiagramRecord:
    ts = now_ms()
    return DiagramRecord(
        id=WELCOME_ID,
        name="🎉 Welcome to the Diagram Library",
        code=_WELCOME_CODE,
        theme="dark",
        created_at=ts,
        updated_at=ts,
    )


def tutorial_diagram() -> DiagramRecord:
    ts = now_ms()
    return DiagramRecord(
        id=TUTORIAL_ID,
        name="📚 Mermaid Syntax Tutorial",
        code=_TUTORIAL_CODE,
        theme="light",
        created_at=ts,
        updated_at=ts,
    )


def builtin_diagrams() -> list[DiagramRecord]:
    return [welcome_diagram(), tutorial_diagram()]


def is_builtin(diagram_id: str) -> bool:
    return diagram_id in BUILTIN_IDS
