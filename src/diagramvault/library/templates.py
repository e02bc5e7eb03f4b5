"""Starter templates a new diagram can be created from."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagramTemplate:
    id: str
    name: str
    description: str
    category: str
    icon: str
    code: str


TEMPLATES: list[DiagramTemplate] = [
    DiagramTemplate(
        id="flowchart-basic",
        name="Basic Flowchart",
        description="Start, a decision, and an end node",
        category="Flowchart",
        icon="🔄",
        code="""flowchart TD
    A[Start] --> B{Ready?}
    B -->|Yes| C[Ship it]
    B -->|No| D[Keep working]
    D --> B
    C --> E[End]""",
    ),
    DiagramTemplate(
        id="sequence-basic",
        name="Login Sequence",
        description="A user signing in through a frontend and backend",
        category="Sequence",
        icon="👤",
        code="""sequenceDiagram
    participant U as User
    participant F as Frontend
    participant B as Backend
    U->>F: Enter credentials
    F->>B: POST /login
    B-->>F: Session token
    F-->>U: Signed in""",
    ),
    DiagramTemplate(
        id="class-basic",
        name="Class Diagram",
        description="A small inheritance hierarchy",
        category="Class",
        icon="🏗️",
        code="""classDiagram
    class Shape {
        +area() float
    }
    class Circle {
        +float radius
    }
    class Square {
        +float side
    }
    Shape <|-- Circle
    Shape <|-- Square""",
    ),
    DiagramTemplate(
        id="state-basic",
        name="State Machine",
        description="Lifecycle of a background job",
        category="State",
        icon="⚡",
        code="""stateDiagram-v2
    [*] --> Queued
    Queued --> Running
    Running --> Done
    Running --> Failed
    Failed --> Queued: retry
    Done --> [*]""",
    ),
    DiagramTemplate(
        id="er-basic",
        name="Entity Relationship",
        description="Customers, orders, and line items",
        category="Database",
        icon="🗃️",
        code="""erDiagram
    CUSTOMER ||--o{ ORDER : places
    ORDER ||--|{ LINE_ITEM : contains
    PRODUCT ||--o{ LINE_ITEM : includes""",
    ),
    DiagramTemplate(
        id="gantt-basic",
        name="Project Timeline",
        description="Two phases of a small project",
        category="Project",
        icon="📊",
        code="""gantt
    title Project plan
    dateFormat YYYY-MM-DD
    section Design
    Research      :a1, 2024-01-01, 7d
    Mockups       :after a1, 5d
    section Build
    Implementation :2024-01-15, 14d""",
    ),
    DiagramTemplate(
        id="mindmap-basic",
        name="Mind Map",
        description="Brainstorming around a central topic",
        category="Planning",
        icon="🧠",
        code="""mindmap
  root((Product))
    Users
      Personas
      Interviews
    Features
      Import
      Sharing""",
    ),
]


def get_template(template_id: str) -> DiagramTemplate | None:
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    return None


def templates_by_category(category: str) -> list[DiagramTemplate]:
    return [t for t in TEMPLATES if t.category == category]
