"""Tests for built-in diagrams, templates, and paste detection."""

from __future__ import annotations

import pytest

from diagramvault.library.builtin import BUILTIN_IDS, builtin_diagrams, is_builtin
from diagramvault.library.detect import is_diagram_source, suggest_name
from diagramvault.library.templates import TEMPLATES, get_template, templates_by_category


class TestBuiltin:
    def test_two_virtual_diagrams(self):
        ids = [d.id for d in builtin_diagrams()]
        assert ids == ["welcome", "tutorial"]
        assert set(ids) == BUILTIN_IDS

    def test_never_in_store(self, diagrams):
        assert diagrams.list_all() == []
        assert diagrams.get("welcome") is None

    def test_is_builtin(self):
        assert is_builtin("tutorial")
        assert not is_builtin("something-else")

    def test_cannot_delete(self, diagrams):
        with pytest.raises(ValueError):
            diagrams.delete("welcome")


class TestTemplates:
    def test_ids_unique(self):
        ids = [t.id for t in TEMPLATES]
        assert len(ids) == len(set(ids))

    def test_templates_are_diagram_source(self):
        for t in TEMPLATES:
            assert is_diagram_source(t.code), t.id

    def test_lookup(self):
        assert get_template("sequence-basic").category == "Sequence"
        assert get_template("nope") is None

    def test_by_category(self):
        assert [t.id for t in templates_by_category("State")] == ["state-basic"]


class TestDetect:
    @pytest.mark.parametrize("text", [
        "graph TD\n A-->B",
        "  flowchart LR\n x --> y",
        "sequenceDiagram\n Alice->>Bob: hi",
        "A --> B",
        "participant Alice",
        "x[Start] --> y[End]",
        "style node1 fill:#f9f",
    ])
    def test_detected(self, text):
        assert is_diagram_source(text)

    @pytest.mark.parametrize("text", ["", "hi", "just some prose about graphs", "hello world, nothing here"])
    def test_not_detected(self, text):
        assert not is_diagram_source(text)

    @pytest.mark.parametrize("code,name", [
        ("graph TD\n A-->B", "Flowchart Diagram"),
        ("sequenceDiagram\n A->>B: x", "Sequence Diagram"),
        ("erDiagram\n A ||--o{ B : has", "Entity Relationship Diagram"),
        ("gitGraph\n commit", "Git Graph"),
        ("X[Checkout] --> Y", "Checkout Diagram"),
        ("x --> y", "Pasted Diagram"),
    ])
    def test_suggest_name(self, code, name):
        assert suggest_name(code) == name
