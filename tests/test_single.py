"""Tests for the single-diagram .mmd codec."""

from __future__ import annotations

import pytest

from diagramvault.exchange.single import decode_single, encode_single, safe_filename
from diagramvault.storage.records import DiagramRecord


def _diagram(name="Test", code="graph TD\n A-->B"):
    return DiagramRecord(id="x", name=name, code=code, theme="dark", created_at=1, updated_at=2)


class TestEncodeSingle:
    def test_text_is_exactly_code(self):
        filename, text = encode_single(_diagram())
        assert filename == "Test.mmd"
        assert text == "graph TD\n A-->B"

    def test_unsafe_characters_stripped(self):
        filename, _ = encode_single(_diagram(name="My/Diagram: v2 (final)!"))
        assert filename == "MyDiagram v2 final.mmd"

    def test_keeps_dash_underscore_space(self):
        assert safe_filename("a-b_c d") == "a-b_c d"

    def test_all_unsafe_falls_back(self):
        assert encode_single(_diagram(name="🎉🎉"))[0] == "diagram.mmd"


class TestDecodeSingle:
    def test_name_from_filename(self):
        d = decode_single("Test.mmd", "graph TD")
        assert d.name == "Test"
        assert d.code == "graph TD"
        assert d.theme == "light"
        assert d.created_at == d.updated_at
        assert d.collection_ids == []

    def test_uppercase_extension(self):
        assert decode_single("Flow.MMD", "").name == "Flow"

    def test_empty_name_falls_back(self):
        assert decode_single(".mmd", "x").name == "Imported Diagram"

    def test_fresh_ids(self):
        assert decode_single("a.mmd", "").id != decode_single("a.mmd", "").id

    @pytest.mark.parametrize("code", ["", "graph TD\n A-->B", "flowchart LR\n A[🚀 Ünï] --> B", "\r\n\t  "])
    def test_round_trip_code(self, code):
        filename, text = encode_single(_diagram(code=code))
        assert decode_single(filename, text).code == code

    def test_export_then_import_scenario(self):
        filename, text = encode_single(_diagram(name="Test", code="graph TD\n A-->B"))
        d = decode_single(filename, text)
        assert d.code == "graph TD\n A-->B"
        assert d.name == "Test"
