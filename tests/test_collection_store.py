"""Tests for CollectionStore CRUD, two-sided membership, and cascade cleanup."""

from __future__ import annotations

import random

import pytest

from diagramvault.errors import NotFoundError
from tests.helpers import assert_membership_symmetric


class TestCollectionCRUD:
    def test_create_defaults(self, collections):
        c = collections.create("Work")
        assert c.name == "Work"
        assert c.color == "#3B82F6"
        assert c.icon == "folder"
        assert c.description is None
        assert c.diagram_ids == []
        assert c.created_at == c.updated_at

    def test_create_with_metadata(self, collections):
        c = collections.create("Ideas", description="Scratch", color="#ff0000", icon="star")
        assert (c.description, c.color, c.icon) == ("Scratch", "#ff0000", "star")

    def test_create_rejects_blank_name(self, collections):
        with pytest.raises(ValueError):
            collections.create("")

    def test_update(self, collections):
        c = collections.create("Old")
        updated = collections.update(c.id, name="New", icon="box")
        assert updated.name == "New"
        assert updated.icon == "box"
        assert collections.get(c.id) == updated

    def test_update_missing(self, collections):
        with pytest.raises(NotFoundError):
            collections.update("missing", name="x")

    def test_update_refuses_membership(self, collections):
        c = collections.create("C")
        with pytest.raises(ValueError):
            collections.update(c.id, diagram_ids=["x"])

    def test_list_order(self, collections):
        for name in ["a", "b"]:
            collections.create(name)
        assert [c.name for c in collections.list_all()] == ["a", "b"]

    def test_separate_namespace(self, backend, collections, diagrams):
        diagrams.create("d", "")
        collections.create("c")
        assert backend.get("mermaid-diagrams") != backend.get("mermaid-collections")
        assert len(diagrams.list_all()) == 1
        assert len(collections.list_all()) == 1


class TestMembership:
    def test_add_updates_both_sides(self, collections, diagrams):
        c = collections.create("C")
        d = diagrams.create("D", "")
        collections.add_diagram_to_collection(c.id, d.id)
        assert collections.get(c.id).diagram_ids == [d.id]
        assert diagrams.get(d.id).collection_ids == [c.id]

    def test_add_twice_is_noop(self, collections, diagrams):
        c = collections.create("C")
        d = diagrams.create("D", "")
        collections.add_diagram_to_collection(c.id, d.id)
        collections.add_diagram_to_collection(c.id, d.id)
        assert collections.get(c.id).diagram_ids == [d.id]
        assert diagrams.get(d.id).collection_ids == [c.id]

    def test_add_missing_collection(self, collections, diagrams):
        d = diagrams.create("D", "")
        with pytest.raises(NotFoundError):
            collections.add_diagram_to_collection("missing", d.id)
        assert diagrams.get(d.id).collection_ids == []

    def test_add_missing_diagram(self, collections):
        c = collections.create("C")
        with pytest.raises(NotFoundError):
            collections.add_diagram_to_collection(c.id, "missing")
        assert collections.get(c.id).diagram_ids == []

    def test_builtin_diagram_cannot_join(self, collections):
        c = collections.create("C")
        with pytest.raises(NotFoundError):
            collections.add_diagram_to_collection(c.id, "welcome")

    def test_remove_both_sides(self, collections, diagrams):
        c = collections.create("C")
        d = diagrams.create("D", "")
        collections.add_diagram_to_collection(c.id, d.id)
        collections.remove_diagram_from_collection(c.id, d.id)
        assert collections.get(c.id).diagram_ids == []
        assert diagrams.get(d.id).collection_ids == []

    def test_remove_non_member_is_noop(self, collections, diagrams):
        c = collections.create("C")
        d = diagrams.create("D", "")
        collections.remove_diagram_from_collection(c.id, d.id)
        assert_membership_symmetric(collections)

    def test_remove_missing_collection(self, collections, diagrams):
        d = diagrams.create("D", "")
        with pytest.raises(NotFoundError):
            collections.remove_diagram_from_collection("missing", d.id)

    def test_diagram_in_many_collections(self, collections, diagrams):
        d = diagrams.create("D", "")
        a = collections.create("A")
        b = collections.create("B")
        collections.add_diagram_to_collection(a.id, d.id)
        collections.add_diagram_to_collection(b.id, d.id)
        assert diagrams.get(d.id).collection_ids == [a.id, b.id]
        assert_membership_symmetric(collections)

    def test_diagrams_in(self, collections, diagrams):
        c = collections.create("C")
        first = diagrams.create("first", "")
        second = diagrams.create("second", "")
        collections.add_diagram_to_collection(c.id, second.id)
        collections.add_diagram_to_collection(c.id, first.id)
        assert [d.name for d in collections.diagrams_in(c.id)] == ["second", "first"]

    def test_diagrams_in_unknown_collection(self, collections):
        assert collections.diagrams_in("missing") == []


class TestCascade:
    def test_delete_collection_strips_references(self, collections, diagrams):
        c = collections.create("C")
        keep = collections.create("Keep")
        d1 = diagrams.create("one", "")
        d2 = diagrams.create("two", "")
        for d in (d1, d2):
            collections.add_diagram_to_collection(c.id, d.id)
            collections.add_diagram_to_collection(keep.id, d.id)

        collections.delete(c.id)

        assert [x.id for x in collections.list_all()] == [keep.id]
        assert diagrams.get(d1.id).collection_ids == [keep.id]
        assert diagrams.get(d2.id).collection_ids == [keep.id]
        assert_membership_symmetric(collections)

    def test_delete_collection_keeps_diagrams(self, collections, diagrams):
        c = collections.create("C")
        d = diagrams.create("D", "")
        collections.add_diagram_to_collection(c.id, d.id)
        collections.delete(c.id)
        assert diagrams.get(d.id) is not None

    def test_delete_unknown_collection_is_noop(self, collections):
        collections.create("C")
        collections.delete("missing")
        assert len(collections.list_all()) == 1

    def test_delete_diagram_strips_from_collections(self, collections, diagrams):
        a = collections.create("A")
        b = collections.create("B")
        d = diagrams.create("D", "")
        other = diagrams.create("other", "")
        for c in (a, b):
            collections.add_diagram_to_collection(c.id, d.id)
        collections.add_diagram_to_collection(a.id, other.id)

        collections.delete_diagram(d.id)

        assert diagrams.get(d.id) is None
        assert collections.get(a.id).diagram_ids == [other.id]
        assert collections.get(b.id).diagram_ids == []
        assert_membership_symmetric(collections)


class TestSymmetryUnderRandomOperations:
    """Random add/remove/delete sequences never break the two-sided relation."""

    @pytest.mark.parametrize("seed", range(5))
    def test_random_sequence(self, collections, diagrams, seed):
        rng = random.Random(seed)
        for i in range(4):
            diagrams.create(f"d{i}", "")
        for i in range(3):
            collections.create(f"c{i}")

        for _ in range(40):
            op = rng.choice(["add", "add", "remove", "delete_collection", "delete_diagram", "new"])
            live_c = [c.id for c in collections.list_all()]
            live_d = [d.id for d in diagrams.list_all()]
            if op == "new":
                collections.create("extra")
            elif op == "add" and live_c and live_d:
                collections.add_diagram_to_collection(rng.choice(live_c), rng.choice(live_d))
            elif op == "remove" and live_c and live_d:
                collections.remove_diagram_from_collection(rng.choice(live_c), rng.choice(live_d))
            elif op == "delete_collection" and live_c:
                collections.delete(rng.choice(live_c))
            elif op == "delete_diagram" and live_d:
                collections.delete_diagram(rng.choice(live_d))
            assert_membership_symmetric(collections)
