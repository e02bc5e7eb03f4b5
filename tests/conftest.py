"""Shared fixtures — in-memory backends by default, SQLite where persistence matters."""

import pytest

from diagramvault.exchange.importer import ImportCoordinator
from diagramvault.storage.collection_store import CollectionStore
from diagramvault.storage.diagram_store import DiagramStore
from diagramvault.storage.kv_store import MemoryKVStore, SqliteKVStore


@pytest.fixture
def backend():
    return MemoryKVStore()


@pytest.fixture
def sqlite_backend(tmp_path):
    """SqliteKVStore with its table created, in a per-test directory."""
    kv = SqliteKVStore(tmp_path / "data" / "test.db")
    kv.init_db()
    yield kv
    kv.close()


@pytest.fixture
def diagrams(backend):
    return DiagramStore(backend)


@pytest.fixture
def collections(backend, diagrams):
    return CollectionStore(backend, diagrams)


@pytest.fixture
def coordinator(diagrams):
    return ImportCoordinator(diagrams)
