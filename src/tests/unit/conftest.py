"""
Unit Test Firewall - Automatically mocks external IO for unit tests.

This conftest.py applies to all tests in src/tests/unit/ and subdirectories.
It uses autouse=True fixtures so no unit test can open a real ArangoDB
connection.

**Patching Strategy: "Patch the Source, Not the Consumer"**

Mocks patch at the source library level (`arango.ArangoClient`), not the
modules that import it, because the backend factory imports the client
lazily.
"""

from unittest.mock import MagicMock, Mock

import pytest


def _create_mock_collection(name: str):
    mock_col = MagicMock()
    mock_col.name = name
    mock_col.get.return_value = None
    mock_col.insert.return_value = {"_key": "test-key", "_id": f"{name}/test-key", "_rev": "1"}
    return mock_col


@pytest.fixture
def mock_arango_db():
    """Mock StandardDatabase with chaining support (db.collection().insert())."""
    mock_db = Mock()
    mock_db.version.return_value = "3.11.0"
    mock_db.has_collection.return_value = True
    collections = {}

    def collection(name: str):
        if name not in collections:
            collections[name] = _create_mock_collection(name)
        return collections[name]

    mock_db.collection.side_effect = collection
    mock_db.create_collection.side_effect = collection
    return mock_db


@pytest.fixture(autouse=True)
def mock_arango_firewall(monkeypatch, mock_arango_db):
    """Automatically mock ArangoDB client for all unit tests."""
    calls = []

    def mock_arango_client(hosts: str):
        calls.append(hosts)
        mock_client = Mock()
        mock_client.db.return_value = mock_arango_db
        return mock_client

    monkeypatch.setattr("arango.ArangoClient", mock_arango_client)
    mock_arango_client.calls = calls
    yield mock_arango_client
