"""Shared fixtures: a throwaway SQLite database per test."""

import sqlite3

import pytest
from fastapi.testclient import TestClient

from shiptivity_api.app.core.config import settings
from shiptivity_api.app.core.db import init_db
from shiptivity_api.app.main import app


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the application at an empty, migrated database."""
    path = tmp_path / "clients.db"
    monkeypatch.setattr(settings, "database_url", str(path))
    init_db()
    return path


@pytest.fixture
def seed(db_path):
    """Insert clients lane by lane, ranked in the order given.

    ``seed({"backlog": ["A", "B"], "complete": ["C"]})`` returns a
    ``{name: id}`` mapping.
    """

    def _seed(lanes):
        ids = {}
        conn = sqlite3.connect(db_path)
        try:
            for status, names in lanes.items():
                for priority, name in enumerate(names, start=1):
                    cursor = conn.execute(
                        "INSERT INTO clients (name, status, priority) VALUES (?, ?, ?)",
                        (name, status, priority),
                    )
                    ids[name] = cursor.lastrowid
            conn.commit()
        finally:
            conn.close()
        return ids

    return _seed


@pytest.fixture
def fetch_lanes(db_path):
    """Read back ``{status: [names in priority order]}`` straight from SQLite."""

    def _fetch():
        conn = sqlite3.connect(db_path)
        try:
            rows = conn.execute(
                "SELECT name, status FROM clients ORDER BY status, priority"
            ).fetchall()
        finally:
            conn.close()
        lanes = {}
        for name, status in rows:
            lanes.setdefault(status, []).append(name)
        return lanes

    return _fetch


@pytest.fixture
def client(db_path):
    with TestClient(app) as test_client:
        yield test_client
