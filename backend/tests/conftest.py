import sqlite3

import pytest

from database.store import RecordStore
from init_db import init_schema


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Retry backoff and inter-request pauses are recorded instead of slept."""
    slept = []
    monkeypatch.setattr("scrape.http.time.sleep", slept.append)
    return slept


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "sync.db"
    monkeypatch.setenv("DATABASE_PATH", str(path))
    conn = sqlite3.connect(path)
    init_schema(conn)
    conn.close()
    return str(path)


@pytest.fixture
def store(db_path):
    return RecordStore(db_path)


@pytest.fixture
def user_id(db_path):
    conn = sqlite3.connect(db_path)
    cur = conn.execute("INSERT INTO users (username) VALUES (?)", ("alice",))
    conn.commit()
    uid = cur.lastrowid
    conn.close()
    return uid
