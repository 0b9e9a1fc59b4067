import logging

from database.db import get_db
from logging_config import configure_logging

log = logging.getLogger(__name__)

SCHEMA = (
    '''CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    password TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)''',
    '''CREATE TABLE IF NOT EXISTS sessions (
    session_id TEXT PRIMARY KEY,
    user_id INTEGER NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
)''',
    # one handle per (user, platform); the sync flag doubles as the lock
    '''CREATE TABLE IF NOT EXISTS platform_handles (
    user_id INTEGER NOT NULL,
    platform TEXT NOT NULL,
    handle TEXT NOT NULL DEFAULT '',
    last_synced_at TEXT,
    sync_in_progress BOOLEAN NOT NULL DEFAULT 0,
    sync_started_at TEXT,
    last_sync_error TEXT,
    PRIMARY KEY(user_id, platform),
    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
)''',
    '''CREATE TABLE IF NOT EXISTS platform_profiles (
    user_id INTEGER NOT NULL,
    platform TEXT NOT NULL,
    body TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(user_id, platform),
    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
)''',
    '''CREATE TABLE IF NOT EXISTS progress (
    user_id INTEGER NOT NULL,
    platform TEXT NOT NULL,
    body TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY(user_id, platform),
    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
)''',
)


def init_schema(conn) -> None:
    for statement in SCHEMA:
        conn.execute(statement)
    conn.commit()


if __name__ == "__main__":
    configure_logging()
    conn = get_db()
    init_schema(conn)
    conn.close()
    log.info("Database schema ready")
