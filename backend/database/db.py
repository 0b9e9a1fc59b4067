import sqlite3

import config


def get_db(path: str | None = None):
    conn = sqlite3.connect(path or config.database_path())
    conn.row_factory = sqlite3.Row
    return conn
